"""Adapters to external processes and the container engine CLI."""

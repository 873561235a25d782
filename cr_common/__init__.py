"""Shared helpers for cirunner."""

from cr_common.api import CRError, SetupError, configure_logging

__all__ = ["configure_logging", "CRError", "SetupError"]

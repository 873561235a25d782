"""Terminal front-end for cirunner."""

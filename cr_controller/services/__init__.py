"""Controller services."""

from cr_controller.services.readiness import wait_until_ready
from cr_controller.services.results import ResultAggregator, format_duration, summary_rows

__all__ = ["ResultAggregator", "format_duration", "summary_rows", "wait_until_ready"]

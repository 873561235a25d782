"""Thread-safe collection of shard outcomes."""

from __future__ import annotations

import logging
import threading

from cr_controller.models.types import RunOutcome, RunSummary

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = ["RUN", "SUCCESS", "DURATION", "MESSAGE"]


def format_duration(seconds: float) -> str:
    """Render whole seconds like ``1h2m3s``, ``4m0s`` or ``12s``."""
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


class ResultAggregator:
    """Outcome store shared by every shard thread.

    ``append`` is the only mutation and runs under one lock. No deduplication
    happens: a second outcome for the same shard is kept and reported.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._outcomes: list[RunOutcome] = []

    def append(self, outcome: RunOutcome) -> None:
        with self._lock:
            if any(existing.shard_id == outcome.shard_id for existing in self._outcomes):
                logger.warning("Duplicate outcome recorded for run %s", outcome.shard_id)
            self._outcomes.append(outcome)

    def __len__(self) -> int:
        with self._lock:
            return len(self._outcomes)

    def finalize(self) -> RunSummary:
        """Stable sort by shard id (plain string order) and compute the verdict."""
        with self._lock:
            ordered = sorted(self._outcomes, key=lambda outcome: outcome.shard_id)
        return RunSummary(
            outcomes=tuple(ordered),
            success=all(outcome.success for outcome in ordered),
        )


def summary_rows(summary: RunSummary) -> list[list[str]]:
    """Rows for the results table, matching SUMMARY_COLUMNS."""
    return [
        [
            row.shard_id,
            str(row.success).lower(),
            format_duration(row.duration),
            row.message,
        ]
        for row in summary.rows
    ]

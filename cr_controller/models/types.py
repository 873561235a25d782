"""Run outcome and summary types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class OutcomeKind(str, Enum):
    """Terminal classification of a shard."""

    SUCCESS = "success"
    INFRA_FAILURE = "infra_failure"
    TEST_FAILURE = "test_failure"


@dataclass(frozen=True)
class RunOutcome:
    """Result of one shard, created once at its terminal state."""

    shard_id: str
    success: bool
    message: str
    duration: float
    stdout: str = ""
    stderr: str = ""
    kind: OutcomeKind = OutcomeKind.SUCCESS
    # CRError.to_dict() of the failure; None for a successful run.
    error: Optional[dict[str, Any]] = None


@dataclass(frozen=True)
class SummaryRow:
    shard_id: str
    success: bool
    duration: float
    message: str


@dataclass(frozen=True)
class RunSummary:
    """Sorted outcomes plus the overall verdict."""

    outcomes: tuple[RunOutcome, ...]
    success: bool

    @property
    def rows(self) -> list[SummaryRow]:
        return [
            SummaryRow(
                shard_id=outcome.shard_id,
                success=outcome.success,
                duration=outcome.duration,
                message=outcome.message,
            )
            for outcome in self.outcomes
        ]

    @property
    def failures(self) -> list[RunOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]

"""Controller-level UI contracts and no-op implementation."""

from __future__ import annotations

from typing import Protocol, Sequence


class UIAdapter(Protocol):
    """Minimal interface for presentation concerns."""

    def show_topic(self, message: str) -> None:
        """Render a section heading for a run step."""

    def show_info(self, message: str) -> None:
        """Render an informational message."""

    def show_warning(self, message: str) -> None:
        """Render a warning message."""

    def show_error(self, message: str) -> None:
        """Render an error message."""

    def show_success(self, message: str) -> None:
        """Render a success message."""

    def show_table(self, title: str, columns: Sequence[str], rows: list[Sequence[str]]) -> None:
        """Render a simple table."""

    def show_output(self, shard_id: str, stdout: str, stderr: str) -> None:
        """Render the captured streams of a failed run."""


class NoOpUIAdapter:
    """Swallows all presentation calls; used by library callers and tests."""

    def show_topic(self, message: str) -> None:  # pragma: no cover - trivial
        pass

    def show_info(self, message: str) -> None:  # pragma: no cover - trivial
        pass

    def show_warning(self, message: str) -> None:  # pragma: no cover - trivial
        pass

    def show_error(self, message: str) -> None:  # pragma: no cover - trivial
        pass

    def show_success(self, message: str) -> None:  # pragma: no cover - trivial
        pass

    def show_table(self, title: str, columns: Sequence[str], rows: list[Sequence[str]]) -> None:  # pragma: no cover - trivial
        pass

    def show_output(self, shard_id: str, stdout: str, stderr: str) -> None:  # pragma: no cover - trivial
        pass

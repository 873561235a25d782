"""Emergency cleanup on SIGINT/SIGTERM while shards are running."""

from __future__ import annotations

import logging
import signal
import threading
from types import FrameType
from typing import Any, Callable, Dict, Optional

from cr_common.errors import RunInterruptedError

logger = logging.getLogger(__name__)


class InterruptGuard:
    """
    Process-wide interrupt observer for the duration of a run.

    On the first signal it marks the run as interrupted, runs ``cleanup``
    synchronously and raises RunInterruptedError in the main thread, which
    unwinds the join barrier. In-flight commands are not stopped; removing
    their containers makes them fail. Further signals during cleanup are
    ignored.
    """

    def __init__(
        self,
        cleanup: Callable[[], None],
        *,
        enable_signals: bool = True,
        on_interrupt: Optional[Callable[[], None]] = None,
    ) -> None:
        self._cleanup = cleanup
        self._on_interrupt = on_interrupt
        self._enable_signals = enable_signals
        self._prev_handlers: Dict[int, Any] = {}
        self.interrupted = threading.Event()

    def _install_signal_handlers(self) -> None:
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                self._prev_handlers[sig] = signal.getsignal(sig)
                signal.signal(sig, self._handle_signal)
            except ValueError:
                # Not in the main thread; signals stay with the previous handler.
                logger.debug("Cannot install handler for %s outside the main thread", sig)

    def _handle_signal(self, signum: int, frame: FrameType | None) -> None:
        self.trigger(signum)

    def trigger(self, signum: int = signal.SIGINT) -> None:
        """Run the emergency cleanup once and abort the run."""
        if self.interrupted.is_set():
            return
        self.interrupted.set()
        name = signal.Signals(signum).name
        logger.warning("Received %s, removing all run containers", name)
        if self._on_interrupt:
            self._on_interrupt()
        try:
            self._cleanup()
        except Exception:
            logger.exception("Emergency cleanup failed")
        raise RunInterruptedError("CI runner killed", context={"signal": name})

    def restore(self) -> None:
        """Restore original signal handlers."""
        for sig, handler in self._prev_handlers.items():
            signal.signal(sig, handler)
        self._prev_handlers.clear()

    def __enter__(self) -> "InterruptGuard":
        if self._enable_signals:
            self._install_signal_handlers()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.restore()

import signal

import pytest

from cr_common.errors import RunInterruptedError
from cr_controller.engine.interrupts import InterruptGuard

pytestmark = pytest.mark.unit_controller


def test_trigger_runs_cleanup_once_and_aborts():
    calls = []
    guard = InterruptGuard(lambda: calls.append("cleanup"), enable_signals=False,
                           on_interrupt=lambda: calls.append("notice"))

    with pytest.raises(RunInterruptedError) as info:
        guard.trigger(signal.SIGTERM)
    assert info.value.context == {"signal": "SIGTERM"}
    assert guard.interrupted.is_set()
    assert calls == ["notice", "cleanup"]

    guard.trigger(signal.SIGINT)
    assert calls == ["notice", "cleanup"]


def test_cleanup_failure_still_aborts(caplog):
    def broken():
        raise RuntimeError("engine gone")

    guard = InterruptGuard(broken, enable_signals=False)
    with pytest.raises(RunInterruptedError):
        guard.trigger()
    assert "Emergency cleanup failed" in caplog.text


def test_handlers_installed_and_restored(monkeypatch):
    installed = {}
    previous = {signal.SIGINT: "prev-int", signal.SIGTERM: "prev-term"}
    monkeypatch.setattr(signal, "getsignal", lambda sig: previous[sig])
    monkeypatch.setattr(signal, "signal", lambda sig, handler: installed.__setitem__(sig, handler))

    guard = InterruptGuard(lambda: None)
    with guard:
        assert installed[signal.SIGINT] == guard._handle_signal
        assert installed[signal.SIGTERM] == guard._handle_signal
    assert installed == {signal.SIGINT: "prev-int", signal.SIGTERM: "prev-term"}


def test_signal_handler_raises_in_caller(monkeypatch):
    monkeypatch.setattr(signal, "getsignal", lambda sig: signal.SIG_DFL)
    monkeypatch.setattr(signal, "signal", lambda sig, handler: None)
    cleaned = []
    with InterruptGuard(lambda: cleaned.append(True)) as guard:
        with pytest.raises(RunInterruptedError):
            guard._handle_signal(signal.SIGINT, None)
    assert cleaned == [True]


def test_disabled_signals_leave_handlers_alone(monkeypatch):
    def fail(*_args):
        raise AssertionError("signal handlers must not be touched")

    monkeypatch.setattr(signal, "signal", fail)
    with InterruptGuard(lambda: None, enable_signals=False):
        pass

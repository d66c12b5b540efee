"""Tests for outcome capture and the OutcomeCollector."""

from __future__ import annotations

import pytest

from nursery import InvalidResultError, PanicError, TaskPanic, panic
from nursery.runtime import Outcome, OutcomeCollector, OutcomeKind, capture


# ═════════════════════════════════════════════════════════════════════════════
# capture()
# ═════════════════════════════════════════════════════════════════════════════


def test_capture_success() -> None:
    outcome = capture(lambda: None, "task")
    assert outcome.kind is OutcomeKind.COMPLETED
    assert outcome.error is None
    assert not outcome.failed


def test_capture_returned_error() -> None:
    err = ValueError("bad")
    outcome = capture(lambda: err, "task")
    assert outcome.kind is OutcomeKind.COMPLETED
    assert outcome.error is err
    assert outcome.failed


def test_capture_raised_exception() -> None:
    def boom() -> None:
        raise KeyError("k")
    
    outcome = capture(boom, "block")
    assert outcome.is_panic
    assert isinstance(outcome.payload, KeyError)
    assert outcome.exc is outcome.payload
    assert outcome.origin == "block"


def test_capture_unwraps_panic_payload() -> None:
    outcome = capture(lambda: panic(["payload"]), "task")
    assert outcome.is_panic
    assert outcome.payload == ["payload"]
    assert isinstance(outcome.exc, PanicError)


def test_capture_invalid_result() -> None:
    outcome = capture(lambda: "oops", "task")
    assert outcome.is_panic
    assert isinstance(outcome.payload, InvalidResultError)
    assert outcome.payload.result == "oops"


def test_capture_lets_keyboard_interrupt_through() -> None:
    def interrupt() -> None:
        raise KeyboardInterrupt
    
    with pytest.raises(KeyboardInterrupt):
        capture(interrupt, "task")


# ═════════════════════════════════════════════════════════════════════════════
# OutcomeCollector
# ═════════════════════════════════════════════════════════════════════════════


def _panic_outcome(value: object) -> Outcome:
    return Outcome.panicked("task", PanicError(value))


def test_collector_first_panic_wins() -> None:
    seen: list[TaskPanic] = []
    collector = OutcomeCollector(on_panic=seen.append)
    
    collector.record(_panic_outcome("first"))
    collector.record(_panic_outcome("second"))
    
    assert collector.panic is not None
    assert collector.panic.value == "first"
    assert collector.suppressed == 1
    assert [p.value for p in seen] == ["first", "second"]


def test_collector_raise_if_panicked_chains_cause() -> None:
    collector = OutcomeCollector()
    outcome = _panic_outcome("x")
    collector.record(outcome)
    
    with pytest.raises(TaskPanic) as exc_info:
        collector.raise_if_panicked()
    assert exc_info.value.__cause__ is outcome.exc
    assert exc_info.value.info is not None
    assert exc_info.value.info.payload_repr == "'x'"


def test_collector_no_panic_does_not_raise() -> None:
    collector = OutcomeCollector()
    collector.record(Outcome.completed("task"))
    collector.raise_if_panicked()
    assert collector.panic is None


def test_collector_delivers_errors() -> None:
    errors: list[BaseException] = []
    collector = OutcomeCollector(errors.append)
    err = OSError("x")
    
    collector.record(Outcome.completed("block", err))
    collector.record(Outcome.completed("task"))
    
    assert errors == [err]
    assert collector.delivered == 1


def test_collector_without_handler_discards() -> None:
    collector = OutcomeCollector()
    collector.record(Outcome.completed("task", ValueError("x")))
    assert collector.delivered == 0
    assert collector.panic is None


def test_collector_handler_failure_becomes_panic() -> None:
    def handler(err: BaseException) -> None:
        raise RuntimeError("broken")
    
    collector = OutcomeCollector(handler)
    collector.record(Outcome.completed("task", ValueError("x")))
    
    assert collector.panic is not None
    assert collector.panic.origin == "error_handler"
    assert isinstance(collector.panic.value, RuntimeError)

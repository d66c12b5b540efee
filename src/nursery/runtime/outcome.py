"""Outcome capture and collection.

capture() runs a participant (block body or task) inside a protective
boundary and converts whatever happens into an Outcome instead of letting
the exception unwind the worker thread. OutcomeCollector folds outcomes
into the single result block() reports:

    - first panic wins and is re-raised later as TaskPanic
    - later panics are logged and counted, never substituted
    - returned errors go to the error handler, one call at a time
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import StrEnum
from typing import Callable, TypeAlias

from nursery.foundation.errors import InvalidResultError, Origin, PanicError, PanicInfo, TaskPanic

__all__ = [
    "ErrorHandler",
    "Outcome",
    "OutcomeCollector",
    "OutcomeKind",
    "PanicHook",
    "capture",
]

logger = logging.getLogger("nursery.outcome")

ErrorHandler: TypeAlias = Callable[[BaseException], None]
PanicHook: TypeAlias = Callable[[TaskPanic], None]


class OutcomeKind(StrEnum):
    """How a participant finished."""
    COMPLETED = "completed"  # Returned normally, maybe with an error value
    PANICKED = "panicked"    # Raised


@dataclass(slots=True, frozen=True)
class Outcome:
    """Tagged result of running one participant.
    
    Attributes:
        kind: COMPLETED or PANICKED
        origin: Participant that produced it
        error: Returned error (COMPLETED only)
        payload: Original panic payload (PANICKED only)
        exc: Exception that carried the panic (PANICKED only)
    """
    
    kind: OutcomeKind
    origin: Origin
    error: BaseException | None = None
    payload: object = None
    exc: BaseException | None = None
    
    @classmethod
    def completed(cls, origin: Origin, error: BaseException | None = None) -> Outcome:
        return cls(OutcomeKind.COMPLETED, origin, error=error)
    
    @classmethod
    def panicked(cls, origin: Origin, exc: BaseException) -> Outcome:
        """Build a panic outcome, unwrapping panic() payloads."""
        payload = exc.value if isinstance(exc, PanicError) else exc
        return cls(OutcomeKind.PANICKED, origin, payload=payload, exc=exc)
    
    @property
    def is_panic(self) -> bool:
        return self.kind is OutcomeKind.PANICKED
    
    @property
    def failed(self) -> bool:
        """Panicked or returned an error."""
        return self.is_panic or self.error is not None


def capture(fn: Callable[[], object], origin: Origin) -> Outcome:
    """Run fn and classify how it finished.
    
    None means success, an exception instance means a returned error, a
    raise means a panic. Any other return value is a programming error and
    is reported as an InvalidResultError panic.
    """
    try:
        result = fn()
    except Exception as e:
        return Outcome.panicked(origin, e)
    if result is None:
        return Outcome.completed(origin)
    if isinstance(result, BaseException):
        return Outcome.completed(origin, result)
    return Outcome.panicked(origin, InvalidResultError(origin, result))


class OutcomeCollector:
    """Thread-safe sink for participant outcomes.
    
    Args:
        error_handler: Called once per returned error; None discards them
        on_panic: Called for every panic (first or not), after recording
        log_suppressed: Log panics that lost the first-panic race
    """
    
    __slots__ = ("_handler", "_on_panic", "_log_suppressed", "_lock", "_handler_lock",
                 "_panic", "_suppressed", "_delivered")
    
    def __init__(
        self,
        error_handler: ErrorHandler | None = None,
        *,
        on_panic: PanicHook | None = None,
        log_suppressed: bool = True,
    ) -> None:
        self._handler = error_handler
        self._on_panic = on_panic
        self._log_suppressed = log_suppressed
        self._lock = threading.Lock()
        self._handler_lock = threading.Lock()
        self._panic: TaskPanic | None = None
        self._suppressed = 0
        self._delivered = 0
    
    @property
    def panic(self) -> TaskPanic | None:
        """The recorded (first) panic, if any."""
        with self._lock:
            return self._panic
    
    @property
    def suppressed(self) -> int:
        """Panics observed after the first one."""
        with self._lock:
            return self._suppressed
    
    @property
    def delivered(self) -> int:
        """Errors handed to the error handler."""
        with self._lock:
            return self._delivered
    
    def record(self, outcome: Outcome) -> None:
        if outcome.is_panic:
            self._record_panic(outcome)
        elif outcome.error is not None:
            self._deliver(outcome.error, outcome.origin)
    
    def raise_if_panicked(self) -> None:
        """Re-raise the recorded panic, chained to its original exception."""
        if (carrier := self.panic) is not None:
            raise carrier from carrier.__cause__
    
    def _record_panic(self, outcome: Outcome) -> None:
        assert outcome.exc is not None
        carrier = TaskPanic(
            outcome.payload,
            outcome.origin,
            PanicInfo.from_exception(outcome.exc, outcome.payload, outcome.origin),
        )
        carrier.__cause__ = outcome.exc
        with self._lock:
            first = self._panic is None
            if first:
                self._panic = carrier
            else:
                self._suppressed += 1
        if first:
            logger.debug("%s panicked: %r", outcome.origin, outcome.payload)
        elif self._log_suppressed:
            logger.warning(
                "%s panicked after the first panic was recorded; keeping the first: %r",
                outcome.origin, outcome.payload, exc_info=outcome.exc,
            )
        if self._on_panic is not None:
            self._on_panic(carrier)
    
    def _deliver(self, error: BaseException, origin: Origin) -> None:
        if self._handler is None:
            logger.debug("discarding %s error (no handler): %r", origin, error)
            return
        with self._handler_lock:
            try:
                self._handler(error)
            except Exception as e:
                failure: Outcome | None = Outcome.panicked("error_handler", e)
            else:
                failure = None
        with self._lock:
            self._delivered += 1
        if failure is not None:
            self._record_panic(failure)

"""Error taxonomy for nurseries.

Three kinds of failure can reach a nursery:
    - Returned errors: a participant returns an exception instance. Routed to
      the error handler, never re-raised.
    - Panics: a participant raises. The first one is captured, wrapped in
      TaskPanic and re-raised from block() after the join barrier.
    - Usage violations: go() on a nursery that is no longer open. Raised
      immediately as NurseryClosedError.

PanicInfo is a Pydantic snapshot of a panic for logging and serialization.
"""

from __future__ import annotations

import traceback
from enum import StrEnum
from typing import Annotated, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, computed_field

Origin = Literal["block", "task", "error_handler"]


class ErrorCode(StrEnum):
    """Machine-readable classification of nursery failures."""
    PANIC = "PANIC"
    NURSERY_CLOSED = "NURSERY_CLOSED"
    CANCELLED = "CANCELLED"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
    INVALID_RESULT = "INVALID_RESULT"


class PanicInfo(BaseModel):
    """Serializable description of a captured panic.
    
    Attributes:
        origin: Which participant raised (block body, task, error handler)
        payload_repr: repr() of the original payload
        exc_type: Qualified name of the exception that carried the payload
        traceback: Formatted traceback at capture time
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        revalidate_instances="never",
        json_schema_extra={
            "title": "Panic Info",
            "examples": [{
                "origin": "task",
                "payload_repr": "'foo'",
                "exc_type": "nursery.foundation.errors.errors.PanicError",
            }],
        },
    )

    origin: Origin
    payload_repr: Annotated[str, Field(description="repr() of the panic payload")]
    exc_type: Annotated[str, Field(min_length=1)]
    traceback: str | None = Field(default=None, repr=False)

    @computed_field
    @property
    def code(self) -> ErrorCode:
        return ErrorCode.PANIC

    @classmethod
    def from_exception(cls, exc: BaseException, payload: object, origin: Origin) -> Self:
        """Snapshot an exception caught at a protective boundary."""
        return cls(
            origin=origin,
            payload_repr=repr(payload),
            exc_type=f"{type(exc).__module__}.{type(exc).__qualname__}",
            traceback="".join(traceback.format_exception(exc)),
        )


class NurseryError(Exception):
    """Base class for all nursery errors."""

    code: ErrorCode = ErrorCode.PANIC


class PanicError(NurseryError):
    """Raised by panic() to abort a participant with an arbitrary payload."""

    __slots__ = ("value",)

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(value)


def panic(value: object) -> None:
    """Abort the current participant, carrying value as the panic payload.
    
    Example:
        >>> def task():
        ...     panic("foo")
        >>> block(lambda n: n.go(task))  # raises TaskPanic, .value == "foo"
    """
    raise PanicError(value)


class TaskPanic(NurseryError):
    """Carrier for the first panic observed by a nursery.
    
    Raised from block() so callers can tell "a participant panicked" apart
    from an ordinary exception. The original exception is chained as
    __cause__.
    
    Attributes:
        value: The original panic payload
        origin: Participant that raised it
        info: Serializable snapshot of the panic
    """

    __slots__ = ("value", "origin", "info")
    code = ErrorCode.PANIC

    def __init__(self, value: object, origin: Origin, info: PanicInfo | None = None) -> None:
        self.value = value
        self.origin = origin
        self.info = info
        super().__init__(f"{origin} panicked: {value!r}")


class NurseryClosedError(NurseryError, RuntimeError):
    """go() was called on a nursery that is no longer open.
    
    This is a structural misuse: the caller tried to start a task that
    would outlive the scope owning it.
    """

    code = ErrorCode.NURSERY_CLOSED

    def __init__(self, state: str) -> None:
        self.state = state
        super().__init__(f"go() called on a nursery in state '{state}'; the nursery is done")


class Cancelled(NurseryError):
    """Context was cancelled."""

    code = ErrorCode.CANCELLED

    def __init__(self, message: str = "context canceled") -> None:
        super().__init__(message)


class DeadlineExceeded(Cancelled):
    """Context deadline passed."""

    code = ErrorCode.DEADLINE_EXCEEDED

    def __init__(self, message: str = "context deadline exceeded") -> None:
        super().__init__(message)


class InvalidResultError(NurseryError, TypeError):
    """A participant returned something other than None or an exception."""

    code = ErrorCode.INVALID_RESULT

    def __init__(self, origin: str, result: object) -> None:
        self.result = result
        super().__init__(f"{origin} returned {type(result).__name__!r}; expected an exception instance or None")

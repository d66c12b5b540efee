"""Error types shared by every nursery component."""

from .errors import (
    Cancelled,
    DeadlineExceeded,
    ErrorCode,
    InvalidResultError,
    NurseryClosedError,
    NurseryError,
    Origin,
    PanicError,
    PanicInfo,
    TaskPanic,
    panic,
)

__all__ = [
    "Cancelled",
    "DeadlineExceeded",
    "ErrorCode",
    "InvalidResultError",
    "NurseryClosedError",
    "NurseryError",
    "Origin",
    "PanicError",
    "PanicInfo",
    "TaskPanic",
    "panic",
]

"""Foundation layer: errors and configuration."""

from .config import LoggingSettings, NurserySettings, clear_settings_cache, get_settings
from .errors import (
    Cancelled,
    DeadlineExceeded,
    ErrorCode,
    InvalidResultError,
    NurseryClosedError,
    NurseryError,
    PanicError,
    PanicInfo,
    TaskPanic,
    panic,
)

__all__ = [
    "LoggingSettings",
    "NurserySettings",
    "clear_settings_cache",
    "get_settings",
    "Cancelled",
    "DeadlineExceeded",
    "ErrorCode",
    "InvalidResultError",
    "NurseryClosedError",
    "NurseryError",
    "PanicError",
    "PanicInfo",
    "TaskPanic",
    "panic",
]

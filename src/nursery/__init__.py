"""nursery: structured concurrency for threads.

Every thread started through a Nursery finishes before the block that owns
it returns. Panics anywhere in the scope surface once, at the call site.

Quick Start:
    >>> from nursery import block, with_max_goroutines
    >>> def body(n):
    ...     n.go(download, "a")
    ...     n.go(download, "b")
    >>> block(body, with_max_goroutines(2))

Error model:
    - return an exception  -> delivered to with_error_handler(), never raised
    - raise / panic(value) -> re-raised from block() as TaskPanic(.value)
    - go() after the body  -> NurseryClosedError
"""

from nursery.foundation import (
    Cancelled,
    DeadlineExceeded,
    ErrorCode,
    InvalidResultError,
    LoggingSettings,
    NurseryClosedError,
    NurseryError,
    NurserySettings,
    PanicError,
    PanicInfo,
    TaskPanic,
    clear_settings_cache,
    get_settings,
    panic,
)
from nursery.observability import configure_logging
from nursery.runtime import (
    Context,
    DoneSignal,
    Nursery,
    NurseryConfig,
    NurseryState,
    Option,
    background,
    block,
    open_nursery,
    with_cancel,
    with_context,
    with_deadline,
    with_error_handler,
    with_max_goroutines,
    with_max_tasks,
    with_timeout,
)

__version__ = "0.1.0"

__all__ = [
    # Entry points
    "block",
    "open_nursery",
    "Nursery",
    "NurseryState",
    # Options
    "Option",
    "NurseryConfig",
    "with_context",
    "with_error_handler",
    "with_max_goroutines",
    "with_max_tasks",
    # Contexts
    "Context",
    "DoneSignal",
    "background",
    "with_cancel",
    "with_deadline",
    "with_timeout",
    # Errors
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
    # Config & logging
    "LoggingSettings",
    "NurserySettings",
    "clear_settings_cache",
    "get_settings",
    "configure_logging",
]

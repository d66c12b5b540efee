"""Runtime: contexts, admission control, accounting and the nursery itself.

Key Components:
    - Context: cooperative cancellation tree (background, with_cancel, with_timeout)
    - ConcurrencyGate: caps simultaneously running task bodies
    - TaskRegistry: live-task count and join barrier
    - OutcomeCollector: first-panic-wins recording and error routing
    - Nursery / block / open_nursery: the structured scope
"""

from __future__ import annotations

from .context import CancelFunc, Context, DoneSignal, background, with_cancel, with_deadline, with_timeout
from .gate import ConcurrencyGate
from .nursery import BodyFn, Nursery, NurseryState, TaskFn, block, open_nursery
from .options import (
    NurseryConfig,
    Option,
    resolve_config,
    with_context,
    with_error_handler,
    with_max_goroutines,
    with_max_tasks,
)
from .outcome import ErrorHandler, Outcome, OutcomeCollector, OutcomeKind, capture
from .registry import TaskRegistry

__all__ = [
    # Contexts
    "CancelFunc",
    "Context",
    "DoneSignal",
    "background",
    "with_cancel",
    "with_deadline",
    "with_timeout",
    # Building blocks
    "ConcurrencyGate",
    "TaskRegistry",
    "ErrorHandler",
    "Outcome",
    "OutcomeCollector",
    "OutcomeKind",
    "capture",
    # Nursery
    "BodyFn",
    "Nursery",
    "NurseryState",
    "TaskFn",
    "block",
    "open_nursery",
    # Options
    "NurseryConfig",
    "Option",
    "resolve_config",
    "with_context",
    "with_error_handler",
    "with_max_goroutines",
    "with_max_tasks",
]

"""Functional options for block() and open_nursery().

Options are small callables that write into a draft mapping. They are
resolved once, validated into a frozen NurseryConfig, and never consulted
again. Order does not matter except that a later option of the same kind
overrides an earlier one.

Example:
    >>> ctx, cancel = with_timeout(background(), 1.0)
    >>> block(body, with_context(ctx), with_max_goroutines(4), with_error_handler(errors.append))
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Callable, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, TypeAdapter

from nursery.foundation.config import NurserySettings, get_settings

from .context import Context, background
from .outcome import ErrorHandler

__all__ = [
    "NurseryConfig",
    "Option",
    "resolve_config",
    "with_context",
    "with_error_handler",
    "with_max_goroutines",
    "with_max_tasks",
]

Option: TypeAlias = Callable[[dict[str, object]], None]

_positive_int: TypeAdapter[int] = TypeAdapter(PositiveInt)


class NurseryConfig(BaseModel):
    """Resolved, immutable nursery configuration.
    
    Attributes:
        context: Parent cancellation context
        max_goroutines: Cap on simultaneously running task bodies (None = unlimited)
        error_handler: Receives every returned error (None = discard)
        thread_name_prefix: Prefix for worker thread names
        log_suppressed_panics: Log panics that lose the first-panic race
    """
    
    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
        extra="forbid",
        revalidate_instances="never",
    )
    
    context: Context = Field(default_factory=background)
    max_goroutines: PositiveInt | None = None
    error_handler: ErrorHandler | None = Field(default=None, exclude=True, repr=False)
    thread_name_prefix: str = "nursery-"
    log_suppressed_panics: bool = True


def with_context(ctx: Context) -> Option:
    """Use ctx as the parent cancellation signal.
    
    Cancelling ctx, or letting its deadline pass, fires done() on the nursery.
    """
    if not isinstance(ctx, Context):
        raise TypeError(f"with_context() expects a Context, got {type(ctx).__name__}")
    
    def apply(draft: dict[str, object]) -> None:
        draft["context"] = ctx
    return apply


def with_max_goroutines(n: int) -> Option:
    """Run at most n task bodies at once. Registration is never limited."""
    limit = _positive_int.validate_python(n)
    
    def apply(draft: dict[str, object]) -> None:
        draft["max_goroutines"] = limit
    return apply


with_max_tasks = with_max_goroutines


def with_error_handler(handler: ErrorHandler) -> Option:
    """Receive every error returned by the block body or a task.
    
    Calls never overlap, so the handler needs no locking of its own.
    """
    if not callable(handler):
        raise TypeError("with_error_handler() expects a callable")
    
    def apply(draft: dict[str, object]) -> None:
        draft["error_handler"] = handler
    return apply


def resolve_config(options: Iterable[Option], settings: NurserySettings | None = None) -> NurseryConfig:
    """Fold options over settings-derived defaults into a NurseryConfig."""
    settings = settings or get_settings()
    draft: dict[str, object] = {
        "max_goroutines": settings.default_max_goroutines,
        "thread_name_prefix": settings.thread_name_prefix,
        "log_suppressed_panics": settings.log_suppressed_panics,
    }
    for option in options:
        option(draft)
    return NurseryConfig.model_validate(draft)

"""Nursery: a scope that owns and awaits a set of threads.

block() runs a body that may spawn any number of tasks through the
Nursery handle it receives, and does not return until every one of them
has finished. No task outlives the call.

Lifecycle:
    OPEN     body running, go() accepted
    CLOSING  body returned, waiting for live tasks, go() rejected
    CLOSED   no live tasks, derived context cancelled, go() rejected

Failure handling:
    - A task or body that *returns* an exception hands it to the error
      handler (with_error_handler) and the nursery carries on.
    - A task or body that *raises* panics the nursery: the nursery's
      context is cancelled so siblings can stop early, and once every task
      has finished, block() raises TaskPanic carrying the first payload.
    - go() outside OPEN raises NurseryClosedError at the call site.

Example:
    >>> def body(n: Nursery) -> None:
    ...     for url in urls:
    ...         n.go(fetch, url)
    >>> block(body, with_max_goroutines(4))

    >>> with open_nursery(with_context(ctx)) as n:
    ...     n.go(worker, n.done())
"""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from enum import StrEnum
from typing import Callable, ParamSpec, TypeAlias

from nursery.foundation.errors import NurseryClosedError, Origin, TaskPanic

from .context import CancelFunc, Context, DoneSignal, with_cancel
from .gate import ConcurrencyGate
from .options import NurseryConfig, Option, resolve_config
from .outcome import Outcome, OutcomeCollector, capture
from .registry import TaskRegistry

__all__ = ["BodyFn", "Nursery", "NurseryState", "TaskFn", "block", "open_nursery"]

P = ParamSpec("P")

TaskFn: TypeAlias = Callable[..., BaseException | None]
BodyFn: TypeAlias = Callable[["Nursery"], BaseException | None]

logger = logging.getLogger("nursery.nursery")


class NurseryState(StrEnum):
    """Nursery lifecycle states. Transitions only move forward."""
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class Nursery:
    """Handle passed to the block body for spawning tasks.
    
    Created by block() or open_nursery(), never directly. The handle is
    safe to share with tasks, which may spawn siblings while the nursery
    is still OPEN.
    """
    
    __slots__ = ("_config", "_ctx", "_cancel", "_gate", "_registry", "_collector", "_lock", "_state")
    
    def __init__(self, config: NurseryConfig) -> None:
        self._config = config
        self._ctx: Context
        self._cancel: CancelFunc
        self._ctx, self._cancel = with_cancel(config.context)
        self._gate = ConcurrencyGate(config.max_goroutines)
        self._registry = TaskRegistry()
        self._collector = OutcomeCollector(
            config.error_handler,
            on_panic=self._on_panic,
            log_suppressed=config.log_suppressed_panics,
        )
        self._lock = threading.Lock()
        self._state = NurseryState.OPEN
    
    @property
    def state(self) -> NurseryState:
        with self._lock:
            return self._state
    
    @property
    def live_tasks(self) -> int:
        """Tasks registered and not yet finished."""
        return self._registry.live
    
    @property
    def context(self) -> Context:
        """The nursery's context, for deriving per-task timeouts."""
        return self._ctx
    
    def done(self) -> DoneSignal:
        """Fires when the parent context is cancelled or a participant panics."""
        return self._ctx.done()
    
    def go(self, fn: Callable[P, BaseException | None], *args: P.args, **kwargs: P.kwargs) -> None:
        """Register fn and start it on its own thread.
        
        Returns immediately; with a concurrency limit the thread waits for
        a slot before running fn.
        
        Raises:
            NurseryClosedError: If the body has already returned
            TypeError: If fn is not callable
        """
        if not callable(fn):
            raise TypeError(f"go() expects a callable, got {type(fn).__name__}")
        if args or kwargs:
            fn = functools.partial(fn, *args, **kwargs)
        
        with self._lock:
            state = self._state
            if state is NurseryState.OPEN:
                seq = self._registry.register()
        if state is not NurseryState.OPEN:
            logger.error("go() called on %s nursery from thread %s", state, threading.current_thread().name)
            raise NurseryClosedError(state)
        
        thread = threading.Thread(
            target=self._run_task,
            args=(fn, seq),
            name=f"{self._config.thread_name_prefix}{seq}",
        )
        try:
            thread.start()
        except BaseException:
            self._registry.complete()
            raise
    
    def _run_task(self, fn: TaskFn, seq: int) -> None:
        origin: Origin = "task"
        try:
            with self._gate.slot():
                logger.debug("task %d running", seq)
                outcome = capture(fn, "task")
            origin = "error_handler"
            self._collector.record(outcome)
        except BaseException as e:
            # nothing escapes a worker thread
            self._collector.record(Outcome.panicked(origin, e))
        finally:
            self._registry.complete()
            logger.debug("task %d finished", seq)
    
    def _on_panic(self, carrier: TaskPanic) -> None:
        self._cancel()
    
    def _close(self) -> None:
        """OPEN -> CLOSING -> CLOSED, blocking on the join barrier in between."""
        with self._lock:
            self._state = NurseryState.CLOSING
        logger.debug("nursery closing, %d task(s) live", self._registry.live)
        self._registry.wait_idle()
        with self._lock:
            self._state = NurseryState.CLOSED
        self._cancel()
        logger.debug("nursery closed after %d task(s)", self._registry.total)
    
    def __repr__(self) -> str:
        return f"Nursery(state={self.state}, live_tasks={self.live_tasks}, max_goroutines={self._config.max_goroutines})"


def block(body: BodyFn, *options: Option) -> None:
    """Run body with a fresh Nursery and wait for every task it spawns.
    
    Args:
        body: Called synchronously with the Nursery handle; may return an
            exception to report it to the error handler
        *options: with_context, with_max_goroutines, with_error_handler
    
    Raises:
        TaskPanic: If the body or any task raised; .value holds the first
            payload and __cause__ the original exception
    """
    n = Nursery(resolve_config(options))
    try:
        n._collector.record(capture(lambda: body(n), "block"))
    except BaseException:
        n._cancel()
        raise
    finally:
        n._close()
    n._collector.raise_if_panicked()


@contextmanager
def open_nursery(*options: Option) -> Iterator[Nursery]:
    """Context-manager form of block(); the with-body is the block body.
    
    An exception escaping the with-body counts as a block panic.
    
    Example:
        >>> with open_nursery(with_max_goroutines(2)) as n:
        ...     for item in items:
        ...         n.go(process, item)
    """
    n = Nursery(resolve_config(options))
    try:
        yield n
    except Exception as e:
        n._collector.record(Outcome.panicked("block", e))
    except BaseException:
        n._cancel()
        raise
    finally:
        n._close()
    n._collector.raise_if_panicked()

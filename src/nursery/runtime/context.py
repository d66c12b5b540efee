"""Cancellation contexts for threaded code.

A Context carries a cooperative "stop now" signal across threads. Contexts
form a tree: cancelling a parent cancels every live descendant, never the
other way round. Observation is read-only; only the CancelFunc returned by
with_cancel/with_timeout/with_deadline can cancel.

Example:
    >>> ctx, cancel = with_timeout(background(), 0.5)
    >>> def worker():
    ...     while not ctx.done().is_set():
    ...         step()
    >>> ctx.done().wait()   # returns once cancel() runs or 0.5s pass
    True
    >>> ctx.err()
    DeadlineExceeded('context deadline exceeded')
"""

from __future__ import annotations

import threading
import time
from typing import Callable, TypeAlias

from nursery.foundation.errors import Cancelled, DeadlineExceeded

__all__ = [
    "CancelFunc",
    "Context",
    "DoneSignal",
    "background",
    "with_cancel",
    "with_deadline",
    "with_timeout",
]

CancelFunc: TypeAlias = Callable[[], None]


class DoneSignal:
    """Read-only view of a context's cancellation event.
    
    Exposes observation (is_set, wait, truthiness) but no way to fire it.
    """
    
    __slots__ = ("_event",)
    
    def __init__(self, event: threading.Event) -> None:
        self._event = event
    
    def is_set(self) -> bool:
        """Whether cancellation has fired."""
        return self._event.is_set()
    
    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancellation fires or timeout elapses. Returns is_set()."""
        return self._event.wait(timeout)
    
    def __bool__(self) -> bool:
        return self._event.is_set()
    
    def __repr__(self) -> str:
        return f"DoneSignal(fired={self._event.is_set()})"


class Context:
    """Cancelable signal shared by reference between threads.
    
    Not constructed directly; use background() or one of the with_* helpers.
    """
    
    __slots__ = ("_event", "_signal", "_err", "_lock", "_children", "_parent", "_deadline", "_timer", "_cancellable")
    
    def __init__(self, parent: Context | None = None, deadline: float | None = None, *, cancellable: bool = True) -> None:
        self._event = threading.Event()
        self._signal = DoneSignal(self._event)
        self._err: Cancelled | None = None
        self._lock = threading.Lock()
        self._children: set[Context] = set()
        self._parent = parent
        self._deadline = deadline
        self._timer: threading.Timer | None = None
        self._cancellable = cancellable
    
    def done(self) -> DoneSignal:
        """Signal that fires once this context is cancelled."""
        return self._signal
    
    def err(self) -> Cancelled | None:
        """Why the context was cancelled, or None while it is live."""
        with self._lock:
            return self._err
    
    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
    
    @property
    def deadline(self) -> float | None:
        """time.monotonic() value at which this context expires, if any."""
        return self._deadline
    
    def _attach(self, child: Context) -> None:
        """Register child for propagation; cancels it at once if we're already done."""
        if not self._cancellable:
            return
        with self._lock:
            if self._err is None:
                self._children.add(child)
                return
            err = self._err
        child._cancel(err)
    
    def _detach(self, child: Context) -> None:
        with self._lock:
            self._children.discard(child)
    
    def _cancel(self, err: Cancelled) -> None:
        with self._lock:
            if self._err is not None:
                return
            self._err = err
            children, self._children = self._children, set()
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
        self._event.set()
        for child in children:
            child._cancel(err)
        if self._parent is not None:
            self._parent._detach(self)
    
    def _arm(self, delay: float) -> None:
        """Schedule deadline cancellation delay seconds from now."""
        if delay <= 0:
            self._cancel(DeadlineExceeded())
            return
        timer = threading.Timer(delay, self._cancel, args=(DeadlineExceeded(),))
        timer.daemon = True
        with self._lock:
            if self._err is not None:
                return
            self._timer = timer
        timer.start()
    
    def __repr__(self) -> str:
        state = f"cancelled={self._err!r}" if self._err is not None else "live"
        return f"Context({state}, deadline={self._deadline})"


_background = Context(cancellable=False)


def background() -> Context:
    """The root context: never cancelled, no deadline."""
    return _background


def with_cancel(parent: Context) -> tuple[Context, CancelFunc]:
    """Derive a child context plus a function that cancels it.
    
    The child is also cancelled when parent is. Calling cancel more than
    once is harmless.
    """
    child = Context(parent, parent.deadline)
    parent._attach(child)
    return child, lambda: child._cancel(Cancelled())


def with_deadline(parent: Context, when: float) -> tuple[Context, CancelFunc]:
    """Derive a child that is cancelled at time.monotonic() == when.
    
    A parent deadline that is earlier wins, matching the tree semantics.
    """
    if parent.deadline is not None and parent.deadline <= when:
        return with_cancel(parent)
    child = Context(parent, when)
    parent._attach(child)
    child._arm(when - time.monotonic())
    return child, lambda: child._cancel(Cancelled())


def with_timeout(parent: Context, seconds: float) -> tuple[Context, CancelFunc]:
    """Derive a child that is cancelled after seconds elapse."""
    return with_deadline(parent, time.monotonic() + seconds)

"""Live-task accounting and the join barrier."""

from __future__ import annotations

import threading

__all__ = ["TaskRegistry"]


class TaskRegistry:
    """Counts registered, unfinished tasks and lets callers wait for zero.
    
    Every register() must be paired with exactly one complete(), including
    when the task panicked.
    """
    
    __slots__ = ("_cond", "_live", "_total")
    
    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._live = 0
        self._total = 0
    
    @property
    def live(self) -> int:
        with self._cond:
            return self._live
    
    @property
    def total(self) -> int:
        """Tasks ever registered."""
        with self._cond:
            return self._total
    
    def register(self) -> int:
        """Count one more live task. Returns its sequence number."""
        with self._cond:
            self._live += 1
            self._total += 1
            return self._total
    
    def complete(self) -> None:
        """Count one task as finished; wake waiters when none remain."""
        with self._cond:
            if self._live == 0:
                raise RuntimeError("complete() without matching register()")
            self._live -= 1
            if self._live == 0:
                self._cond.notify_all()
    
    def wait_idle(self, timeout: float | None = None) -> bool:
        """Join barrier: block until no tasks are live. False on timeout."""
        with self._cond:
            return self._cond.wait_for(lambda: self._live == 0, timeout)

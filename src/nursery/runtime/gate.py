"""Admission control for task bodies.

A ConcurrencyGate caps how many task bodies execute at once. Registration
with the nursery is never gated; only the body waits for a slot.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

__all__ = ["ConcurrencyGate"]

logger = logging.getLogger("nursery.gate")


class ConcurrencyGate:
    """Bounded slot pool backed by a BoundedSemaphore.
    
    Args:
        limit: Max simultaneous bodies, or None for unlimited
    
    Example:
        >>> gate = ConcurrencyGate(2)
        >>> with gate.slot():
        ...     run_body()
    """
    
    __slots__ = ("_limit", "_sem", "_lock", "_active")
    
    def __init__(self, limit: int | None = None) -> None:
        if limit is not None and limit < 1:
            raise ValueError("limit must be >= 1 or None")
        self._limit = limit
        self._sem = threading.BoundedSemaphore(limit) if limit is not None else None
        self._lock = threading.Lock()
        self._active = 0
    
    @property
    def limit(self) -> int | None:
        return self._limit
    
    @property
    def unlimited(self) -> bool:
        return self._limit is None
    
    @property
    def active(self) -> int:
        """Bodies currently holding a slot."""
        with self._lock:
            return self._active
    
    @contextmanager
    def slot(self) -> Iterator[None]:
        """Hold one slot for the duration of the with-block."""
        if self._sem is not None:
            if not self._sem.acquire(blocking=False):
                logger.debug("gate full (limit=%d), waiting for a slot", self._limit)
                self._sem.acquire()
        with self._lock:
            self._active += 1
        try:
            yield
        finally:
            with self._lock:
                self._active -= 1
            if self._sem is not None:
                self._sem.release()
    
    def __repr__(self) -> str:
        return f"ConcurrencyGate(limit={self._limit}, active={self.active})"

"""Tests for TaskRegistry accounting and the join barrier."""

from __future__ import annotations

import threading
import time

import pytest

from nursery.runtime import TaskRegistry


def test_registry_counts() -> None:
    registry = TaskRegistry()
    assert registry.register() == 1
    assert registry.register() == 2
    assert registry.live == 2
    registry.complete()
    assert registry.live == 1
    assert registry.total == 2


def test_registry_complete_without_register() -> None:
    with pytest.raises(RuntimeError):
        TaskRegistry().complete()


def test_registry_wait_idle_times_out_while_live() -> None:
    registry = TaskRegistry()
    registry.register()
    assert not registry.wait_idle(0.01)


def test_registry_wait_idle_wakes_on_last_complete() -> None:
    registry = TaskRegistry()
    registry.register()
    
    def finish() -> None:
        time.sleep(0.01)
        registry.complete()
    
    threading.Thread(target=finish).start()
    assert registry.wait_idle(1.0)
    assert registry.live == 0

"""Tests for ConcurrencyGate admission control."""

from __future__ import annotations

import threading

import pytest

from nursery.runtime import ConcurrencyGate


@pytest.mark.parametrize("limit", [0, -1])
def test_gate_rejects_bad_limit(limit: int) -> None:
    with pytest.raises(ValueError):
        ConcurrencyGate(limit)


def test_gate_unlimited() -> None:
    gate = ConcurrencyGate()
    assert gate.unlimited
    with gate.slot(), gate.slot(), gate.slot():
        assert gate.active == 3
    assert gate.active == 0


def test_gate_blocks_when_full() -> None:
    gate = ConcurrencyGate(1)
    entered = threading.Event()
    
    def contender() -> None:
        with gate.slot():
            entered.set()
    
    with gate.slot():
        thread = threading.Thread(target=contender)
        thread.start()
        assert not entered.wait(0.05)
    thread.join(1.0)
    assert entered.is_set()


def test_gate_releases_on_exception() -> None:
    gate = ConcurrencyGate(1)
    with pytest.raises(RuntimeError):
        with gate.slot():
            raise RuntimeError
    with gate.slot():
        assert gate.active == 1

"""
Tests for the virtual clock timer queue.
"""

import pytest

from fish_miner.catch_core.clock import VirtualClock


@pytest.fixture
def clock():
    return VirtualClock()


class TestOneShotTimers:
    """call_later behaviour."""

    def test_runs_once_when_due(self, clock):
        calls = []
        clock.call_later(100, lambda: calls.append(clock.now_ms))

        clock.advance(99)
        assert calls == []

        clock.advance(1)
        assert calls == [100]

        clock.advance(1000)
        assert calls == [100]

    def test_zero_delay_runs_on_next_advance(self, clock):
        calls = []
        clock.call_later(0, lambda: calls.append("x"))
        clock.advance(0)
        assert calls == ["x"]

    def test_negative_delay_rejected(self, clock):
        with pytest.raises(ValueError):
            clock.call_later(-1, lambda: None)

    def test_cancelled_timer_does_not_run(self, clock):
        calls = []
        handle = clock.call_later(10, lambda: calls.append("x"))
        handle.cancel()
        clock.advance(100)
        assert calls == []
        assert not handle.active

    def test_now_reaches_target(self, clock):
        clock.call_later(10, lambda: None)
        clock.advance(250)
        assert clock.now_ms == 250


class TestPeriodicTimers:
    """call_every behaviour."""

    def test_fires_every_interval(self, clock):
        calls = []
        clock.call_every(50, lambda: calls.append(clock.now_ms))
        ran = clock.advance(200)
        assert calls == [50, 100, 150, 200]
        assert ran == 4

    def test_cancel_from_inside_callback(self, clock):
        calls = []

        def tick():
            calls.append(clock.now_ms)
            if len(calls) == 2:
                handle.cancel()

        handle = clock.call_every(10, tick)
        clock.advance(100)
        assert calls == [10, 20]

    def test_non_positive_interval_rejected(self, clock):
        with pytest.raises(ValueError):
            clock.call_every(0, lambda: None)


class TestOrdering:
    """Due-time order, creation order on ties."""

    def test_due_time_order(self, clock):
        calls = []
        clock.call_later(30, lambda: calls.append("c"))
        clock.call_later(10, lambda: calls.append("a"))
        clock.call_later(20, lambda: calls.append("b"))
        clock.advance(30)
        assert calls == ["a", "b", "c"]

    def test_ties_run_in_creation_order(self, clock):
        calls = []
        clock.call_every(50, lambda: calls.append("first"))
        clock.call_every(25, lambda: calls.append("second"))
        clock.call_later(50, lambda: calls.append("third"))
        clock.advance(50)
        assert calls == ["second", "first", "second", "third"]

    def test_timer_scheduled_in_callback_runs_same_advance(self, clock):
        calls = []
        clock.call_later(10, lambda: clock.call_later(5, lambda: calls.append(clock.now_ms)))
        clock.advance(20)
        assert calls == [15]


class TestQueueManagement:
    """Introspection, cancellation and misuse."""

    def test_next_due_skips_cancelled(self, clock):
        first = clock.call_later(10, lambda: None)
        clock.call_later(20, lambda: None)
        first.cancel()
        assert clock.next_due() == 20

    def test_next_due_empty(self, clock):
        assert clock.next_due() is None

    def test_pending_count(self, clock):
        clock.call_later(10, lambda: None)
        handle = clock.call_every(10, lambda: None)
        assert clock.pending_count == 2
        handle.cancel()
        assert clock.pending_count == 1

    def test_cancel_all(self, clock):
        calls = []
        clock.call_every(10, lambda: calls.append("x"))
        clock.call_later(10, lambda: calls.append("y"))
        clock.cancel_all()
        clock.advance(100)
        assert calls == []
        assert clock.pending_count == 0

    def test_cancel_all_from_callback_stops_periodic(self, clock):
        calls = []

        def tick():
            calls.append(clock.now_ms)
            clock.cancel_all()

        clock.call_every(10, tick)
        clock.advance(100)
        assert calls == [10]

    def test_reentrant_advance_rejected(self, clock):
        errors = []

        def nested():
            try:
                clock.advance(10)
            except RuntimeError as e:
                errors.append(e)

        clock.call_later(5, nested)
        clock.advance(10)
        assert len(errors) == 1

    def test_negative_advance_rejected(self, clock):
        with pytest.raises(ValueError):
            clock.advance(-5)

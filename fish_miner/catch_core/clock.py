"""
Virtual Clock
=============

Single-threaded timer queue measured in virtual milliseconds.

Every cadence of the game (spawn, fall, hook sweep, countdown) is a periodic
timer and every delay (catch extend/retract, feedback display) is a one-shot
timer on the same clock. Nothing sleeps: time only moves when the owner calls
``advance()``, which runs due callbacks one at a time, in due-time order, each
to completion. Timers due at the same instant run in creation order.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Callable, List, Optional, Tuple


class TimerHandle:
    """
    A scheduled callback on a VirtualClock.

    Periodic timers keep the same handle for every run; cancelling the handle
    stops all future runs.
    """

    __slots__ = ("_seq", "_due", "_callback", "_interval", "_cancelled", "tag")

    def __init__(
        self,
        seq: int,
        due: int,
        callback: Callable[[], None],
        interval: Optional[int] = None,
        tag: str = ""
    ):
        self._seq = seq
        self._due = due
        self._callback = callback
        self._interval = interval
        self._cancelled = False
        self.tag = tag

    @property
    def due(self) -> int:
        """Virtual time of the next run."""
        return self._due

    @property
    def interval(self) -> Optional[int]:
        """Period in ms, or None for a one-shot timer."""
        return self._interval

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def active(self) -> bool:
        """True while the timer can still fire."""
        return not self._cancelled

    def cancel(self) -> None:
        """Stop the timer. Safe to call more than once."""
        self._cancelled = True

    def __repr__(self) -> str:
        kind = f"every {self._interval}ms" if self._interval else "once"
        state = "cancelled" if self._cancelled else f"due={self._due}"
        return f"TimerHandle({self.tag or self._seq}, {kind}, {state})"


class VirtualClock:
    """
    Deterministic timer queue driven by explicit time advances.

    Example:
        clock = VirtualClock()
        clock.call_every(50, on_fall_tick)
        clock.call_later(500, on_catch_extended)
        clock.advance(1000)
    """

    def __init__(self, start_ms: int = 0):
        self._now: int = start_ms
        self._queue: List[Tuple[int, int, TimerHandle]] = []
        self._seq = itertools.count()
        self._advancing = False
        self._current: Optional[TimerHandle] = None

    @property
    def now_ms(self) -> int:
        """Current virtual time in milliseconds."""
        return self._now

    @property
    def pending_count(self) -> int:
        """Number of timers that can still fire."""
        return sum(1 for _, _, handle in self._queue if handle.active)

    def call_later(
        self,
        delay_ms: int,
        callback: Callable[[], None],
        tag: str = ""
    ) -> TimerHandle:
        """
        Run ``callback`` once, ``delay_ms`` from now.

        A zero delay runs the callback within the current (or next) advance.
        """
        if delay_ms < 0:
            raise ValueError(f"delay_ms must not be negative, got {delay_ms}")
        handle = TimerHandle(next(self._seq), self._now + delay_ms, callback, tag=tag)
        heapq.heappush(self._queue, (handle.due, handle._seq, handle))
        return handle

    def call_every(
        self,
        interval_ms: int,
        callback: Callable[[], None],
        tag: str = ""
    ) -> TimerHandle:
        """Run ``callback`` every ``interval_ms``, first run one interval from now."""
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        handle = TimerHandle(
            next(self._seq), self._now + interval_ms, callback,
            interval=interval_ms, tag=tag
        )
        heapq.heappush(self._queue, (handle.due, handle._seq, handle))
        return handle

    def advance(self, ms: int) -> int:
        """
        Move virtual time forward, running every callback that falls due.

        Args:
            ms: Milliseconds to advance. Must not be negative.

        Returns:
            Number of callbacks run.

        Raises:
            RuntimeError: If called from inside a timer callback.
        """
        if ms < 0:
            raise ValueError(f"Cannot advance by a negative amount: {ms}")
        if self._advancing:
            raise RuntimeError("advance() called from inside a timer callback")

        target = self._now + ms
        ran = 0
        self._advancing = True
        try:
            while self._queue and self._queue[0][0] <= target:
                due, seq, handle = heapq.heappop(self._queue)
                if handle.cancelled:
                    continue
                self._now = due
                if handle.interval is None:
                    handle.cancel()
                self._current = handle
                handle._callback()
                self._current = None
                ran += 1
                # Periodic timers keep their creation order on ties
                if handle.interval is not None and not handle.cancelled:
                    handle._due = due + handle.interval
                    heapq.heappush(self._queue, (handle.due, seq, handle))
        finally:
            self._advancing = False
            self._current = None
        self._now = target
        return ran

    def next_due(self) -> Optional[int]:
        """Virtual time of the earliest live timer, or None if nothing is pending."""
        while self._queue and self._queue[0][2].cancelled:
            heapq.heappop(self._queue)
        if not self._queue:
            return None
        return self._queue[0][0]

    def cancel_all(self) -> None:
        """Cancel and drop every pending timer."""
        for _, _, handle in self._queue:
            handle.cancel()
        self._queue.clear()
        if self._current is not None:
            self._current.cancel()

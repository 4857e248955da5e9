"""
Catch Resolver
==============

Drives the hook's catch phases and decides which item, if any, was caught.

    NONE --request--> EXTENDING --extend delay--> resolve
        resolve, item found  --> RETRACTING --retract delay--> NONE
        resolve, nothing     --> NONE

The resolver only changes state; CoreGame owns the timers between phases.
"""

from __future__ import annotations

from typing import Iterable, Optional

from fish_miner.catch_core.config_loader import GameConfig, get_config
from fish_miner.catch_core.hook import CatchPhase, Hook
from fish_miner.catch_core.items import Item
from fish_miner.catch_core.scoring import CatchEvent
from fish_miner.catch_core.session import CaughtItem, Session


class CatchResolver:
    """
    Proximity-based catch detection.

    An item is caught when it is strictly within ``tolerance_x`` of the column
    the line was dropped at, and strictly within ``tolerance_y`` of the catch
    depth. When several items qualify the earliest spawned one (first in the
    live list) wins.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        catch = config.catch
        self._tolerance_x = catch.tolerance_x
        self._depth_y = catch.depth_y
        self._tolerance_y = catch.tolerance_y
        self._extend_ms = catch.extend_ms
        self._retract_ms = catch.retract_ms

    @property
    def extend_ms(self) -> int:
        """Delay between the request and the catch check."""
        return self._extend_ms

    @property
    def retract_ms(self) -> int:
        """Delay between a successful catch and the hook being idle again."""
        return self._retract_ms

    @property
    def depth_y(self) -> float:
        return self._depth_y

    def in_window(self, item: Item, drop_x: float) -> bool:
        """True if ``item`` is inside the catch window of a line at ``drop_x``."""
        return (
            abs(item.x - drop_x) < self._tolerance_x
            and abs(item.y - self._depth_y) < self._tolerance_y
        )

    def find_catch(self, items: Iterable[Item], drop_x: float) -> Optional[Item]:
        """First item in collection order inside the catch window."""
        for item in items:
            if self.in_window(item, drop_x):
                return item
        return None

    def begin(self, hook: Hook) -> bool:
        """
        Start extending the line from the hook's current column.

        Returns:
            False if a catch is already in flight.
        """
        if not hook.is_idle:
            return False
        hook.phase = CatchPhase.EXTENDING
        hook.drop_x = hook.x
        return True

    def resolve(self, session: Session, now_ms: int) -> Optional[CatchEvent]:
        """
        Check the catch window once the line is fully extended.

        On a catch the item leaves the field, its points go to the score, the
        last-caught snapshot is set and the hook starts retracting. Otherwise
        the hook goes straight back to idle.

        Returns:
            The CatchEvent, or None if nothing was caught.
        """
        hook = session.hook
        if hook.phase is not CatchPhase.EXTENDING:
            return None

        item = self.find_catch(session.items, hook.drop_x)
        if item is None:
            self.abandon(hook)
            return None

        session.items = [live for live in session.items if live.uid != item.uid]
        event = session.scorer.apply_catch(item, now_ms)
        session.last_caught = CaughtItem(
            uid=item.uid,
            kind=item.kind,
            points=item.points,
            caught_at_ms=now_ms
        )
        hook.phase = CatchPhase.RETRACTING
        return event

    def finish(self, hook: Hook) -> None:
        """Retraction finished."""
        if hook.phase is CatchPhase.RETRACTING:
            self.abandon(hook)

    def abandon(self, hook: Hook) -> None:
        """Drop any catch in flight without resolving it."""
        hook.phase = CatchPhase.NONE
        hook.drop_x = None

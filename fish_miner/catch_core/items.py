"""
Falling Items
=============

Item records and the fall simulator that moves and prunes them.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Optional

from fish_miner.catch_core.config_loader import GameConfig, ItemKind, get_config


@dataclass(frozen=True)
class Item:
    """
    A single falling item.

    Frozen so the point value and spawn column can never change; the fall
    simulator replaces items with moved copies instead of mutating them.
    """
    uid: int
    kind: ItemKind
    points: int
    x: float
    y: float

    def moved(self, dy: float) -> "Item":
        """Copy of this item shifted ``dy`` downwards."""
        return replace(self, y=self.y + dy)

    def to_dict(self) -> dict:
        return {
            "uid": self.uid,
            "kind": self.kind.value,
            "points": self.points,
            "x": self.x,
            "y": self.y,
        }


class FallSimulator:
    """
    Advances every live item by a fixed step, then prunes the ones that left
    the field.

    Both happen in a single list assignment, so no caller ever sees moved but
    unpruned items.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._step = config.fall.step
        self._lower_bound = config.field.lower_bound_y

    @property
    def step(self) -> float:
        return self._step

    @property
    def lower_bound(self) -> float:
        return self._lower_bound

    def advance(self, items: List[Item]) -> List[Item]:
        """
        Compute the next item list for one fall tick.

        Args:
            items: Live items in insertion order.

        Returns:
            New list of surviving items, order preserved.
        """
        moved = (item.moved(self._step) for item in items)
        return [item for item in moved if item.y < self._lower_bound]

    def tick(self, session) -> int:
        """
        Apply one fall tick to a session's items.

        Returns:
            Number of items pruned.
        """
        before = len(session.items)
        session.items = self.advance(session.items)
        return before - len(session.items)

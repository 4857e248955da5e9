"""
RNG - Item Spawner
==================

Seeded item generation: uniform kind, uniform column, uniform point value
within the kind's configured range.
"""

from __future__ import annotations

import random
from typing import Optional

from fish_miner.catch_core.config_loader import GameConfig, get_config
from fish_miner.catch_core.item_catalog import ItemCatalog, ItemType, get_catalog
from fish_miner.catch_core.items import Item


class ItemSpawner:
    """
    Creates falling items at the top of the field.

    All randomness flows through one ``random.Random`` so a seed reproduces a
    whole game's spawn sequence.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize spawner.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._catalog: ItemCatalog = get_catalog(config)
        self._rng = random.Random(seed)

        self._min_x, self._max_x = config.field.spawn_x_range
        self._spawn_y = config.field.spawn_y

    @property
    def spawn_x_range(self):
        """(min_x, max_x) columns items can spawn in."""
        return (self._min_x, self._max_x)

    @property
    def spawn_y(self) -> float:
        return self._spawn_y

    def roll_points(self, item_type: ItemType) -> int:
        """Draw a point value for ``item_type`` (inclusive range)."""
        return self._rng.randint(item_type.points_min, item_type.points_max)

    def make_item(self, uid: int) -> Item:
        """
        Roll a new item.

        Args:
            uid: Identifier to give the item.

        Returns:
            Item at the spawn row.
        """
        item_type = self._rng.choice(self._catalog.all_types)
        x = self._rng.uniform(self._min_x, self._max_x)
        points = self.roll_points(item_type)
        return Item(uid=uid, kind=item_type.kind, points=points, x=x, y=self._spawn_y)

    def spawn(self, session) -> Item:
        """Roll one item and append it to the session's live items."""
        item = self.make_item(session.next_uid())
        session.items.append(item)
        return item

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reseed the spawner.

        Args:
            seed: New random seed. Keeps the current sequence if None.
        """
        if seed is not None:
            self._rng = random.Random(seed)

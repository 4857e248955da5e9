"""
Item Catalog
============

Provides convenient access to item kind definitions loaded from config.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, Union

from fish_miner.catch_core.config_loader import (
    GameConfig,
    ItemKind,
    ItemTypeConfig,
    get_config
)


@dataclass(frozen=True)
class ItemType:
    """
    Runtime representation of an item kind.

    Wraps ItemTypeConfig with its observation index and point helpers.
    """
    config: ItemTypeConfig
    index: int

    @property
    def kind(self) -> ItemKind:
        return self.config.kind

    @property
    def name(self) -> str:
        return self.config.kind.value

    @property
    def points_min(self) -> int:
        return self.config.points_min

    @property
    def points_max(self) -> int:
        return self.config.points_max

    @property
    def points_range(self) -> Tuple[int, int]:
        """Inclusive (min, max) point value."""
        return (self.config.points_min, self.config.points_max)

    def contains(self, points: int) -> bool:
        """True if ``points`` is a value this kind can spawn with."""
        return self.config.points_min <= points <= self.config.points_max

    def __repr__(self) -> str:
        return f"ItemType({self.index}: {self.name} [{self.points_min}, {self.points_max}])"


class ItemCatalog:
    """
    The closed set of item kinds, in config order.

    Index order is the order of the ``items`` list in game_config.yaml and is
    what observations use to encode kinds as integers.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize catalog from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._types: Tuple[ItemType, ...] = tuple(
            ItemType(item_config, index) for index, item_config in enumerate(config.items)
        )
        self._by_kind = {item_type.kind: item_type for item_type in self._types}

    def __len__(self) -> int:
        return len(self._types)

    def __getitem__(self, key: Union[ItemKind, int]) -> ItemType:
        """Get an item type by kind or by index."""
        if isinstance(key, ItemKind):
            return self._by_kind[key]
        if 0 <= key < len(self._types):
            return self._types[key]
        raise IndexError(f"Item index {key} out of range [0, {len(self._types)})")

    def __iter__(self) -> Iterator[ItemType]:
        return iter(self._types)

    @property
    def all_types(self) -> Tuple[ItemType, ...]:
        """All item types in index order."""
        return self._types

    def index_of(self, kind: ItemKind) -> int:
        """Observation index of an item kind."""
        return self._by_kind[kind].index


# Module-level singleton
_cached_catalog: Optional[ItemCatalog] = None


def get_catalog(config: Optional[GameConfig] = None) -> ItemCatalog:
    """
    Get the item catalog singleton.

    Args:
        config: Optional config to use. If None, uses cached or default config.

    Returns:
        ItemCatalog instance.
    """
    global _cached_catalog
    if _cached_catalog is None or config is not None:
        _cached_catalog = ItemCatalog(config)
    return _cached_catalog

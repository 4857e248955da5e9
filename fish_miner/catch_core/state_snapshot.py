"""
State Snapshot
==============

Packs game state into fixed-size numpy arrays for Gymnasium observations and
headless consumers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import numpy as np

from fish_miner.catch_core.config_loader import GameConfig, get_config
from fish_miner.catch_core.hook import Hook
from fish_miner.catch_core.item_catalog import get_catalog
from fish_miner.catch_core.items import Item
from fish_miner.catch_core.session import CaughtItem, GameState


@dataclass
class GameSnapshot:
    """
    Complete game state at one instant.

    Item arrays are fixed-size with a mask for the live count, in the same
    order as the live collection (oldest first).
    """
    # Core state
    state: int
    time_ms: int
    score: int
    time_left: int
    target_score: int
    catches: int
    items_count: int

    # Hook
    hook_x: float
    hook_direction: int
    catch_phase: int

    # Feedback (-1 / 0 when nothing was caught recently)
    last_caught_kind: int
    last_caught_points: int

    # Field info (for normalization)
    field_width: float
    field_height: float
    catch_depth: float
    catch_tolerance_x: float
    catch_tolerance_y: float

    # Item arrays (fixed size, padded)
    obj_uid: np.ndarray               # (MAX_ITEMS,) int32
    obj_kind: np.ndarray              # (MAX_ITEMS,) int16, -1 for padding
    obj_x: np.ndarray                 # (MAX_ITEMS,) float32
    obj_y: np.ndarray                 # (MAX_ITEMS,) float32
    obj_points: np.ndarray            # (MAX_ITEMS,) int32
    obj_mask: np.ndarray              # (MAX_ITEMS,) bool

    def to_obs_dict(self) -> Dict[str, np.ndarray]:
        """Convert to Gymnasium observation dictionary."""
        return {
            # Core state
            "state": np.array(self.state, dtype=np.int32),
            "score": np.array(self.score, dtype=np.int64),
            "time_left": np.array(self.time_left, dtype=np.int32),
            "target_score": np.array(self.target_score, dtype=np.int64),
            "catches": np.array(self.catches, dtype=np.int32),
            "items_count": np.array(self.items_count, dtype=np.int32),

            # Hook
            "hook_x": np.array(self.hook_x, dtype=np.float32),
            "hook_direction": np.array(self.hook_direction, dtype=np.int32),
            "catch_phase": np.array(self.catch_phase, dtype=np.int32),

            # Feedback
            "last_caught_kind": np.array(self.last_caught_kind, dtype=np.int32),
            "last_caught_points": np.array(self.last_caught_points, dtype=np.int32),

            # Field info
            "field_width": np.array(self.field_width, dtype=np.float32),
            "field_height": np.array(self.field_height, dtype=np.float32),
            "catch_depth": np.array(self.catch_depth, dtype=np.float32),
            "catch_tolerance_x": np.array(self.catch_tolerance_x, dtype=np.float32),
            "catch_tolerance_y": np.array(self.catch_tolerance_y, dtype=np.float32),

            # Item arrays
            "obj_uid": self.obj_uid,
            "obj_kind": self.obj_kind,
            "obj_x": self.obj_x,
            "obj_y": self.obj_y,
            "obj_points": self.obj_points,
            "obj_mask": self.obj_mask,
        }


class SnapshotBuilder:
    """Builds game state snapshots sized from the observation config."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._catalog = get_catalog(config)
        self._max_items = config.observation.max_items

    @property
    def max_items(self) -> int:
        return self._max_items

    def build(
        self,
        state: GameState,
        time_ms: int,
        hook: Hook,
        items: Sequence[Item],
        score: int,
        time_left: int,
        catches: int,
        last_caught: Optional[CaughtItem]
    ) -> GameSnapshot:
        """Build a snapshot from current game state."""
        obj_uid = np.zeros(self._max_items, dtype=np.int32)
        obj_kind = np.full(self._max_items, -1, dtype=np.int16)
        obj_x = np.zeros(self._max_items, dtype=np.float32)
        obj_y = np.zeros(self._max_items, dtype=np.float32)
        obj_points = np.zeros(self._max_items, dtype=np.int32)
        obj_mask = np.zeros(self._max_items, dtype=bool)

        # Items beyond the array size are left out, oldest kept
        count = min(len(items), self._max_items)
        for i in range(count):
            item = items[i]
            obj_uid[i] = item.uid
            obj_kind[i] = self._catalog.index_of(item.kind)
            obj_x[i] = item.x
            obj_y[i] = item.y
            obj_points[i] = item.points
            obj_mask[i] = True

        if last_caught is not None:
            last_kind = self._catalog.index_of(last_caught.kind)
            last_points = last_caught.points
        else:
            last_kind = -1
            last_points = 0

        field = self._config.field
        catch = self._config.catch
        return GameSnapshot(
            state=state.value,
            time_ms=time_ms,
            score=score,
            time_left=time_left,
            target_score=self._config.session.target_score,
            catches=catches,
            items_count=count,
            hook_x=hook.x,
            hook_direction=hook.direction,
            catch_phase=hook.phase.value,
            last_caught_kind=last_kind,
            last_caught_points=last_points,
            field_width=field.width,
            field_height=field.height,
            catch_depth=catch.depth_y,
            catch_tolerance_x=catch.tolerance_x,
            catch_tolerance_y=catch.tolerance_y,
            obj_uid=obj_uid,
            obj_kind=obj_kind,
            obj_x=obj_x,
            obj_y=obj_y,
            obj_points=obj_points,
            obj_mask=obj_mask
        )

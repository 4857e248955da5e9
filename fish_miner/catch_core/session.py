"""
Session State
=============

The mutable state of one playthrough. Only CoreGame creates or discards a
Session; the components read and write it through the game's timer callbacks.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional

from fish_miner.catch_core.config_loader import ItemKind
from fish_miner.catch_core.hook import Hook
from fish_miner.catch_core.items import Item
from fish_miner.catch_core.scoring import ScoreTracker


class GameState(Enum):
    """Lifecycle of the game."""
    IDLE = 0        # Not started yet
    ACTIVE = 1      # Simulation running
    ENDED = 2       # Score final


@dataclass(frozen=True)
class CaughtItem:
    """Feedback snapshot of the last caught item, shown for a short time."""
    uid: int
    kind: ItemKind
    points: int
    caught_at_ms: int

    def to_dict(self) -> dict:
        return {
            "uid": self.uid,
            "kind": self.kind.value,
            "points": self.points,
            "caught_at_ms": self.caught_at_ms,
        }


@dataclass
class Session:
    """One playthrough from start to termination."""
    generation: int
    time_left: int
    hook: Hook
    started_at_ms: int
    items: List[Item] = field(default_factory=list)
    scorer: ScoreTracker = field(default_factory=ScoreTracker)
    last_caught: Optional[CaughtItem] = None
    ended_at_ms: Optional[int] = None
    termination_reason: str = ""
    _uids: Iterator[int] = field(
        default_factory=lambda: itertools.count(1), init=False, repr=False, compare=False
    )

    @property
    def score(self) -> int:
        return self.scorer.score

    def next_uid(self) -> int:
        """Next item identifier; strictly increasing within the session."""
        return next(self._uids)

    def find_item(self, uid: int) -> Optional[Item]:
        for item in self.items:
            if item.uid == uid:
                return item
        return None

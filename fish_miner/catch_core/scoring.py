"""
Scoring System
==============

Applies catch scores. A successful catch is the only thing that moves the
score, so the score always equals the sum of the recorded events.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from fish_miner.catch_core.config_loader import ItemKind
from fish_miner.catch_core.items import Item


@dataclass(frozen=True)
class CatchEvent:
    """Record of a scoring catch."""
    uid: int
    kind: ItemKind
    points: int
    score_after: int
    time_ms: int

    def __repr__(self) -> str:
        sign = "+" if self.points >= 0 else ""
        return f"CatchEvent({self.kind.value}#{self.uid}={sign}{self.points})"


class ScoreTracker:
    """
    Tracks a session's score and the catches that produced it.

    Scores have no floor or ceiling; a run of garbage can push the score
    below zero.
    """

    def __init__(self):
        self._score: int = 0
        self._events: List[CatchEvent] = []

    @property
    def score(self) -> int:
        """Current total score."""
        return self._score

    @property
    def catches(self) -> int:
        """Number of successful catches."""
        return len(self._events)

    @property
    def events(self) -> Tuple[CatchEvent, ...]:
        """Every catch in the order it resolved."""
        return tuple(self._events)

    def apply_catch(self, item: Item, time_ms: int) -> CatchEvent:
        """
        Add a caught item's points to the score.

        Args:
            item: The item removed from the field.
            time_ms: Virtual time of the catch.

        Returns:
            CatchEvent describing the points awarded.
        """
        self._score += item.points
        event = CatchEvent(
            uid=item.uid,
            kind=item.kind,
            points=item.points,
            score_after=self._score,
            time_ms=time_ms
        )
        self._events.append(event)
        return event

    def reset(self) -> None:
        """Reset score to zero."""
        self._score = 0
        self._events = []

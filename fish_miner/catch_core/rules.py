"""
Game Rules
==========

Handles termination conditions: countdown expiry and target score.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fish_miner.catch_core.config_loader import GameConfig, get_config

TIME_UP = "time_up"
TARGET_REACHED = "target_reached"
ABORTED = "aborted"


@dataclass(frozen=True)
class TerminationResult:
    """Result of termination check."""
    terminated: bool
    reason: str

    @staticmethod
    def none() -> "TerminationResult":
        return TerminationResult(False, "")

    @staticmethod
    def game_over(reason: str) -> "TerminationResult":
        return TerminationResult(True, reason)


class TerminationRules:
    """
    Handles game termination conditions.

    - Time up: the countdown reached zero
    - Target reached: the score is at or above the target
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize termination rules.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._duration = config.session.duration
        self._target_score = config.session.target_score

    @property
    def duration(self) -> int:
        """Seconds on the countdown at session start."""
        return self._duration

    @property
    def target_score(self) -> int:
        return self._target_score

    def check_termination(self, score: int, time_left: int) -> TerminationResult:
        """
        Check all termination conditions.

        Args:
            score: Current score.
            time_left: Seconds remaining.

        Returns:
            TerminationResult indicating game state.
        """
        if time_left <= 0:
            return TerminationResult.game_over(TIME_UP)

        if score >= self._target_score:
            return TerminationResult.game_over(TARGET_REACHED)

        return TerminationResult.none()

"""
Hook
====

Hook state and the sweeper that bounces it between the field bounds.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from fish_miner.catch_core.config_loader import GameConfig, get_config


class CatchPhase(Enum):
    """Catch animation phase of the hook."""
    NONE = 0
    EXTENDING = 1
    RETRACTING = 2


@dataclass
class Hook:
    """
    The hook sweeping above the field.

    ``x`` and ``direction`` belong to the sweeper; ``phase`` and ``drop_x``
    belong to the catch resolver.
    """
    x: float
    direction: int
    phase: CatchPhase = CatchPhase.NONE
    drop_x: Optional[float] = None      # Where the current catch line was dropped

    @property
    def is_idle(self) -> bool:
        """True if no catch is in flight."""
        return self.phase is CatchPhase.NONE

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "direction": self.direction,
            "phase": self.phase.name.lower(),
            "drop_x": self.drop_x,
        }


class HookSweeper:
    """
    Moves the hook a fixed step per sweep tick.

    Reaching or passing a bound while moving towards it clamps the hook to the
    bound and flips its direction in the same tick.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._min_x = config.hook.min_x
        self._max_x = config.hook.max_x
        self._step = config.hook.step
        self._start_x = config.hook.start_x
        self._start_direction = config.hook.start_direction

    @property
    def min_x(self) -> float:
        return self._min_x

    @property
    def max_x(self) -> float:
        return self._max_x

    def new_hook(self) -> Hook:
        """Hook at its configured start position and direction."""
        return Hook(x=self._start_x, direction=self._start_direction)

    def tick(self, hook: Hook) -> bool:
        """
        Advance the hook by one step.

        Args:
            hook: Hook to move in place.

        Returns:
            True if the hook hit a bound and flipped direction.
        """
        new_x = hook.x + hook.direction * self._step

        if hook.direction > 0 and new_x >= self._max_x:
            hook.x = self._max_x
            hook.direction = -1
            return True
        if hook.direction < 0 and new_x <= self._min_x:
            hook.x = self._min_x
            hook.direction = 1
            return True

        hook.x = new_x
        return False

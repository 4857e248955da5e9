"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the Fish Miner game.
Reward is always 0.0 - agents compute their own from info.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

import gymnasium as gym
from gymnasium import spaces

from fish_miner.catch_core.config_loader import GameConfig, load_config
from fish_miner.catch_core.game import CoreGame
from fish_miner.catch_core.hook import CatchPhase
from fish_miner.catch_core.session import GameState

logger = logging.getLogger(__name__)

ACTION_WAIT = 0
ACTION_CATCH = 1


class FishMinerEnv(gym.Env):
    """
    Fish Miner catching game as a Gymnasium environment.

    Action Space:
        Discrete(2). 0 waits, 1 drops the catch line (ignored while a catch
        is already in flight).

    Each step advances ``observation.frame_ms`` of game time.

    Observation Space:
        Dict of scalars (score, countdown, hook) and fixed-size item arrays.

    Reward:
        Always 0.0. Agents must compute their own reward from the info dict.

    Info:
        Contains score, delta_score, time_left, catches, terminated_reason, etc.
    """

    metadata = {
        "render_modes": [],
        "render_fps": 60,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        config: Optional[GameConfig] = None,
        frame_ms: Optional[int] = None,
        debug: bool = False,
    ):
        """
        Initialize Fish Miner environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            config: Already-loaded configuration; takes precedence over config_path.
            frame_ms: Override the game time advanced per step.
            debug: If True, log every step at INFO level.
        """
        super().__init__()

        self._config = config if config is not None else load_config(config_path)
        self._frame_ms = frame_ms or self._config.observation.frame_ms
        self._debug = debug

        self._game = CoreGame(config=self._config)

        self.action_space = spaces.Discrete(2)
        self.observation_space = self._build_observation_space()

        if self._debug:
            logger.info(
                f"FishMinerEnv initialized: field {self._config.field.width}x"
                f"{self._config.field.height}, frame {self._frame_ms}ms, "
                f"max items {self._config.observation.max_items}"
            )

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        max_items = self._config.observation.max_items
        field = self._config.field
        hook = self._config.hook
        num_kinds = self._config.num_item_kinds
        score_bound = np.iinfo(np.int64).max

        obs_dict = {
            # Core state
            "state": spaces.Discrete(len(GameState)),
            "score": spaces.Box(low=-score_bound, high=score_bound, shape=(), dtype=np.int64),
            "time_left": spaces.Box(low=0, high=self._config.session.duration, shape=(), dtype=np.int32),
            "target_score": spaces.Box(low=-score_bound, high=score_bound, shape=(), dtype=np.int64),
            "catches": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),
            "items_count": spaces.Box(low=0, high=max_items, shape=(), dtype=np.int32),

            # Hook
            "hook_x": spaces.Box(low=hook.min_x, high=hook.max_x, shape=(), dtype=np.float32),
            "hook_direction": spaces.Box(low=-1, high=1, shape=(), dtype=np.int32),
            "catch_phase": spaces.Discrete(len(CatchPhase)),

            # Feedback
            "last_caught_kind": spaces.Box(low=-1, high=num_kinds - 1, shape=(), dtype=np.int32),
            "last_caught_points": spaces.Box(low=-1000, high=1000, shape=(), dtype=np.int32),

            # Field info
            "field_width": spaces.Box(low=0, high=10000, shape=(), dtype=np.float32),
            "field_height": spaces.Box(low=0, high=10000, shape=(), dtype=np.float32),
            "catch_depth": spaces.Box(low=0, high=10000, shape=(), dtype=np.float32),
            "catch_tolerance_x": spaces.Box(low=0, high=10000, shape=(), dtype=np.float32),
            "catch_tolerance_y": spaces.Box(low=0, high=10000, shape=(), dtype=np.float32),

            # Item arrays
            "obj_uid": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(max_items,), dtype=np.int32),
            "obj_kind": spaces.Box(low=-1, high=num_kinds - 1, shape=(max_items,), dtype=np.int16),
            "obj_x": spaces.Box(low=0, high=field.width, shape=(max_items,), dtype=np.float32),
            "obj_y": spaces.Box(low=-np.inf, high=np.inf, shape=(max_items,), dtype=np.float32),
            "obj_points": spaces.Box(low=-1000, high=1000, shape=(max_items,), dtype=np.int32),
            "obj_mask": spaces.MultiBinary(max_items),
        }

        return spaces.Dict(obs_dict)

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        An episode still running is ended first (reason "reset").

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        if self._game.is_active:
            self._game.end_game("reset")
        self._game.start(seed=seed)

        obs = self._game.snapshot().to_obs_dict()
        info = self._game.get_info()
        info["delta_score"] = 0

        return obs, info

    def step(
        self,
        action: Union[int, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one step.

        Args:
            action: 1 to request a catch, 0 to wait.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item() if action.ndim == 0 else action[0])

        score_before = self._game.score
        catch_started = False
        if int(action) == ACTION_CATCH:
            catch_started = self._game.request_catch()

        snapshot = self._game.advance(self._frame_ms)
        obs = snapshot.to_obs_dict()

        # Reward is always 0.0 - agents compute their own
        reward = 0.0
        terminated = self._game.is_over

        info = self._game.get_info()
        info["delta_score"] = self._game.score - score_before
        info["catch_started"] = catch_started

        if self._debug:
            logger.info(
                f"Step: action={action}, delta_score={info['delta_score']}, "
                f"items={info['items_count']}, phase={info['catch_phase']}"
            )
            if terminated:
                logger.info(f"TERMINATED: {info.get('terminated_reason', 'unknown')}")

        return obs, reward, terminated, False, info

    def close(self) -> None:
        """End a running episode."""
        if self._game.is_active:
            self._game.end_game("closed")

    @property
    def game(self) -> CoreGame:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

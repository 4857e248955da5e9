"""
Tests for the wall-clock driver.
"""

import asyncio
import os

import pytest
import yaml

from fish_miner.catch_core.config_loader import config_from_dict
from fish_miner.catch_core.game import CoreGame
from fish_miner.catch_core.realtime import run_realtime
from fish_miner.catch_core.session import GameState


CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    "fish_miner", "game_config.yaml"
)


@pytest.fixture
def fast_config():
    """Two 50ms countdown seconds."""
    with open(CONFIG_PATH, "r") as f:
        raw = yaml.safe_load(f)
    raw["session"]["duration"] = 2
    raw["session"]["countdown_interval_ms"] = 50
    return config_from_dict(raw)


class TestRunRealtime:
    """Driving the virtual clock from asyncio."""

    def test_runs_until_time_up(self, fast_config):
        game = CoreGame(config=fast_config, seed=1)
        snapshot = asyncio.run(run_realtime(game, frame_ms=5))
        assert game.is_over
        assert game.termination_reason == "time_up"
        assert snapshot.state == GameState.ENDED.value
        assert snapshot.time_left == 0

    def test_frame_callback(self, fast_config):
        game = CoreGame(config=fast_config, seed=1)
        frames = []
        asyncio.run(run_realtime(game, frame_ms=5, on_frame=frames.append))
        assert len(frames) > 1
        assert frames[-1].state == GameState.ENDED.value
        assert [f.time_ms for f in frames] == sorted(f.time_ms for f in frames)

    def test_speed_up(self, fast_config):
        game = CoreGame(config=fast_config, seed=1)
        frames = []
        asyncio.run(run_realtime(game, frame_ms=5, on_frame=frames.append, speed=10.0))
        assert game.is_over
        # Ten virtual ms per real ms; the first frame already covers ~50ms
        assert frames[0].time_ms >= 40

    def test_catch_from_callback(self, fast_config):
        game = CoreGame(config=fast_config, seed=1)
        requests = []

        def on_frame(snapshot):
            if not requests and game.is_active:
                requests.append(game.request_catch())

        asyncio.run(run_realtime(game, frame_ms=5, on_frame=on_frame))
        assert requests == [True]

    def test_invalid_speed(self, fast_config):
        game = CoreGame(config=fast_config)
        with pytest.raises(ValueError):
            asyncio.run(run_realtime(game, speed=0))

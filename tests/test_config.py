"""
Tests for configuration loading and validation.
"""

import copy
import os

import pytest
import yaml

from fish_miner.catch_core.config_loader import (
    ItemKind,
    config_from_dict,
    load_config,
)


CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    "fish_miner", "game_config.yaml"
)


@pytest.fixture
def raw():
    with open(CONFIG_PATH, "r") as f:
        return yaml.safe_load(f)


class TestDefaultConfig:
    """The shipped game_config.yaml."""

    def test_loads(self):
        config = load_config()
        assert config.session.duration == 60
        assert config.session.target_score == 500

    def test_hook_defaults(self):
        hook = load_config().hook
        assert hook.start_x == 250
        assert hook.start_direction == 1
        assert (hook.min_x, hook.max_x) == (20, 460)

    def test_catch_window(self):
        catch = load_config().catch
        assert catch.tolerance_x == 40
        assert catch.depth_y == 350
        assert catch.tolerance_y == 100
        assert catch.extend_ms == 500
        assert catch.retract_ms == 500

    def test_item_ranges(self):
        config = load_config()
        assert config.num_item_kinds == 3
        fish = config.get_item_type(ItemKind.FISH)
        garbage = config.get_item_type(ItemKind.GARBAGE)
        mystery = config.get_item_type(ItemKind.MYSTERY)
        assert (fish.points_min, fish.points_max) == (20, 59)
        assert (garbage.points_min, garbage.points_max) == (-49, -30)
        assert (mystery.points_min, mystery.points_max) == (-50, 50)

    def test_spawn_range(self):
        assert load_config().field.spawn_x_range == (40, 460)

    def test_explicit_path(self):
        config = load_config(CONFIG_PATH)
        assert config.fall.step == 5

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_config_is_frozen(self):
        config = load_config()
        with pytest.raises(Exception):
            config.session.duration = 10


class TestValidation:
    """Invalid configurations are rejected with ValueError."""

    def test_round_trip_from_dict(self, raw):
        assert config_from_dict(raw) == load_config()

    def test_optional_sections_default(self, raw):
        del raw["recovery"]
        del raw["feedback"]
        config = config_from_dict(raw)
        assert config.recovery.enabled is False
        assert config.feedback.display_ms == 1500

    def test_missing_kind(self, raw):
        raw["items"] = raw["items"][:2]
        with pytest.raises(ValueError, match="mystery"):
            config_from_dict(raw)

    def test_duplicate_kind(self, raw):
        raw["items"].append(copy.deepcopy(raw["items"][0]))
        with pytest.raises(ValueError, match="exactly once"):
            config_from_dict(raw)

    def test_unknown_kind(self, raw):
        raw["items"][0]["kind"] = "treasure"
        with pytest.raises(ValueError, match="treasure"):
            config_from_dict(raw)

    def test_fish_must_be_positive(self, raw):
        raw["items"][0]["points_min"] = 0
        with pytest.raises(ValueError, match="fish"):
            config_from_dict(raw)

    def test_garbage_must_be_negative(self, raw):
        raw["items"][1]["points_max"] = 5
        with pytest.raises(ValueError, match="garbage"):
            config_from_dict(raw)

    def test_inverted_range(self, raw):
        raw["items"][2]["points_min"] = 60
        with pytest.raises(ValueError):
            config_from_dict(raw)

    def test_hook_bounds(self, raw):
        raw["hook"]["min_x"] = 500
        with pytest.raises(ValueError, match="hook"):
            config_from_dict(raw)

    def test_hook_direction(self, raw):
        raw["hook"]["start_direction"] = 0
        with pytest.raises(ValueError, match="start_direction"):
            config_from_dict(raw)

    @pytest.mark.parametrize("section,key", [
        ("fall", "tick_ms"),
        ("hook", "tick_ms"),
        ("spawn", "interval_ms"),
        ("session", "countdown_interval_ms"),
    ])
    def test_intervals_must_be_positive(self, raw, section, key):
        raw[section][key] = 0
        with pytest.raises(ValueError, match="must be positive"):
            config_from_dict(raw)

    def test_negative_delay(self, raw):
        raw["catch"]["extend_ms"] = -1
        with pytest.raises(ValueError, match="extend_ms"):
            config_from_dict(raw)

    def test_zero_duration_allowed(self, raw):
        raw["session"]["duration"] = 0
        assert config_from_dict(raw).session.duration == 0

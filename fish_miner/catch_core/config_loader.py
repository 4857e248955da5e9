"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml


class ItemKind(str, Enum):
    """The closed set of falling item kinds."""
    FISH = "fish"            # Always worth points
    GARBAGE = "garbage"      # Always costs points
    MYSTERY = "mystery"      # Either sign


@dataclass(frozen=True)
class SessionConfig:
    """Countdown and win condition."""
    duration: int                # Seconds on the countdown
    target_score: int            # Score at which the game ends
    countdown_interval_ms: int   # Virtual ms per countdown second


@dataclass(frozen=True)
class FieldConfig:
    """Play field geometry."""
    width: float
    height: float
    spawn_margin: float          # Distance from the side walls for spawning
    spawn_y: float               # Y coordinate where items appear
    lower_bound_y: float         # Items at or below this are pruned

    @property
    def spawn_x_range(self) -> Tuple[float, float]:
        return (self.spawn_margin, self.width - self.spawn_margin)


@dataclass(frozen=True)
class HookConfig:
    """Hook sweep parameters."""
    min_x: float
    max_x: float
    start_x: float
    start_direction: int
    step: float
    tick_ms: int


@dataclass(frozen=True)
class FallConfig:
    """Item fall parameters."""
    step: float
    tick_ms: int


@dataclass(frozen=True)
class SpawnConfig:
    """Item spawn cadence."""
    interval_ms: int


@dataclass(frozen=True)
class ItemTypeConfig:
    """Point range for a single item kind (inclusive on both ends)."""
    kind: ItemKind
    points_min: int
    points_max: int


@dataclass(frozen=True)
class CatchConfig:
    """Catch window and animation delays."""
    tolerance_x: float
    depth_y: float
    tolerance_y: float
    extend_ms: int
    retract_ms: int


@dataclass(frozen=True)
class FeedbackConfig:
    """Last-caught feedback display."""
    display_ms: int


@dataclass(frozen=True)
class ObservationConfig:
    """Observation space parameters."""
    max_items: int
    frame_ms: int


@dataclass(frozen=True)
class RecoveryConfig:
    """Local crash-recovery snapshot."""
    enabled: bool
    path: str


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    session: SessionConfig
    field: FieldConfig
    hook: HookConfig
    fall: FallConfig
    spawn: SpawnConfig
    items: Tuple[ItemTypeConfig, ...]
    catch: CatchConfig
    feedback: FeedbackConfig
    observation: ObservationConfig
    recovery: RecoveryConfig

    @property
    def num_item_kinds(self) -> int:
        """Number of item kinds in the catalog."""
        return len(self.items)

    def get_item_type(self, kind: ItemKind) -> ItemTypeConfig:
        """Get the point range config for an item kind."""
        for item_type in self.items:
            if item_type.kind == kind:
                return item_type
        raise ValueError(f"No item config for kind: {kind}")


def _parse_item_type(item_data: dict) -> ItemTypeConfig:
    """Parse a single item kind configuration from YAML."""
    try:
        kind = ItemKind(str(item_data["kind"]))
    except ValueError:
        raise ValueError(
            f"Unknown item kind '{item_data['kind']}', "
            f"expected one of {[k.value for k in ItemKind]}"
        ) from None
    return ItemTypeConfig(
        kind=kind,
        points_min=int(item_data["points_min"]),
        points_max=int(item_data["points_max"])
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    # Every kind configured exactly once
    kinds: Dict[ItemKind, int] = {}
    for item_type in config.items:
        kinds[item_type.kind] = kinds.get(item_type.kind, 0) + 1
    for kind in ItemKind:
        if kinds.get(kind, 0) != 1:
            raise ValueError(
                f"Item kind '{kind.value}' must be configured exactly once, "
                f"found {kinds.get(kind, 0)}"
            )

    for item_type in config.items:
        if item_type.points_min > item_type.points_max:
            raise ValueError(
                f"{item_type.kind.value}: points_min ({item_type.points_min}) "
                f"exceeds points_max ({item_type.points_max})"
            )

    # Each kind keeps its sign
    fish = config.get_item_type(ItemKind.FISH)
    if fish.points_min <= 0:
        raise ValueError(f"fish points must be positive, got min {fish.points_min}")
    garbage = config.get_item_type(ItemKind.GARBAGE)
    if garbage.points_max >= 0:
        raise ValueError(f"garbage points must be negative, got max {garbage.points_max}")
    mystery = config.get_item_type(ItemKind.MYSTERY)
    if not (mystery.points_min < 0 < mystery.points_max):
        raise ValueError(
            f"mystery points must span both signs, got "
            f"[{mystery.points_min}, {mystery.points_max}]"
        )

    hook = config.hook
    if hook.min_x >= hook.max_x:
        raise ValueError(f"hook.min_x ({hook.min_x}) must be below hook.max_x ({hook.max_x})")
    if not (hook.min_x <= hook.start_x <= hook.max_x):
        raise ValueError(
            f"hook.start_x ({hook.start_x}) outside [{hook.min_x}, {hook.max_x}]"
        )
    if hook.start_direction not in (-1, 1):
        raise ValueError(f"hook.start_direction must be 1 or -1, got {hook.start_direction}")

    spawn_min, spawn_max = config.field.spawn_x_range
    if spawn_min > spawn_max:
        raise ValueError(
            f"field.spawn_margin ({config.field.spawn_margin}) leaves no room "
            f"to spawn in a field of width {config.field.width}"
        )
    if config.field.spawn_y >= config.field.lower_bound_y:
        raise ValueError("field.spawn_y must be above field.lower_bound_y")

    intervals = {
        "session.countdown_interval_ms": config.session.countdown_interval_ms,
        "hook.tick_ms": hook.tick_ms,
        "fall.tick_ms": config.fall.tick_ms,
        "spawn.interval_ms": config.spawn.interval_ms,
        "observation.frame_ms": config.observation.frame_ms,
    }
    for name, value in intervals.items():
        if value <= 0:
            raise ValueError(f"{name} must be positive, got {value}")

    delays = {
        "catch.extend_ms": config.catch.extend_ms,
        "catch.retract_ms": config.catch.retract_ms,
        "feedback.display_ms": config.feedback.display_ms,
    }
    for name, value in delays.items():
        if value < 0:
            raise ValueError(f"{name} must not be negative, got {value}")

    if config.session.duration < 0:
        raise ValueError(f"session.duration must not be negative, got {config.session.duration}")
    if config.observation.max_items <= 0:
        raise ValueError("observation.max_items must be positive")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    return config_from_dict(raw)


def config_from_dict(raw: dict) -> GameConfig:
    """
    Build and validate a GameConfig from already-parsed YAML data.

    Raises:
        ValueError: If config validation fails.
    """
    session_data = raw["session"]
    session = SessionConfig(
        duration=int(session_data["duration"]),
        target_score=int(session_data["target_score"]),
        countdown_interval_ms=int(session_data.get("countdown_interval_ms", 1000))
    )

    field_data = raw["field"]
    field = FieldConfig(
        width=float(field_data["width"]),
        height=float(field_data["height"]),
        spawn_margin=float(field_data.get("spawn_margin", 40)),
        spawn_y=float(field_data.get("spawn_y", 0)),
        lower_bound_y=float(field_data["lower_bound_y"])
    )

    hook_data = raw["hook"]
    hook = HookConfig(
        min_x=float(hook_data["min_x"]),
        max_x=float(hook_data["max_x"]),
        start_x=float(hook_data["start_x"]),
        start_direction=int(hook_data.get("start_direction", 1)),
        step=float(hook_data["step"]),
        tick_ms=int(hook_data["tick_ms"])
    )

    fall_data = raw["fall"]
    fall = FallConfig(
        step=float(fall_data["step"]),
        tick_ms=int(fall_data["tick_ms"])
    )

    spawn = SpawnConfig(interval_ms=int(raw["spawn"]["interval_ms"]))

    items = tuple(_parse_item_type(item) for item in raw["items"])

    catch_data = raw["catch"]
    catch = CatchConfig(
        tolerance_x=float(catch_data["tolerance_x"]),
        depth_y=float(catch_data["depth_y"]),
        tolerance_y=float(catch_data["tolerance_y"]),
        extend_ms=int(catch_data["extend_ms"]),
        retract_ms=int(catch_data["retract_ms"])
    )

    feedback = FeedbackConfig(
        display_ms=int(raw.get("feedback", {}).get("display_ms", 1500))
    )

    obs_data = raw.get("observation", {})
    observation = ObservationConfig(
        max_items=int(obs_data.get("max_items", 16)),
        frame_ms=int(obs_data.get("frame_ms", hook.tick_ms))
    )

    # Optional section
    recovery_data = raw.get("recovery", {})
    recovery = RecoveryConfig(
        enabled=bool(recovery_data.get("enabled", False)),
        path=str(recovery_data.get("path", "fish_miner_state.json"))
    )

    config = GameConfig(
        session=session,
        field=field,
        hook=hook,
        fall=fall,
        spawn=spawn,
        items=items,
        catch=catch,
        feedback=feedback,
        observation=observation,
        recovery=recovery
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config

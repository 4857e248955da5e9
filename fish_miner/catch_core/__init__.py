"""
Catch Core - The game simulation engine.

This module provides the core game simulation, Gymnasium environment wrapper,
and all supporting systems (clock, spawning, fall, hook, catches, scoring).

Main exports:
- CoreGame: The game state machine (start, request_catch, advance, ...)
- FishMinerEnv: Gymnasium environment for agents
- VirtualClock: Deterministic timer queue driving the game
- GameConfig: Configuration loaded from game_config.yaml
- run_realtime: Drive a game against the wall clock from asyncio
"""

from fish_miner.catch_core.config_loader import GameConfig, ItemKind, load_config
from fish_miner.catch_core.item_catalog import ItemType, ItemCatalog
from fish_miner.catch_core.clock import TimerHandle, VirtualClock
from fish_miner.catch_core.items import Item, FallSimulator
from fish_miner.catch_core.hook import CatchPhase, Hook, HookSweeper
from fish_miner.catch_core.rng import ItemSpawner
from fish_miner.catch_core.catch import CatchResolver
from fish_miner.catch_core.scoring import CatchEvent, ScoreTracker
from fish_miner.catch_core.session import CaughtItem, GameState, Session
from fish_miner.catch_core.state_snapshot import GameSnapshot
from fish_miner.catch_core.game import CoreGame
from fish_miner.catch_core.recovery import LocalSnapshotStore
from fish_miner.catch_core.env_gym import FishMinerEnv
from fish_miner.catch_core.realtime import run_realtime

__all__ = [
    "GameConfig",
    "ItemKind",
    "load_config",
    "ItemType",
    "ItemCatalog",
    "TimerHandle",
    "VirtualClock",
    "Item",
    "FallSimulator",
    "CatchPhase",
    "Hook",
    "HookSweeper",
    "ItemSpawner",
    "CatchResolver",
    "CatchEvent",
    "ScoreTracker",
    "CaughtItem",
    "GameState",
    "Session",
    "GameSnapshot",
    "CoreGame",
    "LocalSnapshotStore",
    "FishMinerEnv",
    "run_realtime",
]

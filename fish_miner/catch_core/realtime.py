"""
Real-Time Driver
================

Runs a CoreGame against the wall clock from an asyncio loop. Each frame the
elapsed real time is fed into the game's virtual clock, so the same
deterministic timers drive both headless simulation and live play.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from fish_miner.catch_core.game import CoreGame
from fish_miner.catch_core.state_snapshot import GameSnapshot

logger = logging.getLogger(__name__)

FrameCallback = Callable[[GameSnapshot], None]


async def run_realtime(
    game: CoreGame,
    frame_ms: Optional[int] = None,
    on_frame: Optional[FrameCallback] = None,
    speed: float = 1.0
) -> GameSnapshot:
    """
    Drive an active game in real time until it ends.

    Args:
        game: Game to drive. Started first if it is not active.
        frame_ms: Target frame period. Defaults to observation.frame_ms.
        on_frame: Called with a snapshot after every frame. Catch requests
            made from it are picked up on the next frame.
        speed: Virtual milliseconds per real millisecond.

    Returns:
        Snapshot of the ended game.
    """
    if frame_ms is None:
        frame_ms = game.config.observation.frame_ms
    if speed <= 0:
        raise ValueError(f"speed must be positive, got {speed}")

    if not game.is_active:
        game.start()

    loop = asyncio.get_running_loop()
    last = loop.time()
    carry = 0.0

    while game.is_active:
        await asyncio.sleep(frame_ms / 1000.0)
        now = loop.time()
        # Whole milliseconds only; the remainder carries to the next frame
        elapsed = (now - last) * 1000.0 * speed + carry
        last = now
        step = int(elapsed)
        carry = elapsed - step
        snapshot = game.advance(step)
        if on_frame is not None:
            on_frame(snapshot)

    logger.debug(f"Real-time run finished at virtual t={game.clock.now_ms}ms")
    return game.snapshot()

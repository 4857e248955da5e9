"""
Core Game
=========

Main game orchestrator: owns the session, the clock timers and every
component, and enforces the IDLE -> ACTIVE -> ENDED lifecycle.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from fish_miner.catch_core.catch import CatchResolver
from fish_miner.catch_core.clock import TimerHandle, VirtualClock
from fish_miner.catch_core.config_loader import GameConfig, get_config
from fish_miner.catch_core.hook import CatchPhase, Hook, HookSweeper
from fish_miner.catch_core.item_catalog import ItemCatalog, get_catalog
from fish_miner.catch_core.items import FallSimulator, Item
from fish_miner.catch_core.recovery import LocalSnapshotStore
from fish_miner.catch_core.rng import ItemSpawner
from fish_miner.catch_core.rules import ABORTED, TerminationRules
from fish_miner.catch_core.session import CaughtItem, GameState, Session
from fish_miner.catch_core.state_snapshot import GameSnapshot, SnapshotBuilder

logger = logging.getLogger(__name__)

# Called as listener(event, game) with event one of
# "started", "tick", "catch", "ended"
GameListener = Callable[[str, "CoreGame"], None]


class CoreGame:
    """
    Main game simulation class.

    Orchestrates:
    - Item spawner (RNG)
    - Fall simulator
    - Hook sweeper
    - Catch resolver and scoring
    - Termination rules
    - State snapshots

    All timing runs on a VirtualClock. Every timer callback is tagged with the
    session generation it was scheduled for and is dropped if that session is
    no longer the active one, so nothing scheduled for an old session can
    touch a newer one. Ending a session cancels every timer except the
    pending clear of the last-caught feedback, which still runs on time.

    Requests that are not valid in the current state (start while active,
    catch while idle or ended, restart before the game ended) do nothing and
    return False.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        clock: Optional[VirtualClock] = None
    ):
        """
        Initialize game.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducible spawns.
            clock: Clock to schedule on. A private one is created if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._clock = clock if clock is not None else VirtualClock()

        # Initialize subsystems
        self._catalog = get_catalog(config)
        self._spawner = ItemSpawner(config, seed)
        self._fall = FallSimulator(config)
        self._sweeper = HookSweeper(config)
        self._resolver = CatchResolver(config)
        self._rules = TerminationRules(config)
        self._snapshot_builder = SnapshotBuilder(config)

        # Game state
        self._state = GameState.IDLE
        self._session: Optional[Session] = None
        self._generation = 0
        self._timers: List[TimerHandle] = []
        self._feedback_timer: Optional[TimerHandle] = None
        self._listeners: List[GameListener] = []

        if config.recovery.enabled:
            self.add_listener(LocalSnapshotStore(config.recovery.path))

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def clock(self) -> VirtualClock:
        return self._clock

    @property
    def catalog(self) -> ItemCatalog:
        return self._catalog

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def session(self) -> Optional[Session]:
        """The current (or last) session, None before the first start."""
        return self._session

    @property
    def is_active(self) -> bool:
        return self._state is GameState.ACTIVE

    @property
    def is_over(self) -> bool:
        """True if game has ended."""
        return self._state is GameState.ENDED

    @property
    def score(self) -> int:
        """Current score."""
        return self._session.score if self._session is not None else 0

    @property
    def time_left(self) -> int:
        """Seconds remaining on the countdown."""
        if self._session is None:
            return self._rules.duration
        return self._session.time_left

    @property
    def items(self) -> Tuple[Item, ...]:
        """Live items, oldest first."""
        return tuple(self._session.items) if self._session is not None else ()

    @property
    def hook(self) -> Hook:
        if self._session is None:
            return self._sweeper.new_hook()
        return self._session.hook

    @property
    def catch_phase(self) -> CatchPhase:
        return self.hook.phase

    @property
    def last_caught(self) -> Optional[CaughtItem]:
        return self._session.last_caught if self._session is not None else None

    @property
    def catches(self) -> int:
        return self._session.scorer.catches if self._session is not None else 0

    @property
    def termination_reason(self) -> str:
        """Reason for game end, or empty string."""
        return self._session.termination_reason if self._session is not None else ""

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, seed: Optional[int] = None) -> bool:
        """
        Start a new session from IDLE or ENDED.

        Args:
            seed: New random seed. Continues the current sequence if None.

        Returns:
            True if a session started, False if one is already active.
        """
        if self._state is GameState.ACTIVE:
            logger.debug("Ignoring start request: game already active")
            return False
        self._begin_session(seed)
        return True

    def restart(self, seed: Optional[int] = None) -> bool:
        """
        Start a new session after the previous one ended.

        Returns:
            True if a session started, False unless the game is ENDED.
        """
        if self._state is not GameState.ENDED:
            logger.debug(f"Ignoring restart request in state {self._state.name}")
            return False
        self._begin_session(seed)
        return True

    def end_game(self, reason: str = ABORTED) -> bool:
        """
        End the active session early.

        Returns:
            True if a session was ended.
        """
        if self._state is not GameState.ACTIVE:
            logger.debug(f"Ignoring end request in state {self._state.name}")
            return False
        self._finish(reason)
        return True

    def request_catch(self) -> bool:
        """
        Drop the catch line at the hook's current column.

        The catch is checked after the extend delay. At most one catch is in
        flight at a time; extra requests are ignored.

        Returns:
            True if a catch started.
        """
        if self._state is not GameState.ACTIVE:
            logger.debug(f"Ignoring catch request in state {self._state.name}")
            return False
        if not self._resolver.begin(self._session.hook):
            logger.debug(f"Ignoring catch request: hook is {self._session.hook.phase.name}")
            return False
        self._later(self._resolver.extend_ms, self._on_catch_extended, "catch-extend")
        return True

    def advance(self, ms: int) -> GameSnapshot:
        """
        Move the game clock forward.

        Args:
            ms: Virtual milliseconds to simulate.

        Returns:
            Snapshot after the advance.
        """
        self._clock.advance(ms)
        return self.snapshot()

    def _begin_session(self, seed: Optional[int]) -> None:
        self._cancel_timers()
        self._spawner.reset(seed)
        self._generation += 1
        self._session = Session(
            generation=self._generation,
            time_left=self._rules.duration,
            hook=self._sweeper.new_hook(),
            started_at_ms=self._clock.now_ms
        )
        self._state = GameState.ACTIVE
        logger.info(
            f"Session {self._generation} started: {self._rules.duration}s, "
            f"target {self._rules.target_score}"
        )

        # Creation order decides who runs first on shared ticks: the countdown
        # goes first so nothing else moves in the instant the time runs out,
        # and items fall before the spawn so new items start at the top
        self._every(self._config.session.countdown_interval_ms, self._on_countdown_tick, "countdown")
        self._every(self._config.fall.tick_ms, self._on_fall_tick, "fall")
        self._every(self._config.hook.tick_ms, self._on_sweep_tick, "sweep")
        self._every(self._config.spawn.interval_ms, self._on_spawn_tick, "spawn")

        self._notify("started")
        # A zero duration or non-positive target ends the game at once
        self._check_termination()

    def _finish(self, reason: str) -> None:
        session = self._session
        # The last catch stays on screen for its full display time
        self._cancel_timers(keep=self._feedback_timer)
        self._resolver.abandon(session.hook)
        session.ended_at_ms = self._clock.now_ms
        session.termination_reason = reason
        self._state = GameState.ENDED
        logger.info(
            f"Session {session.generation} ended ({reason}): score={session.score}, "
            f"catches={session.scorer.catches}, time_left={session.time_left}"
        )
        self._notify("ended")

    def _check_termination(self) -> bool:
        """End the session if a termination condition holds."""
        result = self._rules.check_termination(self._session.score, self._session.time_left)
        if result.terminated:
            self._finish(result.reason)
        return result.terminated

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _guard(
        self,
        callback: Callable[[], None],
        tag: str,
        after_end: bool = False
    ) -> Callable[[], None]:
        """
        Wrap a timer callback so it only runs for the session it was made for.

        With ``after_end`` the callback also runs once that session has ended,
        but never after a newer session started.
        """
        generation = self._generation

        def run() -> None:
            session = self._session
            if session is None or session.generation != generation:
                logger.debug(f"Dropping stale {tag} callback from session {generation}")
                return
            if self._state is not GameState.ACTIVE and not after_end:
                logger.debug(f"Dropping {tag} callback: session {generation} is over")
                return
            callback()

        return run

    def _every(self, interval_ms: int, callback: Callable[[], None], tag: str) -> TimerHandle:
        handle = self._clock.call_every(interval_ms, self._guard(callback, tag), tag=tag)
        self._timers.append(handle)
        return handle

    def _later(
        self,
        delay_ms: int,
        callback: Callable[[], None],
        tag: str,
        after_end: bool = False
    ) -> TimerHandle:
        self._timers = [timer for timer in self._timers if timer.active]
        handle = self._clock.call_later(
            delay_ms, self._guard(callback, tag, after_end), tag=tag
        )
        self._timers.append(handle)
        return handle

    def _cancel_timers(self, keep: Optional[TimerHandle] = None) -> None:
        """Cancel every session timer except ``keep``."""
        for timer in self._timers:
            if timer is not keep:
                timer.cancel()
        self._timers = [keep] if keep is not None and keep.active else []
        if keep is None:
            self._feedback_timer = None

    def _on_spawn_tick(self) -> None:
        item = self._spawner.spawn(self._session)
        logger.debug(f"Spawned {item.kind.value}#{item.uid} ({item.points:+d}) at x={item.x:.1f}")

    def _on_fall_tick(self) -> None:
        self._fall.tick(self._session)

    def _on_sweep_tick(self) -> None:
        self._sweeper.tick(self._session.hook)

    def _on_countdown_tick(self) -> None:
        session = self._session
        session.time_left = max(0, session.time_left - 1)
        self._notify("tick")
        self._check_termination()

    def _on_catch_extended(self) -> None:
        session = self._session
        event = self._resolver.resolve(session, self._clock.now_ms)
        if event is None:
            logger.debug("Catch missed")
            return

        logger.debug(f"Caught {event!r}, score now {event.score_after}")
        self._show_feedback()
        self._notify("catch")
        if self._check_termination():
            return
        self._later(self._resolver.retract_ms, self._on_catch_retracted, "catch-retract")

    def _on_catch_retracted(self) -> None:
        self._resolver.finish(self._session.hook)

    def _show_feedback(self) -> None:
        # A newer catch replaces the pending clear of an older one
        if self._feedback_timer is not None:
            self._feedback_timer.cancel()
        self._feedback_timer = self._later(
            self._config.feedback.display_ms, self._on_feedback_expired, "feedback",
            after_end=True
        )

    def _on_feedback_expired(self) -> None:
        self._session.last_caught = None
        self._feedback_timer = None

    # ------------------------------------------------------------------
    # Observers and views
    # ------------------------------------------------------------------

    def add_listener(self, listener: GameListener) -> None:
        """Register a callback for session events."""
        self._listeners.append(listener)

    def remove_listener(self, listener: GameListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event: str) -> None:
        # Listeners only observe; a failing one must not stop the game
        for listener in list(self._listeners):
            try:
                listener(event, self)
            except Exception as e:
                logger.error(f"Error in game listener on '{event}': {e}", exc_info=True)

    def snapshot(self) -> GameSnapshot:
        """Build current game state snapshot."""
        return self._snapshot_builder.build(
            state=self._state,
            time_ms=self._clock.now_ms,
            hook=self.hook,
            items=self.items,
            score=self.score,
            time_left=self.time_left,
            catches=self.catches,
            last_caught=self.last_caught
        )

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        return {
            "state": self._state.name.lower(),
            "score": self.score,
            "time_left": self.time_left,
            "catches": self.catches,
            "items_count": len(self.items),
            "catch_phase": self.catch_phase.name.lower(),
            "terminated_reason": self.termination_reason,
            "time_ms": self._clock.now_ms,
        }

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering.

        Returns:
            Dict with items, hook, score, countdown and feedback.
        """
        last_caught = self.last_caught
        return {
            "state": self._state.name.lower(),
            "field_width": self._config.field.width,
            "field_height": self._config.field.height,
            "catch_depth": self._config.catch.depth_y,
            "items": [item.to_dict() for item in self.items],
            "hook": self.hook.to_dict(),
            "score": self.score,
            "target_score": self._rules.target_score,
            "time_left": self.time_left,
            "last_caught": last_caught.to_dict() if last_caught is not None else None,
        }

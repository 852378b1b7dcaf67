"""
Game Session - The stateful driver around the reducer.

LIFECYCLE:
1. start_session() deals a grid face-up and starts the countdown
2. Preview ends, tiles flip face-down
3. Player picks pairs; reveal, match and mismatch delays are scheduled
4. Last pair matched -> round bonus -> round-complete prompt
5. start_new_round() deals a new grid, same clock
6. end_session() or the countdown reaching zero -> one score record saved

TIMERS:
- Every delay is scheduled on the injected Scheduler, never slept on
- Scheduled actions carry the timer generation they were created in
- Any state-replacing transition bumps the generation and cancels
  outstanding handles, so stale callbacks are no-ops
"""

from __future__ import annotations
import logging
import threading
from typing import Callable

from ..engine_core.action import Action, ActionResult, ActionType, ScheduledAction
from ..engine_core.config import GameConfig
from ..engine_core.grid import GridGenerator
from ..engine_core.reducer import Reducer
from ..engine_core.state import Difficulty, SessionState
from ..store.records import ScoreRecord
from ..store.score_store import InMemoryScoreStore, ScoreRecordStore
from .clock import Countdown, ManualScheduler, Scheduler, TimerHandle

logger = logging.getLogger(__name__)

Subscriber = Callable[[SessionState], None]


class GameSession:
    """
    Owns all mutable game state for one player.

    Usage:
        session = GameSession(store=JsonScoreStore(), scheduler=AsyncioScheduler())
        session.subscribe(render)
        session.start_session(Difficulty.EASY, shuffle_mode=True)
        session.select_tile(tile_id)

    Intents are fire-and-forget. Calling one in the wrong state does nothing.
    """

    def __init__(
        self,
        store: ScoreRecordStore | None = None,
        config: GameConfig | None = None,
        scheduler: Scheduler | None = None,
        grid_generator: GridGenerator | None = None,
        player_name: str = "Player",
    ):
        self.config = config or GameConfig()
        self.store = store if store is not None else InMemoryScoreStore()
        self.scheduler = scheduler or ManualScheduler()
        self.player_name = player_name
        self._reducer = Reducer(
            config=self.config,
            grid_generator=grid_generator or GridGenerator(),
        )

        self._state: SessionState | None = None
        self._lock = threading.RLock()
        self._subscribers: list[Subscriber] = []

        # Timers
        self._generation = 0
        self._handles: list[TimerHandle] = []
        self._countdown: Countdown | None = None

        self.last_record: ScoreRecord | None = None

    # =========================================================================
    # Published state
    # =========================================================================

    @property
    def state(self) -> SessionState | None:
        """Latest snapshot, or None before the first session."""
        return self._state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback for every new snapshot.

        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        state = self._state
        if state is None:
            return
        for callback in list(self._subscribers):
            try:
                callback(state)
            except Exception:
                logger.exception("Subscriber %r failed", callback)

    # =========================================================================
    # Intents
    # =========================================================================

    def start_session(self, difficulty: Difficulty, shuffle_mode: bool = False) -> None:
        """Replace any current session with a fresh one."""
        with self._lock:
            self._stop_timers()
            self.last_record = None
            result = self._dispatch(Action.start_session(difficulty, shuffle_mode))
            if result.applied and result.new_state:
                self._start_countdown(result.new_state.session_id)
                logger.info(
                    "Session %s started: difficulty=%s shuffle=%s",
                    result.new_state.session_id,
                    difficulty.value,
                    shuffle_mode,
                )

    def select_tile(self, tile_id: str) -> None:
        self._dispatch(Action.select_tile(tile_id))

    def shuffle_grid(self) -> None:
        self._dispatch(Action.of(ActionType.SHUFFLE_GRID))

    def start_new_round(self) -> None:
        with self._lock:
            if self._state is None or not self._state.is_round_complete:
                logger.debug("Ignored start_new_round: round is not complete")
                return
            self._cancel_scheduled()
            self._dispatch(Action.of(ActionType.START_NEW_ROUND))

    def end_session(self) -> None:
        self._dispatch(Action.of(ActionType.END_SESSION))

    def change_difficulty(self, difficulty: Difficulty) -> None:
        """Stop the current session and start a new one at another level."""
        with self._lock:
            shuffle_mode = self._state.shuffle_mode if self._state else False
            self.start_session(difficulty, shuffle_mode)

    def restart_session(self) -> None:
        """Start over with the same difficulty and shuffle mode."""
        with self._lock:
            if self._state is None:
                return
            self.start_session(self._state.difficulty, self._state.shuffle_mode)

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _dispatch(self, action: Action) -> ActionResult:
        """Apply one action; the only place state is replaced."""
        with self._lock:
            result = self._reducer.apply(self._state, action)
            if not result.applied:
                logger.debug("Ignored %s: %s", action.action_type.value, result.reason)
                return result

            self._state = result.new_state
            for scheduled in result.scheduled:
                self._schedule(scheduled)

            if result.session_ended:
                self._finish_session()

            self._notify()
            return result

    def _schedule(self, scheduled: ScheduledAction) -> None:
        generation = self._generation
        handle = None

        def fire() -> None:
            with self._lock:
                if handle in self._handles:
                    self._handles.remove(handle)
                if generation != self._generation:
                    logger.debug(
                        "Discarded stale %s from generation %d",
                        scheduled.action.action_type.value,
                        generation,
                    )
                    return
                self._dispatch(scheduled.action)

        handle = self.scheduler.call_later(scheduled.delay, fire)
        self._handles.append(handle)

    def _cancel_scheduled(self) -> None:
        """Invalidate every pending cosmetic timer."""
        self._generation += 1
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()

    def _start_countdown(self, session_id: str) -> None:
        def on_tick() -> None:
            with self._lock:
                if self._state is None or self._state.session_id != session_id:
                    logger.debug("Discarded tick for stale session %s", session_id)
                    return
                self._dispatch(Action.of(ActionType.TICK))

        self._countdown = Countdown(self.scheduler, on_tick, self.config.tick_interval)
        self._countdown.start()

    def _stop_timers(self) -> None:
        if self._countdown is not None:
            self._countdown.stop()
            self._countdown = None
        self._cancel_scheduled()

    # =========================================================================
    # Session end
    # =========================================================================

    def _finish_session(self) -> None:
        """Stop the clock and submit exactly one score record."""
        self._stop_timers()
        state = self._state
        record = ScoreRecord.from_session(state, player_name=self.player_name)
        self.last_record = record

        logger.info(
            "Session %s ended: score=%d rounds=%d moves=%d elapsed=%ds",
            state.session_id,
            record.score,
            record.matched_pairs,
            record.total_moves,
            record.elapsed_seconds,
        )

        try:
            self.store.save(record)
        except Exception:
            logger.exception("Failed to save score record %s", record.record_id)

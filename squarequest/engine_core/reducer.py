"""
Reducer - Applies actions to session state.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- Pure function: (state, action) -> new_state
- Invalid actions are no-ops, never exceptions
- Delays are returned as ScheduledActions, never waited on
"""

from __future__ import annotations
from dataclasses import dataclass, field
import uuid

from .action import Action, ActionResult, ActionType, ScheduledAction
from .config import GameConfig
from .grid import GridGenerator
from .state import SessionPhase, SessionState, Tile

SELECTABLE_PHASES = {SessionPhase.IDLE, SessionPhase.ONE_SELECTED}


@dataclass
class Reducer:
    """
    Reducer applies actions to session state.

    Stateless apart from the generator's random source.
    Config provides the rules and timings.
    """
    config: GameConfig = field(default_factory=GameConfig)
    grid_generator: GridGenerator = field(default_factory=GridGenerator)

    def apply(self, state: SessionState | None, action: Action) -> ActionResult:
        """
        Apply an action to the session state.

        Returns ActionResult with new state, or an ignored result.
        """
        if action.action_type == ActionType.START_SESSION:
            return self._handle_start_session(action)

        if state is None:
            return ActionResult.ignored("No session started")

        if state.is_ended:
            return ActionResult.ignored("Session has ended")

        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.ignored(f"No handler for action type: {action.action_type}")

        return handler(state, action)

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.SELECT_TILE: self._handle_select_tile,
            ActionType.SHUFFLE_GRID: self._handle_shuffle_grid,
            ActionType.START_NEW_ROUND: self._handle_start_new_round,
            ActionType.END_SESSION: self._handle_end_session,
            ActionType.END_PREVIEW: self._handle_end_preview,
            ActionType.EVALUATE_MATCH: self._handle_evaluate_match,
            ActionType.CONFIRM_MATCH: self._handle_confirm_match,
            ActionType.CLEAR_MISMATCH_FLASH: self._handle_clear_mismatch_flash,
            ActionType.FLIP_BACK: self._handle_flip_back,
            ActionType.SHOW_ROUND_COMPLETE: self._handle_show_round_complete,
            ActionType.TICK: self._handle_tick,
        }
        return handlers.get(action_type)

    # =========================================================================
    # Session and round setup
    # =========================================================================

    def _handle_start_session(self, action: Action) -> ActionResult:
        difficulty = action.payload.difficulty
        if difficulty is None:
            return ActionResult.ignored("No difficulty given")

        shuffle_mode = action.payload.shuffle_mode
        state = SessionState(
            session_id=str(uuid.uuid4()),
            difficulty=difficulty,
            time_limit_seconds=self.config.session_time_limit,
            time_remaining_seconds=self.config.session_time_limit,
            low_time_threshold=self.config.low_time_threshold,
            shuffle_mode=shuffle_mode,
            shuffles_remaining=self.config.shuffles_for(shuffle_mode),
        )
        return self._begin_preview(state)

    def _handle_start_new_round(self, state: SessionState, action: Action) -> ActionResult:
        if state.phase != SessionPhase.ROUND_COMPLETE:
            return ActionResult.ignored("Round is not complete")

        new_state = state._copy_with(
            round_number=state.round_number + 1,
            shuffles_remaining=self.config.shuffles_for(state.shuffle_mode),
            selected_tile_ids=(),
            mismatch_flash_active=False,
        )
        return self._begin_preview(new_state)

    def _begin_preview(self, state: SessionState) -> ActionResult:
        """Deal a fresh grid face-up and schedule the preview end."""
        tiles = tuple(tile.reveal() for tile in self.grid_generator.generate(state.difficulty))
        new_state = state._copy_with(tiles=tiles, phase=SessionPhase.PREVIEWING)
        return ActionResult.success_with_state(
            new_state,
            scheduled=[ScheduledAction(
                self.config.preview_duration, Action.of(ActionType.END_PREVIEW)
            )],
        )

    def _handle_end_preview(self, state: SessionState, action: Action) -> ActionResult:
        if state.phase != SessionPhase.PREVIEWING:
            return ActionResult.ignored("Not previewing")

        tiles = tuple(tile.hide() for tile in state.tiles)
        return ActionResult.success_with_state(
            state._copy_with(tiles=tiles, phase=SessionPhase.IDLE)
        )

    # =========================================================================
    # Selection and match resolution
    # =========================================================================

    def _handle_select_tile(self, state: SessionState, action: Action) -> ActionResult:
        if state.phase not in SELECTABLE_PHASES:
            return ActionResult.ignored(f"Cannot select while {state.phase.value}")

        tile_id = action.payload.tile_id
        tile = state.get_tile(tile_id) if tile_id else None
        if tile is None:
            return ActionResult.ignored(f"Tile {tile_id} not found")
        if tile.is_matched:
            return ActionResult.ignored(f"Tile {tile_id} already matched")
        if tile.is_selected or tile_id in state.selected_tile_ids:
            return ActionResult.ignored(f"Tile {tile_id} already selected")

        new_state = state.with_tiles({tile_id: tile.select()})

        if state.phase == SessionPhase.IDLE:
            return ActionResult.success_with_state(new_state._copy_with(
                selected_tile_ids=(tile_id,),
                phase=SessionPhase.ONE_SELECTED,
            ))

        # Second pick: count the move and let the player see both faces
        new_state = new_state._copy_with(
            selected_tile_ids=state.selected_tile_ids + (tile_id,),
            total_moves=state.total_moves + 1,
            phase=SessionPhase.RESOLVING,
        )
        return ActionResult.success_with_state(
            new_state,
            scheduled=[ScheduledAction(
                self.config.reveal_delay, Action.of(ActionType.EVALUATE_MATCH)
            )],
        )

    def _pending_pair(self, state: SessionState) -> tuple[Tile, Tile] | None:
        if state.phase != SessionPhase.RESOLVING or len(state.selected_tile_ids) != 2:
            return None
        first, second = state.selected_tiles()
        return first, second

    def _handle_evaluate_match(self, state: SessionState, action: Action) -> ActionResult:
        pair = self._pending_pair(state)
        if pair is None:
            return ActionResult.ignored("No pair to evaluate")

        first, second = pair
        if first.color == second.color:
            return ActionResult.success_with_state(
                state,
                scheduled=[ScheduledAction(
                    self.config.match_confirm_delay, Action.of(ActionType.CONFIRM_MATCH)
                )],
            )

        return ActionResult.success_with_state(
            state._copy_with(mismatch_flash_active=True),
            scheduled=[
                ScheduledAction(
                    self.config.mismatch_flash_duration,
                    Action.of(ActionType.CLEAR_MISMATCH_FLASH),
                ),
                ScheduledAction(
                    self.config.mismatch_flip_back_delay, Action.of(ActionType.FLIP_BACK)
                ),
            ],
        )

    def _handle_confirm_match(self, state: SessionState, action: Action) -> ActionResult:
        pair = self._pending_pair(state)
        if pair is None:
            return ActionResult.ignored("No pair to confirm")

        first, second = pair
        if first.color != second.color:
            return ActionResult.ignored("Selected tiles do not match")

        new_state = state.with_tiles({
            first.tile_id: first.mark_matched(),
            second.tile_id: second.mark_matched(),
        })._copy_with(
            score=state.score + self.config.points_per_match,
            selected_tile_ids=(),
        )

        if new_state.matched_count == new_state.max_matchable:
            # Stay in RESOLVING until the round-complete prompt shows
            new_state = new_state._copy_with(
                score=new_state.score + self.config.round_bonus(state.round_number),
                rounds_completed=state.rounds_completed + 1,
            )
            return ActionResult.success_with_state(
                new_state,
                scheduled=[ScheduledAction(
                    self.config.round_complete_delay,
                    Action.of(ActionType.SHOW_ROUND_COMPLETE),
                )],
            )

        return ActionResult.success_with_state(new_state._copy_with(phase=SessionPhase.IDLE))

    def _handle_clear_mismatch_flash(self, state: SessionState, action: Action) -> ActionResult:
        if not state.mismatch_flash_active:
            return ActionResult.ignored("No mismatch flash active")
        return ActionResult.success_with_state(state._copy_with(mismatch_flash_active=False))

    def _handle_flip_back(self, state: SessionState, action: Action) -> ActionResult:
        pair = self._pending_pair(state)
        if pair is None:
            return ActionResult.ignored("No pair to flip back")

        first, second = pair
        new_state = state.with_tiles({
            first.tile_id: first.hide(),
            second.tile_id: second.hide(),
        })._copy_with(
            selected_tile_ids=(),
            mismatch_flash_active=False,
            phase=SessionPhase.IDLE,
        )
        return ActionResult.success_with_state(new_state)

    def _handle_show_round_complete(self, state: SessionState, action: Action) -> ActionResult:
        if state.phase != SessionPhase.RESOLVING or state.matched_count != state.max_matchable:
            return ActionResult.ignored("Round is not finished")
        return ActionResult.success_with_state(
            state._copy_with(phase=SessionPhase.ROUND_COMPLETE)
        )

    # =========================================================================
    # Shuffle, clock and termination
    # =========================================================================

    def _handle_shuffle_grid(self, state: SessionState, action: Action) -> ActionResult:
        if not state.shuffle_mode:
            return ActionResult.ignored("Shuffle mode is off")
        if state.shuffles_remaining <= 0:
            return ActionResult.ignored("No shuffles remaining")
        if state.phase not in SELECTABLE_PHASES:
            return ActionResult.ignored(f"Cannot shuffle while {state.phase.value}")

        unmatched = [tile for tile in state.tiles if not tile.is_matched]
        colors = self.grid_generator.shuffle([tile.color for tile in unmatched])
        updated = {
            tile.tile_id: tile.recolor(color).hide()
            for tile, color in zip(unmatched, colors)
        }

        new_state = state.with_tiles(updated)._copy_with(
            selected_tile_ids=(),
            shuffles_remaining=state.shuffles_remaining - 1,
            phase=SessionPhase.IDLE,
        )
        return ActionResult.success_with_state(new_state)

    def _handle_tick(self, state: SessionState, action: Action) -> ActionResult:
        remaining = max(state.time_remaining_seconds - 1, 0)
        new_state = state._copy_with(time_remaining_seconds=remaining)
        if remaining == 0:
            return self._handle_end_session(new_state, action)
        return ActionResult.success_with_state(new_state)

    def _handle_end_session(self, state: SessionState, action: Action) -> ActionResult:
        new_state = state._copy_with(
            phase=SessionPhase.SESSION_ENDED,
            mismatch_flash_active=False,
        )
        return ActionResult.success_with_state(new_state, session_ended=True)


def apply_action(
    state: SessionState | None,
    action: Action,
    config: GameConfig | None = None,
    grid_generator: GridGenerator | None = None,
) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer(
        config=config or GameConfig(),
        grid_generator=grid_generator or GridGenerator(),
    )
    return reducer.apply(state, action)

"""
Action System - Actions, payloads, and results.

Actions represent:
1. Player intents (select a tile, shuffle, next round, end session)
2. Timer-driven system actions (preview end, match evaluation, ticks)

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .state import Difficulty, SessionState


class ActionType(Enum):
    """Types of actions in the system."""
    # Player intents
    START_SESSION = "start_session"
    SELECT_TILE = "select_tile"
    SHUFFLE_GRID = "shuffle_grid"
    START_NEW_ROUND = "start_new_round"
    END_SESSION = "end_session"

    # Scheduled system actions
    END_PREVIEW = "end_preview"
    EVALUATE_MATCH = "evaluate_match"
    CONFIRM_MATCH = "confirm_match"
    CLEAR_MISMATCH_FLASH = "clear_mismatch_flash"
    FLIP_BACK = "flip_back"
    SHOW_ROUND_COMPLETE = "show_round_complete"
    TICK = "tick"


@dataclass(frozen=True)
class ActionPayload:
    """
    Parameters for an action.

    Only the fields relevant to the action type are set.
    """
    tile_id: str | None = None
    difficulty: Difficulty | None = None
    shuffle_mode: bool = False


@dataclass(frozen=True)
class Action:
    """
    A complete action to be applied to the session state.
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def start_session(cls, difficulty: Difficulty, shuffle_mode: bool = False) -> Action:
        """Factory for a new session."""
        return cls(
            action_type=ActionType.START_SESSION,
            payload=ActionPayload(difficulty=difficulty, shuffle_mode=shuffle_mode),
        )

    @classmethod
    def select_tile(cls, tile_id: str) -> Action:
        """Factory for a tile pick."""
        return cls(
            action_type=ActionType.SELECT_TILE,
            payload=ActionPayload(tile_id=tile_id),
        )

    @classmethod
    def of(cls, action_type: ActionType) -> Action:
        """Factory for actions without parameters."""
        return cls(action_type=action_type)


@dataclass(frozen=True)
class ScheduledAction:
    """An action the session must dispatch after a delay."""
    delay: float
    action: Action


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action changed anything
    - New state (if applied)
    - Why it was ignored (if not)
    - Follow-up actions to schedule
    """
    applied: bool
    new_state: SessionState | None = None
    reason: str | None = None

    scheduled: list[ScheduledAction] = field(default_factory=list)

    # Set when this action moved the session to SESSION_ENDED
    session_ended: bool = False

    @classmethod
    def ignored(cls, reason: str) -> ActionResult:
        """Create a no-op result."""
        return cls(applied=False, reason=reason)

    @classmethod
    def success_with_state(
        cls,
        state: SessionState,
        scheduled: list[ScheduledAction] | None = None,
        session_ended: bool = False,
    ) -> ActionResult:
        """Create an applied result with new state."""
        return cls(
            applied=True,
            new_state=state,
            scheduled=scheduled or [],
            session_ended=session_ended,
        )

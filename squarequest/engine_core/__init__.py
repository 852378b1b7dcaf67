"""
Engine Core - Deterministic session state and rules.

The engine is the runtime that:
1. Generates paired-color grids
2. Holds the immutable SessionState
3. Applies intents and timer actions via the reducer
4. Reports which follow-up actions need scheduling
"""

from .state import Difficulty, SessionPhase, SessionState, Tile, TileColor
from .config import GameConfig
from .grid import DEFAULT_PALETTE, GridGenerator, generate_grid
from .action import Action, ActionType, ActionPayload, ActionResult, ScheduledAction
from .reducer import Reducer, apply_action

__all__ = [
    "Difficulty",
    "SessionPhase",
    "SessionState",
    "Tile",
    "TileColor",
    "GameConfig",
    "DEFAULT_PALETTE",
    "GridGenerator",
    "generate_grid",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "ScheduledAction",
    "Reducer",
    "apply_action",
]

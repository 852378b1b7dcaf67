"""
Game State - Immutable snapshot of one play session.

Design principles:
- Immutable: all mutations return new state (frozen dataclasses)
- Published: the same object handed to the UI is the one the reducer produced
- Explicit phases: one SessionPhase instead of a cluster of boolean flags
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum


class TileColor(Enum):
    """Semantic tile colors, in palette order."""
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    ORANGE = "orange"
    PURPLE = "purple"
    PINK = "pink"
    CYAN = "cyan"
    MINT = "mint"
    INDIGO = "indigo"
    TEAL = "teal"
    BROWN = "brown"
    CORAL = "coral"
    LIME = "lime"
    NAVY = "navy"
    MAROON = "maroon"
    OLIVE = "olive"
    GOLD = "gold"
    SILVER = "silver"
    LAVENDER = "lavender"
    TURQUOISE = "turquoise"
    MAGENTA = "magenta"
    BEIGE = "beige"
    CRIMSON = "crimson"
    SALMON = "salmon"


class Difficulty(Enum):
    """Difficulty levels that determine grid size."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def grid_size(self) -> int:
        return _GRID_SIZES[self]

    @property
    def total_cells(self) -> int:
        return self.grid_size * self.grid_size

    @property
    def color_count(self) -> int:
        """Distinct colors needed: half the cells, rounded up."""
        return (self.total_cells + 1) // 2

    @property
    def max_matchable(self) -> int:
        """Odd grids always leave one tile unpaired."""
        return self.total_cells - 1

    @property
    def label(self) -> str:
        return self.value.capitalize()


_GRID_SIZES = {
    Difficulty.EASY: 3,
    Difficulty.MEDIUM: 5,
    Difficulty.HARD: 7,
}


class SessionPhase(Enum):
    """Where the session is in its round cycle."""
    PREVIEWING = "previewing"  # All tiles shown, selection disabled
    IDLE = "idle"  # Waiting for the first pick
    ONE_SELECTED = "one_selected"  # Waiting for the second pick
    RESOLVING = "resolving"  # Pair revealed, match/mismatch delay in flight
    ROUND_COMPLETE = "round_complete"  # Offer next round or end session
    SESSION_ENDED = "session_ended"


@dataclass(frozen=True)
class Tile:
    """
    One cell of the grid.

    Invariant: a matched tile is face-up and never selected.
    """
    tile_id: str
    color: TileColor
    is_face_up: bool = False
    is_selected: bool = False
    is_matched: bool = False

    def reveal(self) -> Tile:
        return replace(self, is_face_up=True)

    def hide(self) -> Tile:
        """Face-down and unselected. Matched tiles stay as they are."""
        if self.is_matched:
            return self
        return replace(self, is_face_up=False, is_selected=False)

    def select(self) -> Tile:
        return replace(self, is_face_up=True, is_selected=True)

    def mark_matched(self) -> Tile:
        return replace(self, is_face_up=True, is_selected=False, is_matched=True)

    def recolor(self, color: TileColor) -> Tile:
        return replace(self, color=color)


@dataclass(frozen=True)
class SessionState:
    """
    Complete session state at a point in time.

    This is the snapshot published to the UI after every transition.
    All changes go through the reducer.
    """
    session_id: str
    difficulty: Difficulty
    phase: SessionPhase = SessionPhase.PREVIEWING
    tiles: tuple[Tile, ...] = ()

    score: int = 0
    selected_tile_ids: tuple[str, ...] = ()

    # Clock
    time_limit_seconds: int = 120
    time_remaining_seconds: int = 120
    low_time_threshold: int = 30

    # Progress
    total_moves: int = 0
    round_number: int = 1
    rounds_completed: int = 0

    # Shuffle mode
    shuffle_mode: bool = False
    shuffles_remaining: int = 0

    # Cosmetic flags
    mismatch_flash_active: bool = False

    # Index of tile_id -> position, rebuilt on construction
    _positions: dict[str, int] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        object.__setattr__(
            self,
            "_positions",
            {tile.tile_id: i for i, tile in enumerate(self.tiles)},
        )

    @property
    def initial_preview_active(self) -> bool:
        return self.phase == SessionPhase.PREVIEWING

    @property
    def is_round_complete(self) -> bool:
        return self.phase == SessionPhase.ROUND_COMPLETE

    @property
    def is_ended(self) -> bool:
        return self.phase == SessionPhase.SESSION_ENDED

    @property
    def grid_size(self) -> int:
        return self.difficulty.grid_size

    @property
    def max_matchable(self) -> int:
        return self.difficulty.max_matchable

    @property
    def matched_count(self) -> int:
        return sum(1 for tile in self.tiles if tile.is_matched)

    @property
    def elapsed_seconds(self) -> int:
        return self.time_limit_seconds - self.time_remaining_seconds

    @property
    def formatted_time(self) -> str:
        """Time remaining as m:ss."""
        minutes, seconds = divmod(max(self.time_remaining_seconds, 0), 60)
        return f"{minutes}:{seconds:02d}"

    @property
    def is_time_low(self) -> bool:
        return self.time_remaining_seconds <= self.low_time_threshold

    def get_tile(self, tile_id: str) -> Tile | None:
        """Get tile by ID."""
        index = self._positions.get(tile_id)
        if index is None:
            return None
        return self.tiles[index]

    def selected_tiles(self) -> list[Tile]:
        return [self.tiles[self._positions[tid]] for tid in self.selected_tile_ids]

    def rows(self) -> list[tuple[Tile, ...]]:
        """Tiles grouped into grid rows."""
        size = self.grid_size
        return [self.tiles[i:i + size] for i in range(0, len(self.tiles), size)]

    def with_tiles(self, updated: dict[str, Tile]) -> SessionState:
        """Return new state with the given tiles replaced by ID."""
        new_tiles = tuple(updated.get(t.tile_id, t) for t in self.tiles)
        return self._copy_with(tiles=new_tiles)

    def _copy_with(self, **kwargs) -> SessionState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)

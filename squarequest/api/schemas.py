"""
Pydantic Schemas - Published shapes for UI consumers and storage.

These models define the contract between the engine and anything
that renders or stores it:
- SessionSnapshot: the full session state after a transition
- ScoreRecordSchema: the persisted score record format
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..engine_core.state import Difficulty, SessionPhase, SessionState, Tile, TileColor
from ..store.records import ScoreRecord


# =============================================================================
# Shared Models
# =============================================================================

class DifficultyInfo(BaseModel):
    """Grid dimensions for a difficulty."""
    difficulty: Difficulty
    label: str
    grid_size: int
    total_cells: int
    color_count: int
    max_matchable: int

    @classmethod
    def from_difficulty(cls, difficulty: Difficulty) -> "DifficultyInfo":
        return cls(
            difficulty=difficulty,
            label=difficulty.label,
            grid_size=difficulty.grid_size,
            total_cells=difficulty.total_cells,
            color_count=difficulty.color_count,
            max_matchable=difficulty.max_matchable,
        )


class TileInfo(BaseModel):
    """Logical tile state for rendering."""
    tile_id: str
    color: TileColor
    is_face_up: bool = False
    is_selected: bool = False
    is_matched: bool = False

    model_config = {"from_attributes": True}


# =============================================================================
# Session
# =============================================================================

class SessionSnapshot(BaseModel):
    """Full session state after a transition."""
    session_id: str
    difficulty: DifficultyInfo
    phase: SessionPhase
    tiles: list[TileInfo] = Field(default_factory=list)

    score: int = 0
    selected_tile_ids: list[str] = Field(default_factory=list)

    time_limit_seconds: int
    time_remaining_seconds: int
    formatted_time: str
    is_time_low: bool = False

    total_moves: int = 0
    round_number: int = Field(default=1, ge=1)
    rounds_completed: int = 0
    matched_count: int = 0

    shuffle_mode: bool = False
    shuffles_remaining: int = 0

    mismatch_flash_active: bool = False
    initial_preview_active: bool = False

    @classmethod
    def from_state(cls, state: SessionState) -> "SessionSnapshot":
        return cls(
            session_id=state.session_id,
            difficulty=DifficultyInfo.from_difficulty(state.difficulty),
            phase=state.phase,
            tiles=[TileInfo.model_validate(tile) for tile in state.tiles],
            score=state.score,
            selected_tile_ids=list(state.selected_tile_ids),
            time_limit_seconds=state.time_limit_seconds,
            time_remaining_seconds=state.time_remaining_seconds,
            formatted_time=state.formatted_time,
            is_time_low=state.is_time_low,
            total_moves=state.total_moves,
            round_number=state.round_number,
            rounds_completed=state.rounds_completed,
            matched_count=state.matched_count,
            shuffle_mode=state.shuffle_mode,
            shuffles_remaining=state.shuffles_remaining,
            mismatch_flash_active=state.mismatch_flash_active,
            initial_preview_active=state.initial_preview_active,
        )

    def to_tiles(self) -> list[Tile]:
        return [Tile(**tile.model_dump()) for tile in self.tiles]


# =============================================================================
# Score records
# =============================================================================

class ScoreRecordSchema(BaseModel):
    """Persisted shape of a ScoreRecord."""
    record_id: str
    player_name: str = "Player"
    score: int
    difficulty: Difficulty
    elapsed_seconds: int = Field(ge=0)
    matched_pairs: int = Field(ge=0)
    total_moves: int = Field(ge=0)
    timestamp: datetime
    shuffle_mode: bool = False
    formatted_time: Optional[str] = None

    @classmethod
    def from_record(cls, record: ScoreRecord) -> "ScoreRecordSchema":
        return cls(
            record_id=record.record_id,
            player_name=record.player_name,
            score=record.score,
            difficulty=record.difficulty,
            elapsed_seconds=record.elapsed_seconds,
            matched_pairs=record.matched_pairs,
            total_moves=record.total_moves,
            timestamp=record.timestamp,
            shuffle_mode=record.shuffle_mode,
            formatted_time=record.formatted_time,
        )

    def to_record(self) -> ScoreRecord:
        return ScoreRecord(
            record_id=self.record_id,
            player_name=self.player_name,
            score=self.score,
            difficulty=self.difficulty,
            elapsed_seconds=self.elapsed_seconds,
            matched_pairs=self.matched_pairs,
            total_moves=self.total_moves,
            timestamp=self.timestamp,
            shuffle_mode=self.shuffle_mode,
        )

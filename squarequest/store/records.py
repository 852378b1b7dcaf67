"""
Score Records - Immutable summary of one finished session.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
import uuid

from ..engine_core.state import Difficulty, SessionState


@dataclass(frozen=True)
class ScoreRecord:
    """
    A completed session entry.

    matched_pairs counts completed rounds, the way the scoreboard
    has always reported it.
    """
    score: int
    difficulty: Difficulty
    elapsed_seconds: int
    matched_pairs: int
    total_moves: int
    shuffle_mode: bool = False
    player_name: str = "Player"
    record_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def formatted_time(self) -> str:
        """Elapsed time as m:ss."""
        minutes, seconds = divmod(self.elapsed_seconds, 60)
        return f"{minutes}:{seconds:02d}"

    @classmethod
    def from_session(cls, state: SessionState, player_name: str = "Player") -> ScoreRecord:
        """Build the record for a session at the moment it ends."""
        return cls(
            score=state.score,
            difficulty=state.difficulty,
            elapsed_seconds=state.elapsed_seconds,
            matched_pairs=state.rounds_completed,
            total_moves=state.total_moves,
            shuffle_mode=state.shuffle_mode,
            player_name=player_name,
        )

    def rank_key(self) -> tuple[int, int]:
        """Sort key: higher score first, then faster time."""
        return (-self.score, self.elapsed_seconds)

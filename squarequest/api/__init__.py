"""
API Module - Published data shapes.

Any UI binding (terminal, desktop, web) consumes the session through
these pydantic models instead of the engine's internal dataclasses.
"""

from .schemas import (
    DifficultyInfo,
    TileInfo,
    SessionSnapshot,
    ScoreRecordSchema,
)

__all__ = [
    "DifficultyInfo",
    "TileInfo",
    "SessionSnapshot",
    "ScoreRecordSchema",
]

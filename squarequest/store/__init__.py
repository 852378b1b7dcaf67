"""
Store Module - Ranked score history.

The only persistent data in the game. GameSession writes one
record per finished session; everything else only reads.
"""

from .records import ScoreRecord
from .score_store import (
    DEFAULT_SCORES_PATH,
    MAX_RECORDS,
    InMemoryScoreStore,
    JsonScoreStore,
    ScoreRecordStore,
    ScoreStoreError,
)

__all__ = [
    "ScoreRecord",
    "ScoreRecordStore",
    "InMemoryScoreStore",
    "JsonScoreStore",
    "ScoreStoreError",
    "DEFAULT_SCORES_PATH",
    "MAX_RECORDS",
]

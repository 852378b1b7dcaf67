"""
Score Store - Ranked history of finished sessions.

The store:
- Keeps records ranked by score, then by faster time
- Retains the top MAX_RECORDS only
- Is the only persistence in the system

Design decisions:
- Simple JSON file, written atomically (temp file + rename)
- A missing or corrupt file means an empty history, not a crash
"""

from __future__ import annotations
from abc import ABC, abstractmethod
import json
import logging
import os
import tempfile
from pathlib import Path

from ..engine_core.state import Difficulty
from .records import ScoreRecord

logger = logging.getLogger(__name__)

MAX_RECORDS = 100
DEFAULT_SCORES_PATH = Path.home() / ".squarequest" / "scores.json"


class ScoreStoreError(Exception):
    """Raised when a score record cannot be persisted."""


class ScoreRecordStore(ABC):
    """
    Abstract ranked score history.

    Subclasses only decide where the ranked list lives.
    """

    def __init__(self, max_records: int = MAX_RECORDS):
        self.max_records = max_records
        self._records: list[ScoreRecord] = []

    def save(self, record: ScoreRecord) -> None:
        """Insert a record, re-rank, trim and persist."""
        records = sorted([*self._records, record], key=ScoreRecord.rank_key)
        records = records[:self.max_records]
        self._persist(records)
        self._records = records

    def all(self) -> list[ScoreRecord]:
        """All records, best first."""
        return list(self._records)

    def top_n(self, difficulty: Difficulty, n: int = 10) -> list[ScoreRecord]:
        """Best records for one difficulty."""
        return [r for r in self._records if r.difficulty == difficulty][:n]

    def best_for(self, difficulty: Difficulty) -> ScoreRecord | None:
        for record in self._records:
            if record.difficulty == difficulty:
                return record
        return None

    def best_overall(self) -> ScoreRecord | None:
        return self._records[0] if self._records else None

    def clear(self) -> None:
        """Remove every record."""
        self._persist([])
        self._records = []

    @abstractmethod
    def _persist(self, records: list[ScoreRecord]) -> None:
        """Write the full ranked list."""
        ...


class InMemoryScoreStore(ScoreRecordStore):
    """Store that lives as long as the process."""

    def _persist(self, records: list[ScoreRecord]) -> None:
        pass


class JsonScoreStore(ScoreRecordStore):
    """
    File-backed score store.

    Usage:
        store = JsonScoreStore("~/.squarequest/scores.json")
        store.save(record)
        store.top_n(Difficulty.EASY)
    """

    def __init__(
        self,
        path: str | Path | None = None,
        max_records: int = MAX_RECORDS,
    ):
        super().__init__(max_records=max_records)
        self.path = Path(path).expanduser() if path else DEFAULT_SCORES_PATH
        self._records = sorted(self._load(), key=ScoreRecord.rank_key)

    def _load(self) -> list[ScoreRecord]:
        """Read records from disk, returning [] on a missing or corrupt file."""
        from ..api.schemas import ScoreRecordSchema

        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            return [ScoreRecordSchema.model_validate(item).to_record() for item in raw]
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Could not load scores from %s: %s", self.path, exc)
            return []

    def _persist(self, records: list[ScoreRecord]) -> None:
        from ..api.schemas import ScoreRecordSchema

        data = [
            ScoreRecordSchema.from_record(record).model_dump(mode="json")
            for record in records
        ]

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        except OSError as exc:
            raise ScoreStoreError(f"Cannot write scores to {self.path}: {exc}") from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.chmod(tmp_path, self._file_mode())
            os.replace(tmp_path, self.path)
        except OSError as exc:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise ScoreStoreError(f"Cannot write scores to {self.path}: {exc}") from exc

    def _file_mode(self) -> int:
        """Permissions of the existing score file, or 0644 for a new one."""
        try:
            return self.path.stat().st_mode & 0o777
        except OSError:
            return 0o644

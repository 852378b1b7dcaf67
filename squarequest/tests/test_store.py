"""
Tests for the score store.

Tests:
- Ranking and retention
- Per-difficulty lookups
- JSON persistence across restarts
- Failure handling
"""

import json
import os
import stat
from datetime import datetime, timezone

import pytest

from ..engine_core.state import Difficulty, SessionState
from ..store import InMemoryScoreStore, JsonScoreStore, ScoreRecord, ScoreStoreError


def make_record(score, difficulty=Difficulty.EASY, elapsed=60, **kwargs):
    return ScoreRecord(
        score=score,
        difficulty=difficulty,
        elapsed_seconds=elapsed,
        matched_pairs=kwargs.pop("matched_pairs", 1),
        total_moves=kwargs.pop("total_moves", 5),
        **kwargs,
    )


class TestScoreRecord:
    """Tests for ScoreRecord."""

    def test_from_session(self):
        state = SessionState(
            session_id="s1",
            difficulty=Difficulty.MEDIUM,
            score=140,
            time_limit_seconds=120,
            time_remaining_seconds=75,
            total_moves=14,
            rounds_completed=2,
            shuffle_mode=True,
        )
        record = ScoreRecord.from_session(state, player_name="Ana")

        assert record.score == 140
        assert record.difficulty == Difficulty.MEDIUM
        assert record.elapsed_seconds == 45
        assert record.matched_pairs == 2
        assert record.total_moves == 14
        assert record.shuffle_mode
        assert record.player_name == "Ana"
        assert record.timestamp.tzinfo is not None

    def test_formatted_time(self):
        assert make_record(10, elapsed=83).formatted_time == "1:23"
        assert make_record(10, elapsed=5).formatted_time == "0:05"


class TestRanking:
    """Tests for ordering and lookups."""

    def test_score_then_time(self):
        store = InMemoryScoreStore()
        slow = make_record(50, elapsed=90)
        fast = make_record(50, elapsed=30)
        best = make_record(80, elapsed=120)
        for record in (slow, fast, best):
            store.save(record)

        assert store.all() == [best, fast, slow]
        assert store.best_overall() == best

    def test_per_difficulty(self):
        store = InMemoryScoreStore()
        easy = make_record(30, Difficulty.EASY)
        hard_low = make_record(10, Difficulty.HARD)
        hard_high = make_record(90, Difficulty.HARD)
        for record in (easy, hard_low, hard_high):
            store.save(record)

        assert store.best_for(Difficulty.HARD) == hard_high
        assert store.best_for(Difficulty.MEDIUM) is None
        assert store.top_n(Difficulty.HARD, 1) == [hard_high]
        assert store.top_n(Difficulty.HARD) == [hard_high, hard_low]

    def test_retains_top_records_only(self):
        store = InMemoryScoreStore(max_records=3)
        for score in (10, 50, 20, 40, 30):
            store.save(make_record(score))

        assert [r.score for r in store.all()] == [50, 40, 30]

    def test_clear(self):
        store = InMemoryScoreStore()
        store.save(make_record(10))
        store.clear()
        assert store.all() == []
        assert store.best_overall() is None


class TestJsonScoreStore:
    """Tests for file persistence."""

    def test_survives_restart(self, tmp_path):
        path = tmp_path / "scores.json"
        record = make_record(
            70,
            Difficulty.MEDIUM,
            elapsed=44,
            shuffle_mode=True,
            player_name="Lee",
            timestamp=datetime(2026, 1, 22, 9, 30, tzinfo=timezone.utc),
        )
        JsonScoreStore(path).save(record)

        reloaded = JsonScoreStore(path).all()
        assert reloaded == [record]
        assert reloaded[0].record_id == record.record_id

    def test_file_format(self, tmp_path):
        path = tmp_path / "scores.json"
        JsonScoreStore(path).save(make_record(20, Difficulty.HARD))

        data = json.loads(path.read_text())
        assert len(data) == 1
        assert data[0]["difficulty"] == "hard"
        assert data[0]["score"] == 20
        assert {"record_id", "elapsed_seconds", "matched_pairs", "total_moves",
                "timestamp", "shuffle_mode"} <= set(data[0])

    def test_missing_file_is_empty(self, tmp_path):
        assert JsonScoreStore(tmp_path / "nope.json").all() == []

    def test_corrupt_file_is_empty(self, tmp_path, caplog):
        path = tmp_path / "scores.json"
        path.write_text("{not json")

        store = JsonScoreStore(path)
        assert store.all() == []
        assert "Could not load scores" in caplog.text

    def test_invalid_utf8_file_is_empty(self, tmp_path, caplog):
        path = tmp_path / "scores.json"
        path.write_bytes(b"\xff\xfe\x00garbage")

        assert JsonScoreStore(path).all() == []
        assert "Could not load scores" in caplog.text

    def test_wrong_shape_is_empty(self, tmp_path):
        path = tmp_path / "scores.json"
        path.write_text(json.dumps([{"score": "lots"}]))
        assert JsonScoreStore(path).all() == []

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "scores.json"
        JsonScoreStore(path).save(make_record(5))
        assert path.exists()

    def test_write_failure_raises(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = JsonScoreStore(blocker / "scores.json")

        with pytest.raises(ScoreStoreError):
            store.save(make_record(5))
        assert store.all() == []

    def test_clear_persists(self, tmp_path):
        path = tmp_path / "scores.json"
        store = JsonScoreStore(path)
        store.save(make_record(5))
        store.clear()
        assert JsonScoreStore(path).all() == []

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
    def test_new_file_is_world_readable(self, tmp_path):
        path = tmp_path / "scores.json"
        JsonScoreStore(path).save(make_record(5))
        assert stat.S_IMODE(path.stat().st_mode) == 0o644

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
    def test_save_keeps_existing_mode(self, tmp_path):
        path = tmp_path / "scores.json"
        path.write_text("[]")
        path.chmod(0o640)

        JsonScoreStore(path).save(make_record(5))
        assert stat.S_IMODE(path.stat().st_mode) == 0o640

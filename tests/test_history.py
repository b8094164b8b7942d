"""Unit tests for answer logs, failure statistics and run history."""
from datetime import date, datetime, timedelta
from sqlalchemy.exc import SQLAlchemyError
from synquiz.db.models import GameRun
from synquiz.services.history import (
    AnswerLogEntry,
    aggregate_failure_stats,
    append_answer_record,
    append_run_summary,
    fetch_answer_history,
    fetch_run_history,
    format_run,
    runs_on,
    summarize_runs_by_level
)


class FailingSession:
    """Session stand-in whose operations always fail."""

    def __init__(self):
        self.rolled_back = False

    def query(self, *args, **kwargs):
        raise SQLAlchemyError("connection refused")

    def add(self, obj):
        pass

    def commit(self):
        raise SQLAlchemyError("read-only database")

    def rollback(self):
        self.rolled_back = True


def log(entry_id, level, *results):
    return [AnswerLogEntry(entry_id=entry_id, level=level, is_correct=r) for r in results]


def make_run(played_at, difficulty, correct, total=10):
    return GameRun(
        user_id="u",
        played_at=played_at,
        difficulty=difficulty,
        total=total,
        correct=correct,
        wrong=total - correct,
        time_seconds=60.0,
    )


class TestAggregateFailureStats:
    """Tests for failure statistic aggregation."""

    def test_counts_attempts_and_wrong_answers(self):
        records = log("L1-001", 1, False, False, True, False)

        stats = aggregate_failure_stats(records, level=1)

        assert stats["L1-001"].attempt_count == 4
        assert stats["L1-001"].wrong_count == 3
        assert stats["L1-001"].entry_key == "L1-001:1"

    def test_discards_single_attempts(self):
        """One attempt is not enough data."""
        records = log("L1-001", 1, False) + log("L1-002", 1, True, False)

        stats = aggregate_failure_stats(records, level=1)

        assert "L1-001" not in stats
        assert "L1-002" in stats

    def test_level_filter(self):
        records = log("L1-001", 1, False, False) + log("L2-001", 2, False, False)

        stats = aggregate_failure_stats(records, level=2)

        assert list(stats) == ["L2-001"]

    def test_same_entry_at_other_level_not_merged(self):
        """Attempts at another level neither count nor overwrite this level's stat."""
        records = log("w", 1, True, False) + log("w", 2, False, False, False)

        level_one = aggregate_failure_stats(records, level=1)
        level_two = aggregate_failure_stats(records, level=2)

        assert (level_one["w"].attempt_count, level_one["w"].wrong_count) == (2, 1)
        assert level_one["w"].entry_key == "w:1"
        assert (level_two["w"].attempt_count, level_two["w"].wrong_count) == (3, 3)
        assert level_two["w"].entry_key == "w:2"

    def test_single_attempt_per_level_discarded(self):
        """One attempt at each of two levels is not two attempts."""
        records = log("w", 1, False) + log("w", 2, False)
        assert aggregate_failure_stats(records, level=1) == {}

    def test_never_wrong_entries_kept(self):
        stats = aggregate_failure_stats(log("L1-003", 1, True, True), level=1)
        assert stats["L1-003"].wrong_count == 0

    def test_each_call_returns_new_mapping(self):
        records = log("L1-001", 1, False, False)
        first = aggregate_failure_stats(records, level=1)
        second = aggregate_failure_stats(records, level=1)

        assert first == second
        assert first is not second

    def test_empty_log(self):
        assert aggregate_failure_stats([], level=1) == {}


class TestAnswerLog:
    """Tests for appending and reading answer records."""

    def test_round_trip(self, test_db, test_user):
        assert append_answer_record(test_db, test_user.id, "L1-001", 1, False) is True
        append_answer_record(test_db, test_user.id, "L1-001", 1, True)

        history = fetch_answer_history(test_db, test_user.id)

        assert history == log("L1-001", 1, False, True)

    def test_history_is_per_user(self, test_db, test_user):
        append_answer_record(test_db, test_user.id, "L1-001", 1, False)
        assert fetch_answer_history(test_db, "someone_else") == []

    def test_fetch_failure_returns_empty(self):
        assert fetch_answer_history(FailingSession(), "u") == []

    def test_append_failure_rolls_back(self):
        session = FailingSession()
        assert append_answer_record(session, "u", "L1-001", 1, True) is False
        assert session.rolled_back is True


class TestRunHistory:
    """Tests for run summaries."""

    def test_append_run_summary(self, test_db, test_user):
        run = append_run_summary(test_db, test_user.id, difficulty=2, correct=7, time_seconds=81.5)

        assert run.id is not None
        assert run.total == 10
        assert run.wrong == 3
        assert run.time_seconds == 81.5

    def test_append_failure_returns_none(self):
        assert append_run_summary(FailingSession(), "u", difficulty=1, correct=5, time_seconds=10) is None

    def test_most_recent_first(self, test_db, test_user):
        append_run_summary(test_db, test_user.id, difficulty=1, correct=5, time_seconds=10)
        append_run_summary(test_db, test_user.id, difficulty=3, correct=9, time_seconds=20)

        runs = fetch_run_history(test_db, test_user.id)

        assert [run.difficulty for run in runs] == [3, 1]
        assert len(fetch_run_history(test_db, test_user.id, limit=1)) == 1

    def test_format_run(self):
        run = make_run(datetime(2026, 5, 4, 10, 30), 2, correct=7)
        run.id = 5

        data = format_run(run)

        assert data["percentage"] == 70.0
        assert data["played_at"] == "2026-05-04T10:30:00"


class TestSummarizeRunsByLevel:
    """Tests for per-day, per-level statistics."""

    def test_totals_per_level(self):
        day = datetime(2026, 5, 4, 9, 0)
        runs = [
            make_run(day, 1, correct=8),
            make_run(day + timedelta(hours=2), 1, correct=6),
            make_run(day, 3, correct=10),
        ]

        summary = summarize_runs_by_level(runs, date(2026, 5, 4))

        assert summary == [
            {"level": 1, "sessions": 2, "words": 20, "correct": 14, "wrong": 6, "percentage": 70.0},
            {"level": 3, "sessions": 1, "words": 10, "correct": 10, "wrong": 0, "percentage": 100.0},
        ]

    def test_other_days_ignored(self):
        runs = [make_run(datetime(2026, 5, 3, 23, 59), 2, correct=5)]
        assert summarize_runs_by_level(runs, date(2026, 5, 4)) == []

    def test_runs_on(self):
        runs = [make_run(datetime(2026, 5, 3, 12), 1, 5), make_run(datetime(2026, 5, 4, 12), 1, 5)]
        assert len(runs_on(runs, date(2026, 5, 4))) == 1

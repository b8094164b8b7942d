"""Answer log and run summary access, failure statistics and run history stats."""
import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from synquiz.constants import DIFFICULTY_LEVELS, MIN_ATTEMPTS_FOR_STATS, QUESTIONS_PER_PLAYER
from synquiz.db.models import AnswerRecord, GameRun
from synquiz.services.words import FailureStat

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnswerLogEntry:
    """One row of a player's raw answer log."""
    entry_id: str
    level: int
    is_correct: bool


def fetch_answer_history(db: Session, user_id: str) -> List[AnswerLogEntry]:
    """
    Get the raw answer log of a player.

    Store failures are logged and reported as an empty history.
    """
    try:
        rows = db.query(AnswerRecord).filter(
            AnswerRecord.user_id == user_id
        ).order_by(AnswerRecord.id).all()
    except SQLAlchemyError as e:
        logger.warning(f"Answer history fetch failed: {e}", extra={"user_id": user_id})
        return []

    return [
        AnswerLogEntry(entry_id=row.word_id, level=row.level, is_correct=bool(row.is_correct))
        for row in rows
    ]


def aggregate_failure_stats(records: Iterable[AnswerLogEntry], level: int) -> Dict[str, FailureStat]:
    """
    Aggregate the answer log of one level into per-word failure statistics.

    Only records of ``level`` are counted, so each entry_id maps to exactly
    one (entry_id, level) group. Groups with fewer than
    MIN_ATTEMPTS_FOR_STATS attempts are discarded as insufficient data.

    Args:
        records: Raw answer log
        level: Difficulty level the stats are for

    Returns:
        New dictionary mapping entry_id to FailureStat
    """
    attempts = defaultdict(int)
    wrong = defaultdict(int)

    for record in records:
        if record.level != level:
            continue
        attempts[record.entry_id] += 1
        if not record.is_correct:
            wrong[record.entry_id] += 1

    stats = {}
    for entry_id, attempt_count in attempts.items():
        if attempt_count < MIN_ATTEMPTS_FOR_STATS:
            continue
        stats[entry_id] = FailureStat(
            entry_key=f"{entry_id}:{level}",
            wrong_count=wrong[entry_id],
            attempt_count=attempt_count,
        )
    return stats


def append_answer_record(db: Session, user_id: str, entry_id: str, level: int, is_correct: bool) -> bool:
    """
    Append one answer to the player's log.

    Returns:
        True if the record was written, False if the store rejected it
    """
    try:
        db.add(AnswerRecord(
            user_id=user_id,
            word_id=entry_id,
            level=level,
            is_correct=1 if is_correct else 0,
            answered_at=datetime.utcnow(),
        ))
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Could not append answer record: {e}", extra={"user_id": user_id})
        return False


def append_run_summary(
    db: Session,
    user_id: str,
    difficulty: int,
    correct: int,
    time_seconds: float,
    total: int = QUESTIONS_PER_PLAYER
) -> Optional[GameRun]:
    """
    Append the summary of a finished solo turn.

    Returns:
        The stored GameRun, or None if the store rejected it
    """
    run = GameRun(
        user_id=user_id,
        played_at=datetime.utcnow(),
        difficulty=difficulty,
        total=total,
        correct=correct,
        wrong=total - correct,
        time_seconds=time_seconds,
    )
    try:
        db.add(run)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Could not append run summary: {e}", extra={"user_id": user_id})
        return None

    logger.info(
        f"Run saved: level={difficulty} correct={correct}/{total} time={time_seconds:.1f}s",
        extra={"user_id": user_id, "difficulty": difficulty}
    )
    return run


def fetch_run_history(db: Session, user_id: str, limit: Optional[int] = None) -> List[GameRun]:
    """Runs of a player, most recent first."""
    try:
        query = db.query(GameRun).filter(
            GameRun.user_id == user_id
        ).order_by(desc(GameRun.played_at), desc(GameRun.id))
        if limit:
            query = query.limit(limit)
        return query.all()
    except SQLAlchemyError as e:
        logger.warning(f"Run history fetch failed: {e}", extra={"user_id": user_id})
        return []


def format_run(run: GameRun) -> Dict:
    return {
        "id": run.id,
        "played_at": run.played_at.isoformat(),
        "difficulty": run.difficulty,
        "total": run.total,
        "correct": run.correct,
        "wrong": run.wrong,
        "time_seconds": run.time_seconds,
        "percentage": round(run.correct / run.total * 100, 1) if run.total else 0.0,
    }


def runs_on(runs: Iterable[GameRun], day: date) -> List[GameRun]:
    return [run for run in runs if run.played_at.date() == day]


def summarize_runs_by_level(runs: Iterable[GameRun], day: date) -> List[Dict]:
    """
    Per-level totals for the runs played on ``day``.

    Levels without sessions that day are omitted.

    Returns:
        List of dicts with level, sessions, words, correct, wrong, percentage
    """
    day_runs = runs_on(runs, day)
    summary = []

    for level in DIFFICULTY_LEVELS:
        level_runs = [run for run in day_runs if run.difficulty == level]
        if not level_runs:
            continue

        words = sum(run.total for run in level_runs)
        correct = sum(run.correct for run in level_runs)
        summary.append({
            "level": level,
            "sessions": len(level_runs),
            "words": words,
            "correct": correct,
            "wrong": sum(run.wrong for run in level_runs),
            "percentage": round(correct / words * 100, 1) if words > 0 else 0.0,
        })

    return summary

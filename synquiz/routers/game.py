"""Game flow endpoints: start, turns, answers, summary and review."""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Request, HTTPException
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session
from synquiz.constants import (
    ANSWER_SUBMISSION_RATE_LIMIT,
    DIFFICULTY_LEVELS,
    GAME_START_RATE_LIMIT,
    MAX_PLAYERS,
    QUESTIONS_PER_PLAYER
)
from synquiz.db.database import get_db
from synquiz.rate_limit import limiter
from synquiz.routers.user import get_user_id_from_cookie
from synquiz.services.game_sessions import GameRegistry, GameSession, game_registry
from synquiz.services.history import (
    aggregate_failure_stats,
    append_answer_record,
    append_run_summary,
    fetch_answer_history
)
from synquiz.services.quiz_generator import EmptyVocabularyError, generate_question_pool
from synquiz.services.turns import GamePhase, GameStateError, Player, TurnScheduler, default_players
from synquiz.services.words import Question
from synquiz.services.vocabulary import SqlVocabularyStore, VocabularyCache, vocabulary_cache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/games", tags=["game"])


class StartGameRequest(BaseModel):
    """Request body for starting a game."""
    difficulty: int = Field(1, ge=min(DIFFICULTY_LEVELS), le=max(DIFFICULTY_LEVELS))
    player_count: int = Field(2, ge=1, le=MAX_PLAYERS)
    player_names: Optional[List[str]] = Field(None, max_length=MAX_PLAYERS)
    solo: bool = False

    @field_validator('player_names')
    @classmethod
    def validate_names(cls, v):
        """Strip names and reject blank ones."""
        if v is None:
            return v
        names = [name.strip() for name in v]
        if not names or any(not name for name in names):
            raise ValueError('player names cannot be empty')
        return names


class AnswerSubmission(BaseModel):
    """Request body for answer submission."""
    selected_option: str = Field(..., min_length=1, max_length=200, description="Selected option text")

    @field_validator('selected_option')
    @classmethod
    def validate_option(cls, v):
        """Validate that selected_option is not empty or whitespace."""
        if not v or v.strip() == '':
            raise ValueError('selected_option cannot be empty')
        return v.strip()


def get_vocabulary_cache() -> VocabularyCache:
    return vocabulary_cache


def get_game_registry() -> GameRegistry:
    return game_registry


def build_players(game_request: StartGameRequest) -> List[Player]:
    if game_request.solo:
        players = default_players(1)
        if game_request.player_names:
            players[0].name = game_request.player_names[0]
        return players

    if game_request.player_names:
        return [Player(id=i, name=name) for i, name in enumerate(game_request.player_names)]
    return default_players(game_request.player_count)


def generate_fresh_pool(
    question_count: int,
    difficulty: int,
    user_id: Optional[str],
    db: Session,
    cache: VocabularyCache
) -> List[Question]:
    """
    Generate a question pool for a game at ``difficulty``.

    The player's failure stats at this level steer sampling when a player id
    is known.

    Raises:
        HTTPException: 404 if the level has no words
    """
    vocabulary = cache.ensure(difficulty, SqlVocabularyStore(db))

    stats = None
    if user_id:
        stats = aggregate_failure_stats(fetch_answer_history(db, user_id), level=difficulty)

    try:
        return generate_question_pool(
            question_count,
            vocabulary,
            stats=stats,
            reserve=cache.reserve_for(difficulty)
        )
    except EmptyVocabularyError as e:
        logger.warning(f"No pool generated: {e}", extra={"difficulty": difficulty})
        raise HTTPException(status_code=404, detail=str(e))


def get_session_or_404(game_id: str, registry: GameRegistry) -> GameSession:
    session = registry.get(game_id)
    if not session:
        raise HTTPException(status_code=404, detail="Game not found")
    return session


def game_state(session: GameSession) -> dict:
    return {
        "game_id": session.id,
        "difficulty": session.difficulty,
        "solo": session.solo,
        **session.scheduler.state()
    }


def summary_data(session: GameSession) -> dict:
    scheduler = session.scheduler
    data = {
        "game_id": session.id,
        "difficulty": session.difficulty,
        "phase": scheduler.phase.value,
        "players": [p.to_dict() for p in scheduler.players],
        "ranking": [p.to_dict() for p in scheduler.ranking()],
    }
    if session.solo:
        player = scheduler.players[0]
        data["result"] = {
            "correct": player.score,
            "wrong": QUESTIONS_PER_PLAYER - player.score,
            "total": QUESTIONS_PER_PLAYER,
            "percentage": round(player.score / QUESTIONS_PER_PLAYER * 100, 1),
            "run_saved": session.run_saved,
        }
    return data


@router.post("")
@limiter.limit(GAME_START_RATE_LIMIT)
async def start_game(
    game_request: StartGameRequest,
    request: Request,
    db: Session = Depends(get_db),
    cache: VocabularyCache = Depends(get_vocabulary_cache),
    registry: GameRegistry = Depends(get_game_registry)
):
    """
    Start a new game.

    Generates players x 10 questions at the requested difficulty and returns
    the game waiting for the first player (intermission).
    """
    user_id = get_user_id_from_cookie(request)
    scheduler = TurnScheduler(build_players(game_request))

    try:
        pool = generate_fresh_pool(scheduler.required_questions, game_request.difficulty, user_id, db, cache)
        scheduler.load_pool(pool)
        session = registry.create(
            scheduler,
            difficulty=game_request.difficulty,
            user_id=user_id,
            solo=game_request.solo
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error starting game: {e}", exc_info=True, extra={"difficulty": game_request.difficulty})
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Error starting game: {str(e)}")

    logger.info(
        f"Game started with {len(scheduler.players)} players",
        extra={"game_id": session.id, "difficulty": session.difficulty}
    )
    return game_state(session)


@router.get("/{game_id}")
async def get_game(game_id: str, registry: GameRegistry = Depends(get_game_registry)):
    """Current state of a game."""
    return game_state(get_session_or_404(game_id, registry))


@router.post("/{game_id}/turn")
async def start_turn(game_id: str, registry: GameRegistry = Depends(get_game_registry)):
    """Start the waiting player's turn and return its first question."""
    session = get_session_or_404(game_id, registry)
    try:
        session.scheduler.start_turn()
    except GameStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return game_state(session)


@router.post("/{game_id}/answer")
@limiter.limit(ANSWER_SUBMISSION_RATE_LIMIT)
async def submit_answer(
    game_id: str,
    answer: AnswerSubmission,
    request: Request,
    db: Session = Depends(get_db),
    registry: GameRegistry = Depends(get_game_registry)
):
    """
    Lock in an answer for the current question.

    A second submission for the same question returns the first result with
    already_answered set and changes nothing.
    """
    session = get_session_or_404(game_id, registry)
    scheduler = session.scheduler

    try:
        outcome = scheduler.submit_answer(answer.selected_option)
        question = scheduler.current_question()

        if outcome is None:
            return {
                "is_correct": question.is_correct(scheduler.selected_answer),
                "correct_answer": question.correct_answer,
                "selected_answer": scheduler.selected_answer,
                "score": scheduler.current_player.score,
                "already_answered": True
            }

        if session.records_answers:
            append_answer_record(db, session.user_id, outcome.source.id, session.difficulty, outcome.is_correct)

    except GameStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error submitting answer: {e}", exc_info=True, extra={"game_id": game_id})
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Error submitting answer: {str(e)}")

    return {
        "is_correct": outcome.is_correct,
        "correct_answer": outcome.correct_answer,
        "selected_answer": outcome.selected_answer,
        "synonyms": list(outcome.source.synonyms),
        "score": scheduler.current_player.score,
        "already_answered": False
    }


@router.post("/{game_id}/next")
async def next_question(
    game_id: str,
    db: Session = Depends(get_db),
    registry: GameRegistry = Depends(get_game_registry)
):
    """Advance to the next question, the next player, or the summary."""
    session = get_session_or_404(game_id, registry)
    scheduler = session.scheduler

    try:
        phase = scheduler.advance()

        if phase == GamePhase.SUMMARY and session.records_answers and not session.run_saved:
            player = scheduler.players[0]
            run = append_run_summary(
                db,
                session.user_id,
                difficulty=session.difficulty,
                correct=player.score,
                time_seconds=player.elapsed_seconds
            )
            session.run_saved = run is not None

    except GameStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error advancing game: {e}", exc_info=True, extra={"game_id": game_id})
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Error advancing game: {str(e)}")

    return game_state(session)


@router.post("/{game_id}/finish")
async def finish_game(game_id: str, registry: GameRegistry = Depends(get_game_registry)):
    """Stop the game mid-turn and go to the summary."""
    session = get_session_or_404(game_id, registry)
    try:
        session.scheduler.finish_early()
    except GameStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return summary_data(session)


@router.get("/{game_id}/summary")
async def get_summary(game_id: str, registry: GameRegistry = Depends(get_game_registry)):
    """Scores, times and ranking of a finished game."""
    session = get_session_or_404(game_id, registry)
    if session.scheduler.phase not in (GamePhase.SUMMARY, GamePhase.REVIEW):
        raise HTTPException(status_code=409, detail="Game is not finished")
    return summary_data(session)


@router.get("/{game_id}/review")
async def review_words(game_id: str, registry: GameRegistry = Depends(get_game_registry)):
    """Open the review of every distinct word in the game, sorted by headword."""
    session = get_session_or_404(game_id, registry)
    scheduler = session.scheduler
    try:
        if scheduler.phase == GamePhase.REVIEW:
            words = scheduler.review_words()
        else:
            words = scheduler.open_review()
    except GameStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"game_id": session.id, "words": [entry.to_dict() for entry in words]}


@router.post("/{game_id}/review/close")
async def close_review(game_id: str, registry: GameRegistry = Depends(get_game_registry)):
    """Return from the review to the summary."""
    session = get_session_or_404(game_id, registry)
    try:
        session.scheduler.close_review()
    except GameStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return summary_data(session)


@router.post("/{game_id}/restart")
@limiter.limit(GAME_START_RATE_LIMIT)
async def restart_game(
    game_id: str,
    request: Request,
    db: Session = Depends(get_db),
    cache: VocabularyCache = Depends(get_vocabulary_cache),
    registry: GameRegistry = Depends(get_game_registry)
):
    """
    Play again: reset scores and times and load a freshly generated pool.

    The pool is generated before anything is reset, so a failed restart
    leaves the finished game as it was.
    """
    session = get_session_or_404(game_id, registry)
    scheduler = session.scheduler

    if scheduler.phase not in (GamePhase.SUMMARY, GamePhase.REVIEW):
        raise HTTPException(status_code=409, detail="Game is not finished")

    try:
        pool = generate_fresh_pool(scheduler.required_questions, session.difficulty, session.user_id, db, cache)
        scheduler.reset()
        scheduler.load_pool(pool)
    except GameStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error restarting game: {e}", exc_info=True, extra={"game_id": game_id})
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Error restarting game: {str(e)}")

    session.run_saved = False
    return game_state(session)

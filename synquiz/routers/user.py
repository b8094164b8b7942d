"""Player bootstrap and run history endpoints."""
import uuid
from datetime import date, datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response, Request
from sqlalchemy.orm import Session
from synquiz.config import settings
from synquiz.constants import COOKIE_NAME, RECENT_RUN_HISTORY_LIMIT
from synquiz.db.database import get_db
from synquiz.db.models import User
from synquiz.services.history import (
    fetch_run_history,
    format_run,
    runs_on,
    summarize_runs_by_level
)

router = APIRouter(prefix="/api", tags=["user"])


def get_user_id_from_cookie(request: Request) -> Optional[str]:
    """Player id from the cookie, or None for anonymous play."""
    return request.cookies.get(COOKIE_NAME) or None


def get_or_create_user(request: Request, response: Response, db: Session) -> str:
    """
    Get or create a player based on the cookie.

    Args:
        request: FastAPI request
        response: FastAPI response (to set cookie)
        db: Database session

    Returns:
        Player id
    """
    user_id = get_user_id_from_cookie(request)

    if user_id:
        user = db.query(User).filter(User.id == user_id).first()
        if user:
            user.last_active_at = datetime.utcnow()
            db.commit()
            return user_id

    user_id = f"syn_{uuid.uuid4()}"
    db.add(User(id=user_id))
    db.commit()

    response.set_cookie(
        key=COOKIE_NAME,
        value=user_id,
        max_age=settings.COOKIE_MAX_AGE,
        httponly=settings.COOKIE_HTTPONLY,
        samesite=settings.COOKIE_SAMESITE,
        secure=settings.COOKIE_SECURE
    )

    return user_id


@router.get("/bootstrap")
async def bootstrap(
    request: Request,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Bootstrap the player session.

    Returns:
    - player id
    - recent solo runs
    - today's per-level statistics
    """
    user_id = get_or_create_user(request, response, db)
    runs = fetch_run_history(db, user_id)
    today = datetime.utcnow().date()

    return {
        "user_id": user_id,
        "total_runs": len(runs),
        "run_history": [format_run(run) for run in runs[:RECENT_RUN_HISTORY_LIMIT]],
        "today": summarize_runs_by_level(runs, today),
    }


@router.get("/history")
async def history(
    request: Request,
    day: Optional[date] = Query(None, description="Calendar day (YYYY-MM-DD), default today"),
    db: Session = Depends(get_db)
):
    """
    Run statistics of the current player for one day.

    Returns:
    - the day's runs
    - per-level totals (sessions, words, correct, wrong, percentage)
    """
    user_id = get_user_id_from_cookie(request)
    if not user_id:
        raise HTTPException(status_code=401, detail="No user session found")

    day = day or datetime.utcnow().date()
    runs = fetch_run_history(db, user_id)

    return {
        "day": day.isoformat(),
        "runs": [format_run(run) for run in runs_on(runs, day)],
        "levels": summarize_runs_by_level(runs, day),
    }

"""Main FastAPI application for the synonym quiz."""
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from fastapi import FastAPI, Depends
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.orm import Session
from synquiz.routers import game, user, words
from synquiz.db.init_db import init_db
from synquiz.db.database import get_db
from synquiz.logging_config import setup_logging
from synquiz.config import settings
from synquiz.rate_limit import limiter

# Set up logging on module import
log_level = settings.LOG_LEVEL if settings.LOG_LEVEL else None
setup_logging(log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and seed the sample vocabulary on startup."""
    logger.info("Application startup initiated")
    try:
        init_db()
        logger.info("Database initialization completed successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)
        raise

    yield

    logger.info("Application shutdown complete")


app = FastAPI(
    title="Synonym Quiz API",
    description="""
    Turn-based vocabulary quiz: pick the synonym of the headword.

    ## Game Flow

    1. **Start**: POST `/api/games` with a difficulty and players
    2. **Turn**: POST `/api/games/{game_id}/turn` when the next player is ready
    3. **Answer**: POST `/api/games/{game_id}/answer`, then `/next`
    4. **Summary**: GET `/api/games/{game_id}/summary` and `/review`

    ## Question Pool

    - Each player answers 10 questions from a shared pool
    - Words the player has missed before are drawn more often
    - Distractors share the headword's word category when enough exist
    - Every wrong answer adds 10 seconds to the player's time
    """,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_tags=[
        {"name": "user", "description": "Player session and run history"},
        {"name": "words", "description": "Word search"},
        {"name": "game", "description": "Game creation, turns, answers and summary"},
        {"name": "health", "description": "Service health and readiness checks"}
    ]
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

if settings.is_production:
    from starlette.middleware.sessions import SessionMiddleware
    app.add_middleware(SessionMiddleware, secret_key=settings.SECRET_KEY)
    logger.info("Session middleware enabled")

app.include_router(user.router)
app.include_router(words.router)
app.include_router(game.router)


@app.get("/health", tags=["health"])
async def health_check(db: Session = Depends(get_db)):
    """Health check with database verification.

    Returns:
        200 OK: Service is healthy and database is accessible
        503 Service Unavailable: Database connection failed
    """
    timestamp = datetime.utcnow().isoformat() + "Z"

    try:
        db.execute(text("SELECT 1"))
        logger.debug("Health check passed")

        return {
            "status": "healthy",
            "database": "connected",
            "timestamp": timestamp,
            "environment": settings.ENVIRONMENT
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}", exc_info=True)

        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "database": "disconnected",
                "error": str(e),
                "timestamp": timestamp
            }
        )


@app.get("/readiness", tags=["health"])
async def readiness_check(db: Session = Depends(get_db)):
    """Readiness check for container orchestration."""
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ready", "timestamp": datetime.utcnow().isoformat() + "Z"}
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "not ready", "error": str(e)}
        )

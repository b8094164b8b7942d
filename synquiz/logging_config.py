"""Logging setup: JSON lines in production, coloured console lines otherwise.

Game and player context travels through ``extra=`` and ends up as JSON keys:

    logger.info("Game started", extra={"game_id": session.id, "difficulty": 2})
"""
import json
import logging
import sys
from datetime import datetime
from synquiz.config import settings

CONTEXT_FIELDS = ("user_id", "game_id", "difficulty")

LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
RESET = "\033[0m"


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with any game context attached."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({
            field: getattr(record, field)
            for field in CONTEXT_FIELDS
            if hasattr(record, field)
        })
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class ColoredFormatter(logging.Formatter):
    """Console formatter that colours the level name."""

    def format(self, record: logging.LogRecord) -> str:
        # Leave the shared record untouched for other handlers
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{LEVEL_COLORS.get(record.levelname, '')}{record.levelname}{RESET}"
        return super().format(record)


def setup_logging(log_level: str = None) -> None:
    """
    Install the synquiz handler on the root logger.

    Calling this again replaces the previous handler instead of adding a
    second one.

    Args:
        log_level: Level name; defaults to INFO in production, DEBUG elsewhere
    """
    if log_level is None:
        log_level = "INFO" if settings.is_production else "DEBUG"

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name("synquiz")
    if settings.is_production:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(ColoredFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S"
        ))

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if existing.get_name() == "synquiz":
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging at {log_level.upper()} for {settings.ENVIRONMENT}"
    )

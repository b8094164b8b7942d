"""In-memory registry of running games."""
import logging
import threading
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional
from synquiz.constants import GAME_IDLE_TIMEOUT_SECONDS, MAX_ACTIVE_GAMES
from synquiz.services.turns import TurnScheduler

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """A game in progress: its scheduler plus who started it and at which level."""
    id: str
    difficulty: int
    scheduler: TurnScheduler
    user_id: Optional[str] = None
    solo: bool = False
    run_saved: bool = False
    last_seen_at: float = 0.0

    @property
    def records_answers(self) -> bool:
        """Answer logs and run summaries are only kept for identified solo players."""
        return self.solo and self.user_id is not None


class GameRegistry:
    """
    Mapping of game id to GameSession, bounded in size and idle time.

    Every lookup refreshes a game. Games idle for ``idle_timeout`` seconds
    are dropped, and once ``max_games`` are held the least recently used
    game makes room for a new one.
    """

    def __init__(
        self,
        max_games: int = MAX_ACTIVE_GAMES,
        idle_timeout: float = GAME_IDLE_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic
    ):
        if max_games < 1:
            raise ValueError("max_games must be at least 1")
        self.max_games = max_games
        self.idle_timeout = idle_timeout
        self.clock = clock
        # Ordered least to most recently used
        self._games: "OrderedDict[str, GameSession]" = OrderedDict()
        self._lock = threading.Lock()

    def create(
        self,
        scheduler: TurnScheduler,
        difficulty: int,
        user_id: Optional[str] = None,
        solo: bool = False
    ) -> GameSession:
        now = self.clock()
        session = GameSession(
            id=f"game_{uuid.uuid4().hex}",
            difficulty=difficulty,
            scheduler=scheduler,
            user_id=user_id,
            solo=solo,
            last_seen_at=now,
        )
        with self._lock:
            self._drop_idle(now)
            while len(self._games) >= self.max_games:
                evicted_id, _ = self._games.popitem(last=False)
                logger.info(f"Evicted game, {self.max_games} games held", extra={"game_id": evicted_id})
            self._games[session.id] = session
        return session

    def get(self, game_id: str) -> Optional[GameSession]:
        now = self.clock()
        with self._lock:
            self._drop_idle(now)
            session = self._games.get(game_id)
            if session is not None:
                session.last_seen_at = now
                self._games.move_to_end(game_id)
            return session

    def _drop_idle(self, now: float) -> None:
        while self._games:
            game_id, oldest = next(iter(self._games.items()))
            if now - oldest.last_seen_at < self.idle_timeout:
                break
            del self._games[game_id]
            logger.info("Dropped idle game", extra={"game_id": game_id})

    def __len__(self) -> int:
        return len(self._games)


game_registry = GameRegistry()

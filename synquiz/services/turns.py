"""Turn scheduling for hot-seat games: phases, scoring and turn timing."""
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence
from synquiz.constants import (
    DEFAULT_PLAYER_NAME,
    QUESTIONS_PER_PLAYER,
    WRONG_ANSWER_PENALTY_SECONDS
)
from synquiz.services.words import Question, WordEntry

logger = logging.getLogger(__name__)


class GamePhase(str, Enum):
    """Phases of a game."""
    SETUP = "setup"
    INTERMISSION = "intermission"  # Waiting for the next player to start
    PLAYING = "playing"
    SUMMARY = "summary"
    REVIEW = "review"  # Browsing the words of the finished game


class GameStateError(ValueError):
    """An operation was requested in a phase that does not allow it."""


@dataclass
class Player:
    """A participant and their result for the current game."""
    id: int
    name: str
    score: int = 0
    elapsed_seconds: float = 0.0

    def reset(self) -> None:
        self.score = 0
        self.elapsed_seconds = 0.0

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "name": self.name,
            "score": self.score,
            "elapsed_seconds": round(self.elapsed_seconds, 2),
        }


@dataclass(frozen=True)
class AnswerOutcome:
    """Result of locking in an answer."""
    is_correct: bool
    correct_answer: str
    selected_answer: str
    source: WordEntry


def default_players(count: int) -> List[Player]:
    """Players named "Player 1".."Player N"."""
    return [
        Player(id=i, name=DEFAULT_PLAYER_NAME.format(number=i + 1))
        for i in range(count)
    ]


def pool_index(player_index: int, question_index: int, questions_per_player: int = QUESTIONS_PER_PLAYER) -> int:
    """Flat pool position of a player's question."""
    return player_index * questions_per_player + question_index


class TurnScheduler:
    """
    Drive players through their turns over a shared question pool.

    Each player answers ``questions_per_player`` consecutive questions of the
    pool: player p, question i reads pool[p * questions_per_player + i].
    A correct answer adds 1 to the player's score; a wrong one adds
    WRONG_ANSWER_PENALTY_SECONDS to the turn time, which is finalized when
    the player's last question is left.

    Args:
        players: Participants in turn order
        clock: Monotonic seconds source (default: time.monotonic)
        questions_per_player: Questions in one turn (default 10)
    """

    def __init__(
        self,
        players: Sequence[Player],
        clock: Callable[[], float] = time.monotonic,
        questions_per_player: int = QUESTIONS_PER_PLAYER
    ):
        if not players:
            raise ValueError("A game needs at least one player")

        self.players = list(players)
        self.clock = clock
        self.questions_per_player = questions_per_player

        self.phase = GamePhase.SETUP
        self.pool: List[Question] = []
        self.player_index = 0
        self.question_index = 0
        self.selected_answer: Optional[str] = None
        self.wrong_answers_this_turn = 0
        self.turn_started_at = 0.0

    @property
    def required_questions(self) -> int:
        return len(self.players) * self.questions_per_player

    @property
    def current_player(self) -> Player:
        return self.players[self.player_index]

    @property
    def is_answered(self) -> bool:
        return self.selected_answer is not None

    def _require(self, *phases: GamePhase) -> None:
        if self.phase not in phases:
            allowed = ", ".join(p.value for p in phases)
            raise GameStateError(f"Not allowed in phase {self.phase.value} (expected {allowed})")

    def rename_player(self, player_id: int, name: str) -> None:
        """Rename a player. Only allowed before the pool is loaded."""
        self._require(GamePhase.SETUP)
        for player in self.players:
            if player.id == player_id:
                player.name = name
                return
        raise ValueError(f"Unknown player {player_id}")

    def load_pool(self, pool: Sequence[Question]) -> None:
        """Setup -> Intermission(0) once a pool has been generated."""
        self._require(GamePhase.SETUP)
        if len(pool) != self.required_questions:
            raise ValueError(
                f"Pool has {len(pool)} questions, game needs {self.required_questions}"
            )

        self.pool = list(pool)
        self.player_index = 0
        self.question_index = 0
        self.selected_answer = None
        self.phase = GamePhase.INTERMISSION

    def start_turn(self) -> Question:
        """Intermission(p) -> Playing(p, 0); starts the turn clock."""
        self._require(GamePhase.INTERMISSION)
        self.phase = GamePhase.PLAYING
        self.question_index = 0
        self.selected_answer = None
        self.wrong_answers_this_turn = 0
        self.turn_started_at = self.clock()
        return self.current_question()

    def current_question(self) -> Question:
        self._require(GamePhase.PLAYING)
        return self.pool[pool_index(self.player_index, self.question_index, self.questions_per_player)]

    def submit_answer(self, answer: str) -> Optional[AnswerOutcome]:
        """
        Lock in an answer for the current question.

        Returns:
            AnswerOutcome, or None if the question was already answered
        """
        self._require(GamePhase.PLAYING)
        if self.is_answered:
            return None

        question = self.current_question()
        is_correct = question.is_correct(answer)
        self.selected_answer = answer

        if is_correct:
            self.current_player.score += 1
        else:
            self.wrong_answers_this_turn += 1

        return AnswerOutcome(
            is_correct=is_correct,
            correct_answer=question.correct_answer,
            selected_answer=answer,
            source=question.source,
        )

    def advance(self) -> GamePhase:
        """
        Move past the current question.

        Playing(p, i) -> Playing(p, i+1) while questions remain, otherwise
        the turn is finalized and the game moves to Intermission(p+1) or
        Summary after the last player.

        Returns:
            The phase after advancing
        """
        self._require(GamePhase.PLAYING)
        if not self.is_answered:
            raise GameStateError("Answer the current question before advancing")

        if self.question_index < self.questions_per_player - 1:
            self.question_index += 1
            self.selected_answer = None
            return self.phase

        self._finish_turn()
        if self.player_index + 1 < len(self.players):
            self.player_index += 1
            self.question_index = 0
            self.selected_answer = None
            self.phase = GamePhase.INTERMISSION
        else:
            self.phase = GamePhase.SUMMARY
        return self.phase

    def _finish_turn(self) -> None:
        player = self.current_player
        real_seconds = self.clock() - self.turn_started_at
        player.elapsed_seconds = real_seconds + WRONG_ANSWER_PENALTY_SECONDS * self.wrong_answers_this_turn
        logger.info(
            f"Turn finished: player={player.name} score={player.score} "
            f"wrong={self.wrong_answers_this_turn} elapsed={player.elapsed_seconds:.1f}s"
        )

    def finish_early(self) -> None:
        """Playing -> Summary without finalizing the current turn."""
        self._require(GamePhase.PLAYING)
        self.phase = GamePhase.SUMMARY

    def open_review(self) -> List[WordEntry]:
        """Summary -> Review."""
        self._require(GamePhase.SUMMARY)
        self.phase = GamePhase.REVIEW
        return self.review_words()

    def close_review(self) -> None:
        """Review -> Summary."""
        self._require(GamePhase.REVIEW)
        self.phase = GamePhase.SUMMARY

    def reset(self) -> None:
        """Summary/Review -> Setup with scores and times cleared."""
        self._require(GamePhase.SUMMARY, GamePhase.REVIEW)
        for player in self.players:
            player.reset()
        self.pool = []
        self.player_index = 0
        self.question_index = 0
        self.selected_answer = None
        self.wrong_answers_this_turn = 0
        self.phase = GamePhase.SETUP

    def review_words(self) -> List[WordEntry]:
        """Distinct entries of the pool (by headword), sorted alphabetically."""
        by_headword = {}
        for question in self.pool:
            by_headword[question.source.headword] = question.source
        return sorted(by_headword.values(), key=lambda entry: entry.headword)

    def ranking(self) -> List[Player]:
        """Players who finished a turn, best score first, then fastest."""
        finished = [p for p in self.players if p.elapsed_seconds > 0]
        return sorted(finished, key=lambda p: (-p.score, p.elapsed_seconds))

    def state(self) -> Dict:
        """Snapshot of the game for the frontend."""
        data = {
            "phase": self.phase.value,
            "player_index": self.player_index,
            "question_index": self.question_index,
            "questions_per_player": self.questions_per_player,
            "players": [p.to_dict() for p in self.players],
        }
        if self.phase == GamePhase.PLAYING:
            data["question"] = self.current_question().to_dict(reveal=self.is_answered)
            data["is_answered"] = self.is_answered
            data["selected_answer"] = self.selected_answer
        return data

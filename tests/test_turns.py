"""Unit tests for the turn scheduler."""
import pytest
from synquiz.constants import WRONG_ANSWER_PENALTY_SECONDS
from synquiz.services.turns import (
    GamePhase,
    GameStateError,
    Player,
    TurnScheduler,
    default_players,
    pool_index
)
from synquiz.services.words import Question, WordEntry


def make_pool(size, headwords=None):
    """Questions whose correct answer is 'right' and distractor 'wrong'."""
    pool = []
    for i in range(size):
        headword = headwords[i] if headwords else f"hitz{i:02d}"
        entry = WordEntry(id=f"w{i}", headword=headword, synonyms=("right",))
        pool.append(Question(source=entry, correct_answer="right", options=("right", "wrong")))
    return pool


def play_turn(scheduler, clock, wrong=0, seconds=30):
    """Answer a full turn, getting the first ``wrong`` questions wrong."""
    scheduler.start_turn()
    for i in range(scheduler.questions_per_player):
        scheduler.submit_answer("wrong" if i < wrong else "right")
        if i == scheduler.questions_per_player - 1:
            clock.advance(seconds)
        scheduler.advance()


@pytest.fixture
def two_player_game(clock):
    scheduler = TurnScheduler(default_players(2), clock=clock)
    scheduler.load_pool(make_pool(20))
    return scheduler


class TestPoolIndexing:
    """Tests for the flat pool layout."""

    def test_pool_index_formula(self):
        """Player 1, question 3 sits at 1*10+3."""
        assert pool_index(1, 3) == 13
        assert pool_index(0, 0) == 0
        assert pool_index(2, 9) == 29

    def test_second_player_reads_own_slice(self, two_player_game, clock):
        """Playing(1, 3) reads pool[13]."""
        play_turn(two_player_game, clock)
        two_player_game.start_turn()
        for _ in range(3):
            two_player_game.submit_answer("right")
            two_player_game.advance()

        assert two_player_game.player_index == 1
        assert two_player_game.question_index == 3
        assert two_player_game.current_question() is two_player_game.pool[13]

    def test_load_pool_requires_exact_size(self, clock):
        """The pool must hold players x 10 questions."""
        scheduler = TurnScheduler(default_players(2), clock=clock)
        with pytest.raises(ValueError):
            scheduler.load_pool(make_pool(19))


class TestTransitions:
    """Tests for phase transitions."""

    def test_starts_in_setup(self, clock):
        scheduler = TurnScheduler(default_players(1), clock=clock)
        assert scheduler.phase == GamePhase.SETUP

    def test_load_pool_moves_to_first_intermission(self, two_player_game):
        assert two_player_game.phase == GamePhase.INTERMISSION
        assert two_player_game.player_index == 0

    def test_start_turn_begins_playing(self, two_player_game):
        question = two_player_game.start_turn()

        assert two_player_game.phase == GamePhase.PLAYING
        assert two_player_game.question_index == 0
        assert question is two_player_game.pool[0]

    def test_finishing_turn_moves_to_next_intermission(self, two_player_game, clock):
        play_turn(two_player_game, clock)

        assert two_player_game.phase == GamePhase.INTERMISSION
        assert two_player_game.player_index == 1

    def test_last_turn_moves_to_summary(self, two_player_game, clock):
        play_turn(two_player_game, clock)
        play_turn(two_player_game, clock)

        assert two_player_game.phase == GamePhase.SUMMARY

    def test_cannot_answer_during_intermission(self, two_player_game):
        with pytest.raises(GameStateError):
            two_player_game.submit_answer("right")

    def test_cannot_advance_unanswered_question(self, two_player_game):
        two_player_game.start_turn()
        with pytest.raises(GameStateError):
            two_player_game.advance()

    def test_cannot_start_turn_while_playing(self, two_player_game):
        two_player_game.start_turn()
        with pytest.raises(GameStateError):
            two_player_game.start_turn()

    def test_finish_early_goes_to_summary(self, two_player_game):
        two_player_game.start_turn()
        two_player_game.finish_early()
        assert two_player_game.phase == GamePhase.SUMMARY

    def test_review_round_trip(self, two_player_game, clock):
        play_turn(two_player_game, clock)
        play_turn(two_player_game, clock)

        two_player_game.open_review()
        assert two_player_game.phase == GamePhase.REVIEW

        two_player_game.close_review()
        assert two_player_game.phase == GamePhase.SUMMARY

    def test_reset_clears_results(self, two_player_game, clock):
        play_turn(two_player_game, clock, wrong=2)
        play_turn(two_player_game, clock)

        two_player_game.reset()

        assert two_player_game.phase == GamePhase.SETUP
        assert two_player_game.pool == []
        assert all(p.score == 0 and p.elapsed_seconds == 0 for p in two_player_game.players)

    def test_reset_then_new_pool(self, two_player_game, clock):
        play_turn(two_player_game, clock)
        play_turn(two_player_game, clock)
        two_player_game.reset()

        new_pool = make_pool(20)
        two_player_game.load_pool(new_pool)

        assert two_player_game.phase == GamePhase.INTERMISSION
        assert two_player_game.pool == new_pool


class TestScoring:
    """Tests for scores and time penalties."""

    def test_correct_answer_increments_score(self, two_player_game):
        two_player_game.start_turn()
        outcome = two_player_game.submit_answer("right")

        assert outcome.is_correct is True
        assert two_player_game.players[0].score == 1
        assert two_player_game.wrong_answers_this_turn == 0

    def test_wrong_answer_counts_penalty_not_score(self, two_player_game):
        two_player_game.start_turn()
        outcome = two_player_game.submit_answer("wrong")

        assert outcome.is_correct is False
        assert outcome.correct_answer == "right"
        assert two_player_game.players[0].score == 0
        assert two_player_game.wrong_answers_this_turn == 1

    def test_resubmission_is_ignored(self, two_player_game):
        """Only the first answer to a question counts."""
        two_player_game.start_turn()
        two_player_game.submit_answer("wrong")

        assert two_player_game.submit_answer("right") is None
        assert two_player_game.players[0].score == 0
        assert two_player_game.wrong_answers_this_turn == 1
        assert two_player_game.selected_answer == "wrong"

    def test_elapsed_time_includes_penalty(self, two_player_game, clock):
        """Turn time is wall time plus 10 seconds per wrong answer."""
        play_turn(two_player_game, clock, wrong=3, seconds=42)

        player = two_player_game.players[0]
        assert player.score == 7
        assert player.elapsed_seconds == pytest.approx(42 + 3 * WRONG_ANSWER_PENALTY_SECONDS)

    def test_penalty_counter_resets_each_turn(self, two_player_game, clock):
        play_turn(two_player_game, clock, wrong=4, seconds=10)
        play_turn(two_player_game, clock, wrong=0, seconds=10)

        assert two_player_game.players[0].elapsed_seconds == pytest.approx(50)
        assert two_player_game.players[1].elapsed_seconds == pytest.approx(10)


class TestSummary:
    """Tests for ranking and review."""

    def test_ranking_by_score_then_time(self, clock):
        scheduler = TurnScheduler(default_players(3), clock=clock)
        scheduler.load_pool(make_pool(30))

        play_turn(scheduler, clock, wrong=1, seconds=20)   # 9 correct, 30s
        play_turn(scheduler, clock, wrong=0, seconds=50)   # 10 correct, 50s
        play_turn(scheduler, clock, wrong=1, seconds=5)    # 9 correct, 15s

        ranking = scheduler.ranking()

        assert [p.id for p in ranking] == [1, 2, 0]

    def test_ranking_skips_players_without_time(self, two_player_game, clock):
        """Players who never finished a turn are left out."""
        play_turn(two_player_game, clock, seconds=10)
        two_player_game.start_turn()
        two_player_game.finish_early()

        assert [p.id for p in two_player_game.ranking()] == [0]

    def test_review_words_distinct_and_sorted(self, clock):
        headwords = ["zubi", "azkar", "mendi", "azkar"] + [f"hitz{i}" for i in range(6)]
        scheduler = TurnScheduler(default_players(1), clock=clock)
        scheduler.load_pool(make_pool(10, headwords=headwords))

        words = [entry.headword for entry in scheduler.review_words()]

        assert words == sorted(set(headwords))

    def test_rename_player_only_in_setup(self, clock):
        scheduler = TurnScheduler(default_players(2), clock=clock)
        scheduler.rename_player(1, "Miren")
        assert scheduler.players[1].name == "Miren"

        scheduler.load_pool(make_pool(20))
        with pytest.raises(GameStateError):
            scheduler.rename_player(0, "Jon")

    def test_default_player_names(self):
        assert [p.name for p in default_players(3)] == ["Player 1", "Player 2", "Player 3"]

    def test_requires_players(self):
        with pytest.raises(ValueError):
            TurnScheduler([])

    def test_state_reveals_answer_only_after_answering(self, two_player_game):
        two_player_game.start_turn()
        assert "correct_answer" not in two_player_game.state()["question"]

        two_player_game.submit_answer("wrong")
        state = two_player_game.state()

        assert state["is_answered"] is True
        assert state["question"]["correct_answer"] == "right"

    def test_player_to_dict(self):
        player = Player(id=0, name="Ane", score=3, elapsed_seconds=12.3456)
        assert player.to_dict() == {"id": 0, "name": "Ane", "score": 3, "elapsed_seconds": 12.35}

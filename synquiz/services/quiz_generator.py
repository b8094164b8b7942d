"""Question pool generation: entry sampling, answer choice and distractors."""
import logging
import random
from typing import List, Mapping, Optional, Sequence
from synquiz.constants import DISTRACTOR_COUNT
from synquiz.services.distractors import select_distractors
from synquiz.services.sampling import choose_sampler
from synquiz.services.words import FailureStat, Question, WordEntry

logger = logging.getLogger(__name__)


class EmptyVocabularyError(ValueError):
    """No word entries were available for the requested level."""


class InvalidWordEntryError(ValueError):
    """A word entry without synonyms reached the generator."""


def build_question(
    entry: WordEntry,
    vocabulary: Sequence[WordEntry],
    rng=None,
    reserve: Sequence[WordEntry] = ()
) -> Question:
    """
    Build one question about ``entry``.

    Args:
        entry: Source entry (must have at least one synonym)
        vocabulary: Entries distractors are drawn from
        rng: Random source (default: module-level random)
        reserve: Extra entries used when the level is short of distractors

    Returns:
        Question with the correct answer and distractors in shuffled order
    """
    rng = rng or random
    if not entry.is_playable:
        raise InvalidWordEntryError(f"Word entry {entry.id!r} ({entry.headword!r}) has no synonyms")

    correct_answer = rng.choice(entry.synonyms)
    distractors = select_distractors(entry, vocabulary, count=DISTRACTOR_COUNT, rng=rng, reserve=reserve)

    options = [correct_answer] + distractors
    rng.shuffle(options)

    return Question(source=entry, correct_answer=correct_answer, options=options)


def generate_question_pool(
    needed: int,
    vocabulary: Sequence[WordEntry],
    stats: Optional[Mapping[str, FailureStat]] = None,
    rng: Optional[random.Random] = None,
    sampler=None,
    reserve: Sequence[WordEntry] = ()
) -> List[Question]:
    """
    Generate ``needed`` questions from ``vocabulary``.

    Process:
    1. Validate the vocabulary (non-empty, every entry playable)
    2. Pick entries with the sampler (failure-weighted if stats are given,
       uniform cycle otherwise)
    3. Build a question per picked entry

    Args:
        needed: Number of questions (> 0)
        vocabulary: Entries of the level being played
        stats: Optional FailureStat mapping keyed by entry id
        rng: Random source; pass a seeded random.Random for reproducible pools
        sampler: Strategy override with a fill_pool(pool, needed, rng) method
        reserve: Extra entries used when the level is short of distractors

    Returns:
        List of exactly ``needed`` Question objects

    Raises:
        ValueError: needed is not positive
        EmptyVocabularyError: vocabulary is empty
        InvalidWordEntryError: an entry has no synonyms
    """
    if needed <= 0:
        raise ValueError(f"needed must be positive, got {needed}")
    if not vocabulary:
        raise EmptyVocabularyError("No words found for this level.")

    for entry in vocabulary:
        if not entry.is_playable:
            raise InvalidWordEntryError(f"Word entry {entry.id!r} ({entry.headword!r}) has no synonyms")

    rng = rng or random
    sampler = sampler or choose_sampler(stats)
    picked = sampler.fill_pool(vocabulary, needed, rng)

    logger.debug(
        f"Generating {needed} questions from {len(vocabulary)} entries "
        f"using {getattr(sampler, 'name', type(sampler).__name__)} sampling"
    )

    return [build_question(entry, vocabulary, rng=rng, reserve=reserve) for entry in picked]

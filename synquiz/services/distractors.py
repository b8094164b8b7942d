"""Wrong-answer selection for multiple choice questions."""
import random
from typing import List, Optional, Sequence
from synquiz.constants import DISTRACTOR_COUNT, SAME_CATEGORY_MIN_CANDIDATES
from synquiz.services.classifier import classify
from synquiz.services.words import WordEntry


def candidate_universe(vocabulary: Sequence[WordEntry]) -> List[str]:
    """Every headword and synonym in the vocabulary, duplicates included."""
    universe = []
    for entry in vocabulary:
        universe.append(entry.headword)
        universe.extend(entry.synonyms)
    return universe


def _excluding_target(universe: Sequence[str], target: WordEntry) -> List[str]:
    excluded = {target.headword, *target.synonyms}
    return [word for word in universe if word not in excluded]


def select_distractors(
    target: WordEntry,
    vocabulary: Sequence[WordEntry],
    count: int = DISTRACTOR_COUNT,
    rng: Optional[random.Random] = None,
    reserve: Sequence[WordEntry] = ()
) -> List[str]:
    """
    Select distractor words for a question about ``target``.

    Strategy:
    - Candidates are all headwords and synonyms of ``vocabulary`` except the
      target's own headword and synonyms
    - If at least SAME_CATEGORY_MIN_CANDIDATES distinct candidates share the
      target headword's category, only those are used
    - Candidates are deduplicated, shuffled and the first ``count`` taken
    - If fewer than ``count`` remain, words from ``reserve`` (usually other
      difficulty levels) top the list up; without a reserve the result is
      simply shorter

    Args:
        target: Entry the question is about
        vocabulary: Entries of the level being played
        count: Number of distractors wanted (default 3)
        rng: Random source (default: module-level random)
        reserve: Extra entries used only when the level runs short

    Returns:
        List of at most ``count`` distinct distractor strings
    """
    rng = rng or random
    candidates = _excluding_target(candidate_universe(vocabulary), target)

    target_category = classify(target.headword)
    same_category = [word for word in candidates if classify(word) == target_category]
    if len(set(same_category)) >= SAME_CATEGORY_MIN_CANDIDATES:
        candidates = same_category

    # dict.fromkeys keeps first-seen order so seeded runs are reproducible
    distinct = list(dict.fromkeys(candidates))
    rng.shuffle(distinct)
    distractors = distinct[:count]

    if len(distractors) < count and reserve:
        taken = set(distractors)
        extra = [
            word for word in dict.fromkeys(_excluding_target(candidate_universe(reserve), target))
            if word not in taken
        ]
        rng.shuffle(extra)
        distractors.extend(extra[:count - len(distractors)])

    return distractors

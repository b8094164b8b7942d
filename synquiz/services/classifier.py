"""Suffix-based word category heuristic used to group plausible distractors."""
from enum import Enum
from typing import Tuple


class WordCategory(str, Enum):
    """Coarse morphological category of a Basque word."""
    VERB = "verb"
    PLURAL = "plural"
    ABSTRACT = "abstract"
    OTHER = "other"


# Checked in order, first match wins
CATEGORY_SUFFIXES: Tuple[Tuple[WordCategory, Tuple[str, ...]], ...] = (
    (WordCategory.VERB, ("tu", "du", "ten", "tzen")),
    (WordCategory.PLURAL, ("ak", "ek")),
    # "tasuna" is the determinate form of "tasun"
    (WordCategory.ABSTRACT, ("era", "ura", "tasun", "tasuna")),
)


def classify(word: str) -> WordCategory:
    """
    Classify a word by its suffix.

    Matching is case-insensitive and ignores surrounding whitespace. The
    result is only a heuristic for grouping distractors, not a grammatical
    analysis.

    Args:
        word: Surface form of the word

    Returns:
        WordCategory of the first matching suffix rule, OTHER if none match
    """
    normalized = word.strip().lower()
    for category, suffixes in CATEGORY_SUFFIXES:
        if normalized.endswith(suffixes):
            return category
    return WordCategory.OTHER

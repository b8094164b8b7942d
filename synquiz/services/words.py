"""Immutable value types shared by the quiz pool generator and its callers."""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class WordEntry:
    """Headword with its ordered synonym set."""
    id: str
    headword: str
    synonyms: Tuple[str, ...]
    level: Optional[int] = None

    def __post_init__(self):
        # Accept any sequence but store a tuple so entries stay hashable
        object.__setattr__(self, "synonyms", tuple(self.synonyms))

    @property
    def is_playable(self) -> bool:
        """True if the entry has at least one synonym to ask for."""
        return len(self.synonyms) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "headword": self.headword,
            "synonyms": list(self.synonyms),
            "level": self.level,
        }


@dataclass(frozen=True)
class FailureStat:
    """How often the current player has missed one word at one level."""
    entry_key: str
    wrong_count: int = 0
    attempt_count: int = 0

    @property
    def wrong_rate(self) -> float:
        if self.attempt_count <= 0:
            return 0.0
        return self.wrong_count / self.attempt_count


@dataclass(frozen=True)
class Question:
    """One multiple choice question about ``source``."""
    source: WordEntry
    correct_answer: str
    options: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "options", tuple(self.options))

    def is_correct(self, answer: str) -> bool:
        return answer == self.correct_answer

    def to_dict(self, reveal: bool = False) -> Dict[str, Any]:
        """
        Format the question for the frontend.

        Args:
            reveal: Include the correct answer and the full synonym set

        Returns:
            Dictionary with prompt and options
        """
        data = {
            "headword": self.source.headword,
            "options": list(self.options),
        }
        if reveal:
            data["correct_answer"] = self.correct_answer
            data["synonyms"] = list(self.source.synonyms)
        return data

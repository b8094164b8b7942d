"""Word store access: per-level vocabulary, the session cache and search."""
import logging
import threading
from typing import Dict, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from synquiz.constants import DIFFICULTY_LEVELS, SEARCH_MIN_LENGTH, SEARCH_RESULT_LIMIT
from synquiz.db.models import SynWord
from synquiz.services.words import WordEntry

logger = logging.getLogger(__name__)


def to_entry(word: SynWord) -> WordEntry:
    """Convert a SynWord row to an immutable WordEntry."""
    synonyms = word.synonyms if isinstance(word.synonyms, list) else []
    return WordEntry(
        id=word.source_id,
        headword=word.headword,
        synonyms=tuple(s for s in synonyms if s),
        level=word.level,
    )


def validate_level(level: int) -> int:
    if level not in DIFFICULTY_LEVELS:
        raise ValueError(f"Unknown difficulty level {level}")
    return level


class SqlVocabularyStore:
    """Vocabulary lookups against the syn_words table."""

    def __init__(self, db: Session):
        self.db = db

    def fetch_vocabulary(self, level: int) -> List[WordEntry]:
        """
        Get the active, playable entries of one level.

        Store failures are logged and reported as an empty vocabulary.

        Args:
            level: Difficulty level

        Returns:
            List of WordEntry objects with at least one synonym each
        """
        try:
            rows = self.db.query(SynWord).filter(
                SynWord.level == level,
                SynWord.active.is_(True)
            ).order_by(SynWord.id).all()
        except SQLAlchemyError as e:
            logger.warning(f"Vocabulary fetch failed for level {level}: {e}", extra={"difficulty": level})
            return []

        entries = [to_entry(row) for row in rows]
        playable = [entry for entry in entries if entry.is_playable]
        if len(playable) < len(entries):
            logger.warning(
                f"Dropped {len(entries) - len(playable)} entries without synonyms at level {level}",
                extra={"difficulty": level}
            )
        return playable


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so ``%`` and ``_`` match literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_words(db: Session, term: str, limit: int = SEARCH_RESULT_LIMIT) -> List[WordEntry]:
    """
    Find active words whose headword or synonyms contain ``term``.

    Args:
        db: Database session
        term: Search text (case-insensitive)
        limit: Maximum number of results

    Returns:
        Matching entries of any level; empty for terms under SEARCH_MIN_LENGTH
    """
    term = (term or "").strip().lower()
    if len(term) < SEARCH_MIN_LENGTH:
        return []

    try:
        rows = db.query(SynWord).filter(
            SynWord.search_text.ilike(f"%{escape_like(term)}%", escape="\\"),
            SynWord.active.is_(True)
        ).order_by(SynWord.level, SynWord.headword).limit(limit).all()
    except SQLAlchemyError as e:
        logger.warning(f"Word search failed for {term!r}: {e}")
        return []

    return [to_entry(row) for row in rows]


class VocabularyCache:
    """
    Session-lifetime vocabulary per level, fetched at most once per level.

    Empty fetch results are not cached, so a level whose fetch failed is
    retried on the next ``ensure``.
    """

    def __init__(self):
        self._by_level: Dict[int, List[WordEntry]] = {}
        self._lock = threading.Lock()

    def ensure(self, level: int, store) -> List[WordEntry]:
        """
        Return the cached vocabulary for ``level``, fetching it if needed.

        Args:
            level: Difficulty level
            store: Object with fetch_vocabulary(level)

        Returns:
            List of WordEntry objects (possibly empty)

        Raises:
            ValueError: level is not a known difficulty level
        """
        validate_level(level)
        with self._lock:
            cached = self._by_level.get(level)
            if cached:
                logger.debug(f"Vocabulary cache hit for level {level}", extra={"difficulty": level})
                return cached

            entries = list(store.fetch_vocabulary(level))
            logger.info(f"Fetched {len(entries)} words for level {level}", extra={"difficulty": level})
            if entries:
                self._by_level[level] = entries
            return entries

    def invalidate(self, level: Optional[int] = None) -> None:
        """Forget one level, or every level when ``level`` is None."""
        with self._lock:
            if level is None:
                self._by_level.clear()
            else:
                self._by_level.pop(level, None)

    def cached_levels(self) -> List[int]:
        return sorted(self._by_level)

    def reserve_for(self, level: int) -> List[WordEntry]:
        """Entries of every other level already in the cache."""
        reserve = []
        for other_level in self.cached_levels():
            if other_level != level:
                reserve.extend(self._by_level[other_level])
        return reserve


vocabulary_cache = VocabularyCache()
"""Process-wide cache used by the HTTP layer."""

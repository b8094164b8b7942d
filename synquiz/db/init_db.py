"""Database initialization and sample vocabulary seeding."""
import logging
from typing import Dict, List
from sqlalchemy.orm import Session
from synquiz.db.database import engine, SessionLocal, Base
from synquiz.db.models import SynWord
from synquiz.config import settings

logger = logging.getLogger(__name__)

# Basque headwords with their synonym sets, keyed by difficulty level
SAMPLE_VOCABULARY: Dict[int, List[Dict]] = {
    1: [
        {"headword": "azkar", "synonyms": ["bizkor", "arin", "laster"]},
        {"headword": "handia", "synonyms": ["haundia", "zabala"]},
        {"headword": "txikia", "synonyms": ["ttipia", "koxkorra"]},
        {"headword": "polita", "synonyms": ["ederra", "dotorea"]},
        {"headword": "etxea", "synonyms": ["egoitza", "bizilekua"]},
        {"headword": "hasi", "synonyms": ["abiatu", "ekin"]},
        {"headword": "bukatu", "synonyms": ["amaitu", "akabatu"]},
        {"headword": "ikusi", "synonyms": ["begiratu", "so egin"]},
        {"headword": "hitz egin", "synonyms": ["mintzatu", "berba egin"]},
        {"headword": "lagunak", "synonyms": ["adiskideak", "kideak"]},
        {"headword": "zoriontsu", "synonyms": ["pozik", "alai"]},
        {"headword": "beldurra", "synonyms": ["ikara", "izua"]},
    ],
    2: [
        {"headword": "dantzatu", "synonyms": ["dantza egin", "jauzi egin"]},
        {"headword": "ulertu", "synonyms": ["konprenitu", "aditu"]},
        {"headword": "aurkitu", "synonyms": ["topatu", "idoro"]},
        {"headword": "itzuli", "synonyms": ["bueltatu", "biratu"]},
        {"headword": "mendiak", "synonyms": ["menditzarrak", "gailurrak"]},
        {"headword": "umeak", "synonyms": ["haurrak", "txikiak"]},
        {"headword": "ohitura", "synonyms": ["azturak", "usadioa"]},
        {"headword": "askatasun", "synonyms": ["libertate", "burujabetza"]},
        {"headword": "garbi", "synonyms": ["argi", "txukun"]},
        {"headword": "nekatuta", "synonyms": ["akituta", "leher eginda"]},
        {"headword": "gaitza", "synonyms": ["zaila", "nekeza"]},
        {"headword": "iritzi", "synonyms": ["uste", "ikuspegi"]},
    ],
    3: [
        {"headword": "herritasuna", "synonyms": ["nazionalitatea", "hiritartasuna"]},
        {"headword": "adiskidetasun", "synonyms": ["laguntasun", "kidetasun"]},
        {"headword": "egitura", "synonyms": ["antolaketa", "eraikuntza"]},
        {"headword": "ahalegindu", "synonyms": ["saiatu", "esfortzatu"]},
        {"headword": "iraun", "synonyms": ["jarraitu", "luzatu"]},
        {"headword": "onartu", "synonyms": ["ametitu", "baieztatu"]},
        {"headword": "ezkutatu", "synonyms": ["gorde", "estali"]},
        {"headword": "bihozgabe", "synonyms": ["krudel", "anker"]},
        {"headword": "oparoa", "synonyms": ["ugaria", "emankorra"]},
        {"headword": "arduratsu", "synonyms": ["kezkati", "zintzo"]},
        {"headword": "ezaugarriak", "synonyms": ["bereizgarriak", "tasunak"]},
        {"headword": "aldakor", "synonyms": ["aldagarri", "ezegonkor"]},
    ],
    4: [
        {"headword": "gorabehera", "synonyms": ["gertakari", "ezbehar"]},
        {"headword": "ausardia", "synonyms": ["kemena", "adorea"]},
        {"headword": "zeharkatu", "synonyms": ["igaro", "pasatu"]},
        {"headword": "irabazten", "synonyms": ["lortzen", "eskuratzen"]},
        {"headword": "ikertzen", "synonyms": ["aztertzen", "arakatzen"]},
        {"headword": "zentzudun", "synonyms": ["zuhur", "burutsu"]},
        {"headword": "urrikalmendu", "synonyms": ["erruki", "gupida"]},
        {"headword": "eskuzabaltasun", "synonyms": ["emankortasun", "zabaltasun"]},
        {"headword": "mehatxu", "synonyms": ["ikaragarri", "arrisku"]},
        {"headword": "kutsadura", "synonyms": ["zikinkeria", "lohikeria"]},
        {"headword": "ezinegon", "synonyms": ["larritasun", "egonezin"]},
        {"headword": "zehaztasun", "synonyms": ["doitasun", "xehetasun"]},
    ],
}


def build_search_text(headword: str, synonyms: List[str]) -> str:
    """Lower-cased text searched by the word search endpoint."""
    return " ".join([headword] + list(synonyms)).lower()


def make_word(source_id: str, headword: str, synonyms: List[str], level: int, active: bool = True) -> SynWord:
    """Build a SynWord row with its search text filled in."""
    return SynWord(
        source_id=source_id,
        headword=headword,
        synonyms=list(synonyms),
        level=level,
        active=active,
        search_text=build_search_text(headword, synonyms),
    )


def seed_words(db: Session) -> int:
    """Seed the word table with the sample vocabulary.

    Returns:
        Number of rows inserted (0 if the table was already populated)
    """
    existing_count = db.query(SynWord).count()
    if existing_count > 0:
        logger.info(f"Word table already contains {existing_count} entries. Skipping seed.")
        return 0

    inserted = 0
    for level, entries in SAMPLE_VOCABULARY.items():
        for position, entry in enumerate(entries, start=1):
            db.add(make_word(f"L{level}-{position:03d}", entry["headword"], entry["synonyms"], level))
            inserted += 1

    db.commit()
    logger.info(f"Seeded {inserted} sample words across {len(SAMPLE_VOCABULARY)} levels.")
    return inserted


def init_db() -> None:
    """
    Initialize database: create tables and seed the sample vocabulary.

    Safe to call multiple times - all operations are idempotent.
    """
    logger.info("Initializing database...")

    Base.metadata.create_all(bind=engine)
    logger.info("Tables created/verified successfully.")

    if not settings.SEED_SAMPLE_VOCABULARY:
        logger.info("Sample vocabulary seeding disabled.")
        return

    db = SessionLocal()
    try:
        seed_words(db)
        logger.info("Database initialization complete.")
    except Exception as e:
        logger.error(f"Error during database initialization: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    init_db()

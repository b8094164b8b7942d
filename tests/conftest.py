"""Pytest fixtures for testing."""
import os

# Keep the module-level engine off the filesystem
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import random
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from synquiz.db.database import Base
from synquiz.db.models import User
from synquiz.db.init_db import SAMPLE_VOCABULARY, seed_words
from synquiz.services.words import WordEntry


class FakeClock:
    """Manually advanced replacement for time.monotonic."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="function")
def test_db():
    """Create a test database seeded with the sample vocabulary."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(engine)

    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    db = SessionLocal()
    seed_words(db)

    yield db

    db.close()


@pytest.fixture
def test_user(test_db):
    """Create a test user."""
    user = User(id="test_user_123")
    test_db.add(user)
    test_db.commit()
    return user


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def level_one_vocabulary():
    """Level 1 sample entries as WordEntry objects."""
    return [
        WordEntry(id=f"L1-{i:03d}", headword=item["headword"], synonyms=item["synonyms"], level=1)
        for i, item in enumerate(SAMPLE_VOCABULARY[1], start=1)
    ]

"""SQLAlchemy models backing the word store and the answer/run logs."""
from datetime import datetime
from sqlalchemy import Column, Integer, Text, DateTime, Float, Boolean, JSON, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship
from synquiz.db.database import Base


class User(Base):
    """Anonymous player tracked by the syn_uid cookie."""
    __tablename__ = "users"

    id = Column(Text, primary_key=True)  # syn_<uuid4>
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_active_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    answer_records = relationship("AnswerRecord", back_populates="user", cascade="all, delete-orphan")
    game_runs = relationship("GameRun", back_populates="user", cascade="all, delete-orphan")


class SynWord(Base):
    """Headword with its synonym set at one difficulty level."""
    __tablename__ = "syn_words"

    id = Column(Integer, primary_key=True, autoincrement=True)
    source_id = Column(Text, unique=True, nullable=False)  # e.g., "L1-001"
    headword = Column(Text, nullable=False)  # e.g., "azkar"
    synonyms = Column(JSON, nullable=False, default=list)  # e.g., ["bizkor", "arin"]
    level = Column(Integer, CheckConstraint("level >= 1 AND level <= 4"), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    search_text = Column(Text, nullable=False, default="")  # lower-cased headword + synonyms

    __table_args__ = (
        Index('idx_words_level_active', 'level', 'active'),
    )


class AnswerRecord(Base):
    """One locked-in answer of an identified player."""
    __tablename__ = "answer_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Text, ForeignKey("users.id"), nullable=False)
    word_id = Column(Text, nullable=False)  # SynWord.source_id
    level = Column(Integer, nullable=False)
    is_correct = Column(Integer, nullable=False, default=0)  # 0 or 1 (SQLite boolean)
    answered_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('idx_answers_user_word', 'user_id', 'word_id', 'level'),
    )

    user = relationship("User", back_populates="answer_records")


class GameRun(Base):
    """Summary of a finished solo turn."""
    __tablename__ = "game_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Text, ForeignKey("users.id"), nullable=False)
    played_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    difficulty = Column(Integer, nullable=False)
    total = Column(Integer, nullable=False)
    correct = Column(Integer, nullable=False, default=0)
    wrong = Column(Integer, nullable=False, default=0)
    time_seconds = Column(Float, nullable=False, default=0.0)

    __table_args__ = (
        Index('idx_runs_user_played', 'user_id', 'played_at'),
    )

    user = relationship("User", back_populates="game_runs")

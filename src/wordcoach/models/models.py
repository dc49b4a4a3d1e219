"""Database models for the persistence layer."""
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from wordcoach.models.base import Base, TimestampMixin


class Word(Base, TimestampMixin):
    """Word model."""

    __tablename__ = "words"

    id = Column(String(64), primary_key=True)
    spelling = Column(String, nullable=False)
    translation = Column(String, nullable=False)
    phonetic = Column(String)
    syllable_count = Column(Integer, nullable=False, default=0)

    # Relationships
    progress = relationship("UserWordProgress", back_populates="word")


class LearningMode(Base, TimestampMixin):
    """Learning mode model."""

    __tablename__ = "learning_modes"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    word_count = Column(Integer, nullable=False)
    duration_range = Column(String)  # e.g. "10-15 min"


class ReviewStrategy(Base, TimestampMixin):
    """Review strategy reference data."""

    __tablename__ = "review_strategies"

    id = Column(String(64), primary_key=True)
    name = Column(String, nullable=False, default="")
    applicable_condition = Column(String)
    interval_rule = Column(String, nullable=False, default="")  # e.g. "1h,3h,1d"


class UserWordProgress(Base, TimestampMixin):
    """Per user and word scheduling state."""

    __tablename__ = "user_word_progress"
    __table_args__ = (UniqueConstraint("user_id", "word_id", name="uq_progress_user_word"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    word_id = Column(String(64), ForeignKey("words.id"), nullable=False)
    proficiency_level = Column(Integer, nullable=False, default=0)  # 0-4
    is_long_difficult = Column(Boolean, nullable=False, default=False)
    strategy_id = Column(String(64), nullable=False)
    start_date = Column(DateTime(timezone=True))
    last_review_date = Column(DateTime(timezone=True))
    reviewed_times = Column(Integer, nullable=False, default=0)
    next_review_date = Column(DateTime(timezone=True), index=True)

    # Relationships
    word = relationship("Word", back_populates="progress")


class UserWordTestHistory(Base, TimestampMixin):
    """Append-only log of assessment results."""

    __tablename__ = "user_word_test_history"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    word_id = Column(String(64), nullable=False, index=True)
    phase = Column(Integer, nullable=False)  # 1=pre-test, 3=post-test
    test_date = Column(DateTime(timezone=True), nullable=False)
    test_level = Column(Integer, nullable=False)


class DailyLearningSession(Base, TimestampMixin):
    """One session per user per day."""

    __tablename__ = "daily_learning_sessions"
    __table_args__ = (UniqueConstraint("user_id", "session_date", name="uq_session_user_date"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    session_date = Column(String(10), nullable=False)  # YYYY-MM-DD
    mode_id = Column(Integer, ForeignKey("learning_modes.id"), nullable=False)
    status = Column(Integer, nullable=False, default=0)
    # Word id lists are stored as JSON arrays
    pre_test_word_ids = Column(Text, nullable=False, default="[]")
    learning_word_ids = Column(Text, nullable=False, default="[]")
    post_test_word_ids = Column(Text, nullable=False, default="[]")
    pre_test_progress = Column(String)
    learning_progress = Column(String)
    post_test_progress = Column(String)


class ReviewScheduleLog(Base, TimestampMixin):
    """Audit trail of scheduling decisions."""

    __tablename__ = "review_schedule_logs"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    word_id = Column(String(64), nullable=False)
    review_time = Column(DateTime(timezone=True), nullable=False)
    schedule_days = Column(Integer, nullable=False)
    next_review_time = Column(DateTime(timezone=True), nullable=False)
    strategy_id = Column(String(64), nullable=False)
    review_log = Column(Text)  # JSON details

"""Interfaces of the persistence collaborators.

The core only talks to these; ``sql_stores`` provides SQLAlchemy-backed
implementations and tests substitute mocks.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from wordcoach.models.progress_models import (
    DailySession,
    LearningMode,
    ReviewStrategy,
    ScheduleLogEntry,
    TestHistoryEntry,
    WordEntry,
    WordProgress,
)


class ProgressStore(ABC):
    """Read/write ``WordProgress`` by (user, word)."""

    @abstractmethod
    def get_progress(self, user_id: str, word_id: str) -> Optional[WordProgress]:
        """Return the record, or None when the user never saw the word."""

    @abstractmethod
    def list_progress(self, user_id: str) -> List[WordProgress]:
        """Return all records of a user in storage order."""

    @abstractmethod
    def save_progress(self, progress: WordProgress) -> WordProgress:
        """Insert or replace the record for (user, word)."""


class StrategyStore(ABC):
    """Reference data of review strategies."""

    @abstractmethod
    def get_strategy(self, strategy_id: str) -> ReviewStrategy:
        """Return the strategy or raise ``NotFoundError``."""

    @abstractmethod
    def save_strategy(self, strategy: ReviewStrategy) -> ReviewStrategy:
        """Insert or replace a strategy."""


class TestHistoryStore(ABC):
    """Append-only assessment history."""
    __test__ = False  # not a pytest class

    @abstractmethod
    def append(self, entry: TestHistoryEntry) -> None:
        """Store one assessment result."""

    @abstractmethod
    def list_entries(self, user_id: str, word_id: str) -> List[TestHistoryEntry]:
        """Return the history of a word, oldest first."""

    def list_levels(self, user_id: str, word_id: str) -> List[int]:
        """Return the past test levels of a word, oldest first."""
        return [entry.test_level for entry in self.list_entries(user_id, word_id)]


class LearningModeStore(ABC):
    """Learning modes by id."""

    @abstractmethod
    def get_mode(self, mode_id: int) -> LearningMode:
        """Return the mode or raise ``NotFoundError``."""


class WordStore(ABC):
    """Catalogue of words."""

    @abstractmethod
    def get_word(self, word_id: str) -> WordEntry:
        """Return the word or raise ``NotFoundError``."""

    @abstractmethod
    def list_unseen_word_ids(self, user_id: str, limit: int) -> List[str]:
        """Return up to ``limit`` ids of words the user has no progress for."""


class SessionStore(ABC):
    """Daily learning sessions."""

    @abstractmethod
    def get_session(self, user_id: str, session_date: str) -> Optional[DailySession]:
        """Return the user's session for a date, if any."""

    @abstractmethod
    def create_session(self, session: DailySession) -> DailySession:
        """Persist a new session and return it with its id."""

    @abstractmethod
    def update_session(self, session: DailySession) -> DailySession:
        """Persist changes to an existing session."""


class ScheduleLogStore(ABC):
    """Audit trail of scheduling decisions."""

    @abstractmethod
    def append_log(self, entry: ScheduleLogEntry) -> None:
        """Store one scheduling decision."""

"""Value objects exchanged between the scheduler, the generator and the stores.

These are plain frozen dataclasses: services never mutate them, they return a
replacement built with ``dataclasses.replace``.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import List, Optional


class StrategyId(str, Enum):
    """Review strategies, from most to least frequent reviews."""
    DENSE = "strategy_dense"
    NORMAL = "strategy_normal"
    SPARSE = "strategy_sparse"


class TestPhase(IntEnum):
    """Phase of a daily session a test event belongs to."""
    __test__ = False  # not a pytest class

    PRE_TEST = 1
    POST_TEST = 3


class SessionStatus(IntEnum):
    """Status of a daily learning session, in lifecycle order."""
    NOT_STARTED = 0
    PRE_TEST_ACTIVE = 1
    LEARNING_ACTIVE = 2
    POST_TEST_ACTIVE = 3
    COMPLETE = 4


class SessionPhase(Enum):
    """Phases that carry a "k/n" progress counter."""
    PRE_TEST = "pre_test"
    LEARNING = "learning"
    POST_TEST = "post_test"


@dataclass(frozen=True)
class WordProgress:
    """Scheduling state of one word for one user."""
    user_id: str
    word_id: str
    proficiency_level: int = 0
    is_long_difficult: bool = False
    strategy_id: StrategyId = StrategyId.NORMAL
    start_date: Optional[datetime] = None
    last_review_date: Optional[datetime] = None
    reviewed_times: int = 0
    next_review_date: Optional[datetime] = None


@dataclass(frozen=True)
class WordEntry:
    """Catalogue data of a word needed by the services."""
    id: str
    spelling: str
    syllable_count: int = 0


@dataclass(frozen=True)
class ReviewStrategy:
    """Reference data: the interval table of a strategy."""
    id: str
    interval_rule: str
    name: str = ""


@dataclass(frozen=True)
class LearningMode:
    """A learning mode fixes how many words a day should cover."""
    id: int
    name: str
    word_count: int


@dataclass(frozen=True)
class TestHistoryEntry:
    """One finished assessment of a word."""
    __test__ = False  # not a pytest class

    user_id: str
    word_id: str
    phase: TestPhase
    test_date: datetime
    test_level: int


@dataclass(frozen=True)
class ScheduleLogEntry:
    """Audit record written every time a word is rescheduled."""
    user_id: str
    word_id: str
    review_time: datetime
    next_review_time: datetime
    schedule_days: int
    strategy_id: str
    reviewed_times: int
    proficiency_level: int


@dataclass(frozen=True)
class WordLists:
    """Word ids for the three phases of a day."""
    pre_test: List[str] = field(default_factory=list)
    learning: List[str] = field(default_factory=list)
    post_test: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class DailySession:
    """One user's learning session for one calendar day."""
    user_id: str
    session_date: str  # YYYY-MM-DD
    mode_id: int
    status: SessionStatus = SessionStatus.NOT_STARTED
    pre_test_word_ids: List[str] = field(default_factory=list)
    learning_word_ids: List[str] = field(default_factory=list)
    post_test_word_ids: List[str] = field(default_factory=list)
    pre_test_progress: Optional[str] = None
    learning_progress: Optional[str] = None
    post_test_progress: Optional[str] = None
    id: Optional[int] = None

    def word_ids_for(self, phase: SessionPhase) -> List[str]:
        """Return the word list of a phase."""
        return {
            SessionPhase.PRE_TEST: self.pre_test_word_ids,
            SessionPhase.LEARNING: self.learning_word_ids,
            SessionPhase.POST_TEST: self.post_test_word_ids,
        }[phase]

    def progress_for(self, phase: SessionPhase) -> Optional[str]:
        """Return the "k/n" progress string of a phase."""
        return {
            SessionPhase.PRE_TEST: self.pre_test_progress,
            SessionPhase.LEARNING: self.learning_progress,
            SessionPhase.POST_TEST: self.post_test_progress,
        }[phase]

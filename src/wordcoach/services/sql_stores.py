"""SQLAlchemy implementations of the store interfaces."""
import json
import logging
import math
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wordcoach.config import settings
from wordcoach.errors import NotFoundError, StoreError
from wordcoach.models.models import (
    DailyLearningSession,
    LearningMode as LearningModeModel,
    ReviewScheduleLog,
    ReviewStrategy as ReviewStrategyModel,
    UserWordProgress,
    UserWordTestHistory,
    Word,
)
from wordcoach.models.progress_models import (
    DailySession,
    LearningMode,
    ReviewStrategy,
    ScheduleLogEntry,
    SessionStatus,
    StrategyId,
    TestHistoryEntry,
    TestPhase,
    WordEntry,
    WordProgress,
)
from wordcoach.services.date_utils import as_utc
from wordcoach.services.stores import (
    LearningModeStore,
    ProgressStore,
    ScheduleLogStore,
    SessionStore,
    StrategyStore,
    TestHistoryStore,
    WordStore,
)

logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(db: Session, action: str) -> Iterator[None]:
    """Roll back and re-raise database failures as ``StoreError``."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Database error while trying to %s: %s", action, e)
        raise StoreError(f"Failed to {action}") from e


def _progress_from_row(row: UserWordProgress) -> WordProgress:
    return WordProgress(
        user_id=row.user_id,
        word_id=row.word_id,
        proficiency_level=row.proficiency_level,
        is_long_difficult=bool(row.is_long_difficult),
        strategy_id=StrategyId(row.strategy_id),
        start_date=as_utc(row.start_date),
        last_review_date=as_utc(row.last_review_date),
        reviewed_times=row.reviewed_times,
        next_review_date=as_utc(row.next_review_date),
    )


def _session_from_row(row: DailyLearningSession) -> DailySession:
    return DailySession(
        id=row.id,
        user_id=row.user_id,
        session_date=row.session_date,
        mode_id=row.mode_id,
        status=SessionStatus(row.status),
        pre_test_word_ids=json.loads(row.pre_test_word_ids or "[]"),
        learning_word_ids=json.loads(row.learning_word_ids or "[]"),
        post_test_word_ids=json.loads(row.post_test_word_ids or "[]"),
        pre_test_progress=row.pre_test_progress,
        learning_progress=row.learning_progress,
        post_test_progress=row.post_test_progress,
    )


class SqlProgressStore(ProgressStore):
    """Word progress backed by the ``user_word_progress`` table."""

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db

    def _get_row(self, user_id: str, word_id: str) -> Optional[UserWordProgress]:
        return (
            self.db.query(UserWordProgress)
            .filter(
                UserWordProgress.user_id == user_id,
                UserWordProgress.word_id == word_id,
            )
            .first()
        )

    def get_progress(self, user_id: str, word_id: str) -> Optional[WordProgress]:
        with _store_errors(self.db, f"load progress of word {word_id}"):
            row = self._get_row(user_id, word_id)
        return _progress_from_row(row) if row else None

    def list_progress(self, user_id: str) -> List[WordProgress]:
        with _store_errors(self.db, f"list progress of user {user_id}"):
            rows = (
                self.db.query(UserWordProgress)
                .filter(UserWordProgress.user_id == user_id)
                .order_by(UserWordProgress.id)
                .all()
            )
        return [_progress_from_row(row) for row in rows]

    def save_progress(self, progress: WordProgress) -> WordProgress:
        with _store_errors(self.db, f"save progress of word {progress.word_id}"):
            row = self._get_row(progress.user_id, progress.word_id)
            if row is None:
                row = UserWordProgress(user_id=progress.user_id, word_id=progress.word_id)
                self.db.add(row)
            row.proficiency_level = progress.proficiency_level
            row.is_long_difficult = progress.is_long_difficult
            row.strategy_id = StrategyId(progress.strategy_id).value
            row.start_date = progress.start_date
            row.last_review_date = progress.last_review_date
            row.reviewed_times = progress.reviewed_times
            row.next_review_date = progress.next_review_date
            self.db.commit()
            self.db.refresh(row)
        return _progress_from_row(row)


class SqlStrategyStore(StrategyStore):
    """Review strategies backed by the ``review_strategies`` table."""

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db

    def get_strategy(self, strategy_id: str) -> ReviewStrategy:
        with _store_errors(self.db, f"load strategy {strategy_id}"):
            row = self.db.query(ReviewStrategyModel).filter(ReviewStrategyModel.id == strategy_id).first()
        if not row:
            raise NotFoundError(f"Strategy {strategy_id} not found")
        return ReviewStrategy(id=row.id, interval_rule=row.interval_rule or "", name=row.name or "")

    def save_strategy(self, strategy: ReviewStrategy) -> ReviewStrategy:
        with _store_errors(self.db, f"save strategy {strategy.id}"):
            row = self.db.query(ReviewStrategyModel).filter(ReviewStrategyModel.id == strategy.id).first()
            if row is None:
                row = ReviewStrategyModel(id=strategy.id)
                self.db.add(row)
            row.name = strategy.name
            row.interval_rule = strategy.interval_rule
            self.db.commit()
        return strategy


class SqlTestHistoryStore(TestHistoryStore):
    """Assessment history backed by ``user_word_test_history``."""

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db

    def append(self, entry: TestHistoryEntry) -> None:
        with _store_errors(self.db, f"append test history of word {entry.word_id}"):
            self.db.add(
                UserWordTestHistory(
                    user_id=entry.user_id,
                    word_id=entry.word_id,
                    phase=int(entry.phase),
                    test_date=entry.test_date,
                    test_level=entry.test_level,
                )
            )
            self.db.commit()

    def list_entries(self, user_id: str, word_id: str) -> List[TestHistoryEntry]:
        with _store_errors(self.db, f"list test history of word {word_id}"):
            rows = (
                self.db.query(UserWordTestHistory)
                .filter(
                    UserWordTestHistory.user_id == user_id,
                    UserWordTestHistory.word_id == word_id,
                )
                .order_by(UserWordTestHistory.test_date, UserWordTestHistory.id)
                .all()
            )
        return [
            TestHistoryEntry(
                user_id=row.user_id,
                word_id=row.word_id,
                phase=TestPhase(row.phase),
                test_date=as_utc(row.test_date),
                test_level=row.test_level,
            )
            for row in rows
        ]


class SqlLearningModeStore(LearningModeStore):
    """Learning modes backed by ``learning_modes``."""

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db

    def get_mode(self, mode_id: int) -> LearningMode:
        with _store_errors(self.db, f"load learning mode {mode_id}"):
            row = self.db.query(LearningModeModel).filter(LearningModeModel.id == mode_id).first()
        if not row:
            raise NotFoundError(f"Learning mode {mode_id} not found")
        return LearningMode(id=row.id, name=row.name, word_count=row.word_count)


class SqlWordStore(WordStore):
    """Word catalogue backed by ``words``."""

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db

    def get_word(self, word_id: str) -> WordEntry:
        with _store_errors(self.db, f"load word {word_id}"):
            row = self.db.query(Word).filter(Word.id == word_id).first()
        if not row:
            raise NotFoundError(f"Word {word_id} not found")
        return WordEntry(id=row.id, spelling=row.spelling, syllable_count=row.syllable_count or 0)

    def list_unseen_word_ids(self, user_id: str, limit: int) -> List[str]:
        if limit <= 0:
            return []
        with _store_errors(self.db, f"list new words for user {user_id}"):
            seen_word_ids = select(UserWordProgress.word_id).where(UserWordProgress.user_id == user_id)
            rows = (
                self.db.query(Word.id)
                .filter(Word.id.not_in(seen_word_ids))
                .order_by(Word.created_at, Word.id)
                .limit(limit)
                .all()
            )
        return [row.id for row in rows]


class SqlSessionStore(SessionStore):
    """Daily sessions backed by ``daily_learning_sessions``."""

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db

    def get_session(self, user_id: str, session_date: str) -> Optional[DailySession]:
        with _store_errors(self.db, f"load session of user {user_id} on {session_date}"):
            row = (
                self.db.query(DailyLearningSession)
                .filter(
                    DailyLearningSession.user_id == user_id,
                    DailyLearningSession.session_date == session_date,
                )
                .first()
            )
        return _session_from_row(row) if row else None

    def _apply(self, row: DailyLearningSession, session: DailySession) -> None:
        row.mode_id = session.mode_id
        row.status = int(session.status)
        row.pre_test_word_ids = json.dumps(session.pre_test_word_ids)
        row.learning_word_ids = json.dumps(session.learning_word_ids)
        row.post_test_word_ids = json.dumps(session.post_test_word_ids)
        row.pre_test_progress = session.pre_test_progress
        row.learning_progress = session.learning_progress
        row.post_test_progress = session.post_test_progress

    def create_session(self, session: DailySession) -> DailySession:
        with _store_errors(self.db, f"create session of user {session.user_id}"):
            row = DailyLearningSession(user_id=session.user_id, session_date=session.session_date)
            self._apply(row, session)
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        return _session_from_row(row)

    def update_session(self, session: DailySession) -> DailySession:
        with _store_errors(self.db, f"update session {session.id}"):
            row = self.db.query(DailyLearningSession).filter(DailyLearningSession.id == session.id).first()
            if not row:
                raise NotFoundError(f"Session {session.id} not found")
            self._apply(row, session)
            self.db.commit()
            self.db.refresh(row)
        return _session_from_row(row)


class SqlScheduleLogStore(ScheduleLogStore):
    """Scheduling audit trail backed by ``review_schedule_logs``."""

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db

    def append_log(self, entry: ScheduleLogEntry) -> None:
        with _store_errors(self.db, f"log schedule of word {entry.word_id}"):
            self.db.add(
                ReviewScheduleLog(
                    user_id=entry.user_id,
                    word_id=entry.word_id,
                    review_time=entry.review_time,
                    schedule_days=entry.schedule_days,
                    next_review_time=entry.next_review_time,
                    strategy_id=entry.strategy_id,
                    review_log=json.dumps(
                        {
                            "reviewed_times": entry.reviewed_times,
                            "proficiency_level": entry.proficiency_level,
                            "interval_hours": math.ceil(
                                (entry.next_review_time - entry.review_time).total_seconds() / 3600
                            ),
                        }
                    ),
                )
            )
            self.db.commit()


def seed_reference_data(db: Session) -> None:
    """Insert the default review strategies and learning modes if missing."""
    strategy_names = {
        StrategyId.DENSE.value: "Dense",
        StrategyId.NORMAL.value: "Normal",
        StrategyId.SPARSE.value: "Sparse",
    }
    with _store_errors(db, "seed reference data"):
        for strategy_id, rule in settings.scheduling.interval_rules.items():
            if not db.query(ReviewStrategyModel).filter(ReviewStrategyModel.id == strategy_id).first():
                db.add(
                    ReviewStrategyModel(
                        id=strategy_id,
                        name=strategy_names.get(strategy_id, strategy_id),
                        interval_rule=rule,
                    )
                )
                logger.info("Seeded strategy %s: %s", strategy_id, rule)
        for mode_id, (name, word_count) in settings.learning.modes.items():
            if not db.query(LearningModeModel).filter(LearningModeModel.id == mode_id).first():
                db.add(LearningModeModel(id=mode_id, name=name, word_count=word_count))
                logger.info("Seeded learning mode %d: %s (%d words)", mode_id, name, word_count)
        db.commit()

"""Daily learning session lifecycle."""
import logging
from dataclasses import replace
from datetime import date
from typing import List, NamedTuple, Optional

from wordcoach.errors import SessionStateError
from wordcoach.models.progress_models import DailySession, SessionPhase, SessionStatus
from wordcoach.monitoring import sessions_created
from wordcoach.services.daily_word_list import DailyWordListGenerator
from wordcoach.services.date_utils import format_session_date, utc_now
from wordcoach.services.stores import SessionStore

logger = logging.getLogger(__name__)

PROGRESS_FIELDS = {
    SessionPhase.PRE_TEST: "pre_test_progress",
    SessionPhase.LEARNING: "learning_progress",
    SessionPhase.POST_TEST: "post_test_progress",
}


class PhaseProgress(NamedTuple):
    current: int
    total: int
    percentage: int


def parse_session_progress(progress: Optional[str]) -> PhaseProgress:
    """Parse a ``"k/n"`` counter; missing or malformed parts count as zero."""
    if not progress:
        return PhaseProgress(0, 0, 0)
    current_str, _, total_str = progress.partition("/")
    try:
        current = int(current_str)
    except ValueError:
        current = 0
    try:
        total = int(total_str)
    except ValueError:
        total = 0
    percentage = round(current / total * 100) if total > 0 else 0
    return PhaseProgress(current, total, percentage)


def format_session_progress(current: int, total: int) -> str:
    return f"{current}/{total}"


def is_phase_completed(session: DailySession, phase: SessionPhase) -> bool:
    progress = parse_session_progress(session.progress_for(phase))
    return progress.total > 0 and progress.current >= progress.total


def all_word_ids(session: DailySession) -> List[str]:
    """Every word of the session once, in first-appearance order."""
    return list(
        dict.fromkeys(session.pre_test_word_ids + session.learning_word_ids + session.post_test_word_ids)
    )


class SessionService:
    """Creates and advances daily learning sessions."""

    def __init__(self, session_store: SessionStore, generator: DailyWordListGenerator):
        """Initialize the service with the session store and list generator."""
        self.session_store = session_store
        self.generator = generator

    def get_todays_session(self, user_id: str, session_date: Optional[str] = None) -> Optional[DailySession]:
        session_date = session_date or format_session_date(utc_now().date())
        return self.session_store.get_session(user_id, session_date)

    def create_session(self, user_id: str, mode_id: int, today: Optional[date] = None) -> DailySession:
        """Generate today's word lists and persist a not-started session."""
        now = utc_now()
        session_date = format_session_date(today or now.date())
        lists = self.generator.generate(user_id, mode_id, now=now)
        if not lists.learning:
            logger.warning("Session for user %s on %s has no words", user_id, session_date)

        session = DailySession(
            user_id=user_id,
            session_date=session_date,
            mode_id=mode_id,
            status=SessionStatus.NOT_STARTED,
            pre_test_word_ids=lists.pre_test,
            learning_word_ids=lists.learning,
            post_test_word_ids=lists.post_test,
            pre_test_progress=format_session_progress(0, len(lists.pre_test)),
            learning_progress=format_session_progress(0, len(lists.learning)),
            post_test_progress=format_session_progress(0, len(lists.post_test)),
        )
        created = self.session_store.create_session(session)
        sessions_created.inc()
        logger.info(
            "Created session %s for user %s on %s (%d words)",
            created.id,
            user_id,
            session_date,
            len(created.learning_word_ids),
        )
        return created

    def get_or_create_todays_session(
        self, user_id: str, mode_id: int, today: Optional[date] = None
    ) -> DailySession:
        session_date = format_session_date(today or utc_now().date())
        existing = self.session_store.get_session(user_id, session_date)
        if existing is not None:
            return existing
        return self.create_session(user_id, mode_id, today=today)

    def update_phase_progress(self, session: DailySession, phase: SessionPhase, current: int) -> DailySession:
        """Store ``current/len(phase words)`` as the phase's progress."""
        total = len(session.word_ids_for(phase))
        current = max(0, min(current, total))
        updated = replace(session, **{PROGRESS_FIELDS[phase]: format_session_progress(current, total)})
        return self.session_store.update_session(updated)

    def advance_status(self, session: DailySession) -> DailySession:
        """Move the session to the next status of its lifecycle."""
        if session.status == SessionStatus.COMPLETE:
            raise SessionStateError(f"Session {session.id} is already complete")
        next_status = SessionStatus(session.status + 1)
        logger.info("Session %s: %s -> %s", session.id, session.status.name, next_status.name)
        return self.session_store.update_session(replace(session, status=next_status))

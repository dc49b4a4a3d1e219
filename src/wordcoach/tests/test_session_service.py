"""Tests for the daily session service."""
from datetime import date
from unittest.mock import Mock

import pytest
from sqlalchemy.orm import Session

from wordcoach.errors import SessionStateError
from wordcoach.models.progress_models import DailySession, SessionPhase, SessionStatus, WordLists
from wordcoach.services.daily_word_list import DailyWordListGenerator
from wordcoach.services.session_service import (
    PhaseProgress,
    SessionService,
    all_word_ids,
    is_phase_completed,
    parse_session_progress,
)
from wordcoach.services.sql_stores import (
    SqlLearningModeStore,
    SqlProgressStore,
    SqlSessionStore,
    SqlWordStore,
)

TODAY = date(2024, 1, 10)


@pytest.fixture
def service(seeded_db: Session, words: list) -> SessionService:
    generator = DailyWordListGenerator(
        SqlLearningModeStore(seeded_db), SqlProgressStore(seeded_db), SqlWordStore(seeded_db)
    )
    return SessionService(SqlSessionStore(seeded_db), generator)


def test_create_session(service: SessionService) -> None:
    """Test that a new user gets every catalogue word as new words."""
    session = service.create_session("u1", 1, today=TODAY)

    assert session.id is not None
    assert session.session_date == "2024-01-10"
    assert session.status is SessionStatus.NOT_STARTED
    assert session.pre_test_word_ids == []
    assert session.learning_word_ids == ["w1", "w2", "w3", "w4", "w5"]
    assert session.post_test_word_ids == session.learning_word_ids
    assert session.pre_test_progress == "0/0"
    assert session.learning_progress == "0/5"
    assert session.post_test_progress == "0/5"


def test_get_or_create_returns_existing(service: SessionService) -> None:
    first = service.get_or_create_todays_session("u1", 1, today=TODAY)
    second = service.get_or_create_todays_session("u1", 2, today=TODAY)

    assert second.id == first.id
    assert second.mode_id == 1
    assert service.get_todays_session("u1", "2024-01-10") == first
    assert service.get_todays_session("u2", "2024-01-10") is None


def test_update_phase_progress(service: SessionService) -> None:
    session = service.create_session("u1", 1, today=TODAY)

    updated = service.update_phase_progress(session, SessionPhase.LEARNING, 3)
    assert updated.learning_progress == "3/5"
    assert not is_phase_completed(updated, SessionPhase.LEARNING)

    updated = service.update_phase_progress(updated, SessionPhase.LEARNING, 9)
    assert updated.learning_progress == "5/5"
    assert is_phase_completed(updated, SessionPhase.LEARNING)

    updated = service.update_phase_progress(updated, SessionPhase.POST_TEST, -2)
    assert updated.post_test_progress == "0/5"


def test_advance_status_through_lifecycle(service: SessionService) -> None:
    """Test that a session walks every status once and stops at COMPLETE."""
    session = service.create_session("u1", 1, today=TODAY)
    seen = [session.status]
    while session.status is not SessionStatus.COMPLETE:
        session = service.advance_status(session)
        seen.append(session.status)

    assert seen == list(SessionStatus)
    with pytest.raises(SessionStateError):
        service.advance_status(session)


def test_create_session_with_empty_lists() -> None:
    """Test that a failed list generation still yields a session."""
    store = Mock()
    store.create_session.side_effect = lambda session: session
    generator = Mock(spec=DailyWordListGenerator)
    generator.generate.return_value = WordLists()

    session = SessionService(store, generator).create_session("u1", 1, today=TODAY)

    assert session.learning_word_ids == []
    assert session.learning_progress == "0/0"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("3/5", PhaseProgress(3, 5, 60)),
        ("2/3", PhaseProgress(2, 3, 67)),
        ("0/0", PhaseProgress(0, 0, 0)),
        ("x/4", PhaseProgress(0, 4, 0)),
        ("4", PhaseProgress(4, 0, 0)),
        ("", PhaseProgress(0, 0, 0)),
        (None, PhaseProgress(0, 0, 0)),
    ],
)
def test_parse_session_progress(text, expected: PhaseProgress) -> None:
    assert parse_session_progress(text) == expected


def test_all_word_ids() -> None:
    session = DailySession(
        user_id="u1",
        session_date="2024-01-10",
        mode_id=1,
        pre_test_word_ids=["w2"],
        learning_word_ids=["w2", "w1"],
        post_test_word_ids=["w2", "w1", "w3"],
    )
    assert all_word_ids(session) == ["w2", "w1", "w3"]


def test_phase_without_words_is_not_completed() -> None:
    session = DailySession(user_id="u1", session_date="2024-01-10", mode_id=1, pre_test_progress="0/0")
    assert not is_phase_completed(session, SessionPhase.PRE_TEST)

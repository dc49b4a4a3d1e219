"""Tests for the daily word list generator."""
from datetime import UTC, datetime, timedelta
from unittest.mock import Mock

import pytest

from wordcoach.errors import NotFoundError, StoreError
from wordcoach.models.progress_models import LearningMode, WordLists, WordProgress
from wordcoach.services.daily_word_list import DailyWordListGenerator
from wordcoach.services.stores import LearningModeStore, ProgressStore, WordStore

NOW = datetime(2024, 5, 20, 8, 0, tzinfo=UTC)


def progress(word_id: str, **kwargs) -> WordProgress:
    return WordProgress(user_id="u1", word_id=word_id, **kwargs)


def due(word_id: str) -> WordProgress:
    return progress(word_id, last_review_date=NOW - timedelta(days=2), next_review_date=NOW - timedelta(hours=1))


def not_due(word_id: str) -> WordProgress:
    return progress(word_id, last_review_date=NOW - timedelta(hours=3), next_review_date=NOW + timedelta(days=1))


@pytest.fixture
def mode_store() -> Mock:
    store = Mock(spec=LearningModeStore)
    store.get_mode.return_value = LearningMode(id=1, name="easy", word_count=3)
    return store


@pytest.fixture
def progress_store() -> Mock:
    store = Mock(spec=ProgressStore)
    store.list_progress.return_value = []
    return store


@pytest.fixture
def word_store() -> Mock:
    store = Mock(spec=WordStore)
    store.list_unseen_word_ids.return_value = []
    return store


@pytest.fixture
def generator(mode_store: Mock, progress_store: Mock, word_store: Mock) -> DailyWordListGenerator:
    return DailyWordListGenerator(mode_store, progress_store, word_store, stale_review_hours=24)


def test_due_words_come_first(generator: DailyWordListGenerator, progress_store: Mock, word_store: Mock) -> None:
    """Test that due reviews are followed by new words up to the quota."""
    progress_store.list_progress.return_value = [due("w1"), not_due("w2"), due("w3")]
    word_store.list_unseen_word_ids.return_value = ["wNew"]

    lists = generator.generate("u1", 1, now=NOW)

    assert lists.pre_test == ["w1", "w3"]
    assert lists.learning == ["w1", "w3", "wNew"]
    assert lists.post_test == lists.learning
    assert lists.post_test is not lists.learning
    word_store.list_unseen_word_ids.assert_called_once_with("u1", 1)


def test_quota_already_met(generator: DailyWordListGenerator, progress_store: Mock, word_store: Mock) -> None:
    """Test that no new words are fetched once due reviews fill the quota."""
    progress_store.list_progress.return_value = [due(f"w{i}") for i in range(5)]

    lists = generator.generate("u1", 1, now=NOW)

    assert lists.pre_test == [f"w{i}" for i in range(5)]
    assert lists.learning == lists.pre_test
    word_store.list_unseen_word_ids.assert_not_called()


def test_no_history(generator: DailyWordListGenerator, word_store: Mock) -> None:
    word_store.list_unseen_word_ids.return_value = ["a", "b", "c"]

    lists = generator.generate("u1", 1, now=NOW)

    assert lists == WordLists(pre_test=[], learning=["a", "b", "c"], post_test=["a", "b", "c"])


def test_duplicates_are_dropped(generator: DailyWordListGenerator, progress_store: Mock, word_store: Mock) -> None:
    """Test that repeated ids keep their first position."""
    progress_store.list_progress.return_value = [due("w1"), due("w3"), due("w1")]
    word_store.list_unseen_word_ids.return_value = ["w3", "wNew"]

    lists = generator.generate("u1", 1, now=NOW)

    assert lists.pre_test == ["w1", "w3"]
    assert lists.learning == ["w1", "w3", "wNew"]


@pytest.mark.parametrize(
    "failing_store, method",
    [
        ("mode_store", "get_mode"),
        ("progress_store", "list_progress"),
        ("word_store", "list_unseen_word_ids"),
    ],
)
@pytest.mark.parametrize("error", [NotFoundError("missing"), StoreError("down"), RuntimeError("boom")])
def test_fetch_failure_returns_empty_lists(
    request: pytest.FixtureRequest,
    generator: DailyWordListGenerator,
    failing_store: str,
    method: str,
    error: Exception,
) -> None:
    """Test that a failing lookup yields three empty lists instead of raising."""
    getattr(request.getfixturevalue(failing_store), method).side_effect = error

    assert generator.generate("u1", 1, now=NOW) == WordLists()


@pytest.mark.parametrize(
    "record, expected",
    [
        (progress("w", next_review_date=NOW), True),
        (progress("w", next_review_date=NOW - timedelta(minutes=1)), True),
        (progress("w", next_review_date=NOW + timedelta(minutes=1), last_review_date=NOW - timedelta(days=5)), False),
        (progress("w"), True),
        (progress("w", last_review_date=NOW - timedelta(hours=25)), True),
        (progress("w", last_review_date=NOW - timedelta(hours=24)), False),
        (progress("w", last_review_date=NOW - timedelta(hours=2)), False),
    ],
)
def test_is_due(generator: DailyWordListGenerator, record: WordProgress, expected: bool) -> None:
    """Test that an explicit due date wins over the staleness window."""
    assert generator.is_due(record, NOW) is expected


def test_naive_timestamps_compare_as_utc(generator: DailyWordListGenerator) -> None:
    record = progress("w", next_review_date=datetime(2024, 5, 20, 7, 0))
    assert generator.is_due(record, NOW)


def test_select_due_word_ids_preserves_order(generator: DailyWordListGenerator) -> None:
    records = [due("c"), not_due("x"), due("a"), due("b")]
    assert generator.select_due_word_ids(records, NOW) == ["c", "a", "b"]


def test_zero_staleness_window_is_kept(mode_store: Mock, progress_store: Mock, word_store: Mock) -> None:
    """Test that an explicit zero window makes any past review stale."""
    generator = DailyWordListGenerator(mode_store, progress_store, word_store, stale_review_hours=0)
    recent = progress("w1", last_review_date=NOW - timedelta(minutes=5))

    assert generator.stale_after == timedelta(0)
    assert generator.is_due(recent, NOW)

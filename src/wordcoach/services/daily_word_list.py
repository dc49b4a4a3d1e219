"""Selection of the words a user works on during one day."""
import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from wordcoach.config import settings
from wordcoach.models.progress_models import WordLists, WordProgress
from wordcoach.monitoring import daily_list_size, word_list_failures
from wordcoach.services.date_utils import as_utc, utc_now
from wordcoach.services.stores import LearningModeStore, ProgressStore, WordStore

logger = logging.getLogger(__name__)


def _unique(ids: Iterable[str]) -> List[str]:
    """Drop repeated ids, keeping the first occurrence."""
    seen = set()
    result = []
    for word_id in ids:
        if word_id not in seen:
            seen.add(word_id)
            result.append(word_id)
    return result


class DailyWordListGenerator:
    """Builds the pre-test, learning and post-test lists of a day."""

    def __init__(
        self,
        mode_store: LearningModeStore,
        progress_store: ProgressStore,
        word_store: WordStore,
        stale_review_hours: Optional[int] = None,
    ):
        """Initialize the generator with its collaborators."""
        self.mode_store = mode_store
        self.progress_store = progress_store
        self.word_store = word_store
        if stale_review_hours is None:
            stale_review_hours = settings.learning.stale_review_hours
        self.stale_after = timedelta(hours=stale_review_hours)

    def is_due(self, progress: WordProgress, now: datetime) -> bool:
        """Decide whether a word should be reviewed today.

        An explicit due timestamp wins; words without one are due when they were
        never reviewed or their last review is older than the staleness window.
        """
        if progress.next_review_date is not None:
            return as_utc(progress.next_review_date) <= now
        if progress.last_review_date is None:
            return True
        return now - as_utc(progress.last_review_date) > self.stale_after

    def select_due_word_ids(self, progress_records: Iterable[WordProgress], now: datetime) -> List[str]:
        return _unique(p.word_id for p in progress_records if self.is_due(p, now))

    def generate(self, user_id: str, mode_id: int, now: Optional[datetime] = None) -> WordLists:
        """Return today's word lists, or three empty lists if a lookup fails."""
        now = as_utc(now) if now is not None else utc_now()
        try:
            mode = self.mode_store.get_mode(mode_id)
            progress_records = self.progress_store.list_progress(user_id)

            pre_test = self.select_due_word_ids(progress_records, now)
            needed = max(0, mode.word_count - len(pre_test))
            new_words = []
            if needed:
                known = set(pre_test)
                new_words = [
                    word_id
                    for word_id in self.word_store.list_unseen_word_ids(user_id, needed)
                    if word_id not in known
                ][:needed]
        except Exception as e:
            logger.error("Failed to generate word lists for user %s, mode %s: %s", user_id, mode_id, e)
            word_list_failures.inc()
            return WordLists()

        learning = _unique(pre_test + new_words)
        lists = WordLists(pre_test=pre_test, learning=learning, post_test=list(learning))
        daily_list_size.observe(len(learning))
        logger.info(
            "Word lists for user %s (mode %s, quota %d): %d due, %d new",
            user_id,
            mode_id,
            mode.word_count,
            len(pre_test),
            len(new_words),
        )
        return lists

"""Spaced-repetition scheduling of word progress records."""
import logging
from dataclasses import replace
from datetime import datetime
from typing import List, Optional, Union

from wordcoach.config import settings
from wordcoach.errors import NotFoundError
from wordcoach.models.progress_models import StrategyId, WordProgress
from wordcoach.monitoring import progress_skipped, progress_updates, strategy_downgrades
from wordcoach.services.date_utils import as_utc, same_calendar_day, whole_days_between
from wordcoach.services.interval_table import add_hours, interval_for, parse_interval_rule
from wordcoach.services.stores import StrategyStore
from wordcoach.services.strategy_selector import select_strategy

logger = logging.getLogger(__name__)

# A word forgotten after a long successful cycle moves to a sparser table
DOWNGRADES = {
    StrategyId.DENSE: StrategyId.NORMAL,
    StrategyId.NORMAL: StrategyId.SPARSE,
}

MIN_LEVEL = 0
MAX_LEVEL = 4


def _strategy_key(strategy_id: Union[StrategyId, str]) -> str:
    return strategy_id.value if isinstance(strategy_id, StrategyId) else strategy_id


class ReviewScheduler:
    """Computes the next state of a word after a review."""

    def __init__(
        self,
        strategy_store: StrategyStore,
        default_interval_hours: Optional[int] = None,
        downgrade_after_days: Optional[int] = None,
    ):
        """Initialize the scheduler with the store holding interval rules."""
        self.strategy_store = strategy_store
        self.default_interval_hours = (
            default_interval_hours if default_interval_hours is not None else settings.scheduling.default_interval_hours
        )
        self.downgrade_after_days = (
            downgrade_after_days if downgrade_after_days is not None else settings.scheduling.downgrade_after_days
        )

    def update_progress(
        self, progress: WordProgress, new_level: int, review_time: datetime
    ) -> Optional[WordProgress]:
        """Return the progress record after a review, or None if nothing changes.

        A word already reviewed on the same calendar day is left alone, whatever
        the new level is. The input record is never modified.
        """
        if not MIN_LEVEL <= new_level <= MAX_LEVEL:
            raise ValueError(f"Proficiency level must be between {MIN_LEVEL} and {MAX_LEVEL}, got {new_level}")

        review_time = as_utc(review_time)
        if progress.last_review_date and same_calendar_day(progress.last_review_date, review_time):
            logger.debug(
                "Word %s already reviewed today by user %s, no update",
                progress.word_id,
                progress.user_id,
            )
            progress_skipped.inc()
            return None

        if progress.start_date is None:
            strategy_id = select_strategy(progress.proficiency_level, progress.is_long_difficult)
            logger.debug(
                "First review of word %s for user %s, strategy %s",
                progress.word_id,
                progress.user_id,
                strategy_id.value,
            )
            updated = replace(
                progress,
                strategy_id=strategy_id,
                start_date=review_time,
                last_review_date=review_time,
                reviewed_times=0,
            )
        else:
            updated = self._apply_review(progress, new_level, review_time)

        updated = replace(
            updated,
            next_review_date=self.compute_next_review_date(
                updated.strategy_id, review_time, updated.reviewed_times
            ),
            proficiency_level=new_level,
        )
        progress_updates.labels(strategy_id=_strategy_key(updated.strategy_id)).inc()
        logger.info(
            "Scheduled word %s for user %s: level %d, strategy %s, review %d, next at %s",
            updated.word_id,
            updated.user_id,
            new_level,
            _strategy_key(updated.strategy_id),
            updated.reviewed_times,
            updated.next_review_date.isoformat(),
        )
        return updated

    def _apply_review(self, progress: WordProgress, new_level: int, review_time: datetime) -> WordProgress:
        """Advance or restart the review cycle of an already scheduled word."""
        strategy_id = progress.strategy_id
        days_since_start = whole_days_between(progress.start_date, review_time)

        if new_level == 0 and progress.proficiency_level == 3 and days_since_start >= self.downgrade_after_days:
            downgraded = DOWNGRADES.get(strategy_id, strategy_id)
            if downgraded != strategy_id:
                logger.info(
                    "Downgrading word %s for user %s from %s to %s after %d days",
                    progress.word_id,
                    progress.user_id,
                    _strategy_key(strategy_id),
                    _strategy_key(downgraded),
                    days_since_start,
                )
                strategy_downgrades.labels(from_strategy=_strategy_key(strategy_id)).inc()
            strategy_id = downgraded

        if new_level == 0:
            # Forgotten: the cycle restarts from the first interval
            return replace(
                progress,
                strategy_id=strategy_id,
                start_date=review_time,
                last_review_date=review_time,
                reviewed_times=0,
            )

        return replace(
            progress,
            strategy_id=strategy_id,
            last_review_date=review_time,
            reviewed_times=progress.reviewed_times + 1,
        )

    def get_intervals(self, strategy_id: Union[StrategyId, str]) -> List[int]:
        """Return the hour offsets of a strategy; empty when it does not exist."""
        try:
            strategy = self.strategy_store.get_strategy(_strategy_key(strategy_id))
        except NotFoundError:
            logger.warning("Strategy %s not found, using default interval", _strategy_key(strategy_id))
            return []

        intervals = parse_interval_rule(strategy.interval_rule)
        if not intervals:
            logger.warning(
                "Invalid interval rule for strategy %s: %r",
                _strategy_key(strategy_id),
                strategy.interval_rule,
            )
        return intervals

    def compute_next_review_date(
        self, strategy_id: Union[StrategyId, str], review_time: datetime, reviewed_times: int
    ) -> datetime:
        """Return ``review_time`` plus the interval for the n-th review."""
        review_time = as_utc(review_time)
        intervals = self.get_intervals(strategy_id)
        if not intervals:
            return add_hours(review_time, self.default_interval_hours)
        return add_hours(review_time, interval_for(intervals, reviewed_times))

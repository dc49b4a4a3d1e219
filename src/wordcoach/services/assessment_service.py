"""Drives a batch of word assessments and records their outcome."""
import logging
import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from wordcoach.config import settings
from wordcoach.errors import AssessmentStateError, NotFoundError
from wordcoach.models.assessment_models import AssessmentState, QuestionType
from wordcoach.models.progress_models import ScheduleLogEntry, TestHistoryEntry, TestPhase, WordProgress
from wordcoach.monitoring import assessments_completed
from wordcoach.services.assessment_engine import AssessmentFlowEngine, PostTestFlowEngine
from wordcoach.services.date_utils import as_utc, utc_now
from wordcoach.services.review_scheduler import ReviewScheduler
from wordcoach.services.stores import ProgressStore, ScheduleLogStore, TestHistoryStore, WordStore
from wordcoach.services.strategy_selector import is_long_difficult_word

logger = logging.getLogger(__name__)


def post_test_difficulty(pre_test_level: int, post_test_level: int) -> int:
    """Map the day's pre-test and post-test levels to 1 (easy), 2 (normal) or 3 (hard).

    A word that was already at L3 before learning counts as hard whatever the
    post-test says.
    """
    if pre_test_level not in (0, 1, 2):
        return 3
    if post_test_level == 3:
        return 1
    if post_test_level in (1, 2):
        return 2
    return 3


@dataclass
class AssessmentBatch:
    """Engines of one test phase, keyed by word id; owned by the caller."""
    user_id: str
    phase: TestPhase
    engines: Dict[str, AssessmentFlowEngine]
    results: Dict[str, int] = field(default_factory=dict)
    skipped: Set[str] = field(default_factory=set)

    def engine_for(self, word_id: str) -> AssessmentFlowEngine:
        try:
            return self.engines[word_id]
        except KeyError:
            raise NotFoundError(f"Word {word_id} is not part of this batch") from None

    def current_step(self, word_id: str) -> QuestionType:
        return self.engine_for(word_id).current_step()

    def pending_word_ids(self) -> List[str]:
        """Words neither assessed nor skipped yet, in batch order."""
        return [
            word_id
            for word_id, engine in self.engines.items()
            if not engine.is_terminal() and word_id not in self.skipped
        ]

    def is_complete(self) -> bool:
        return not self.pending_word_ids()


class AssessmentService:
    """Runs assessments and feeds their levels to the scheduler."""

    def __init__(
        self,
        progress_store: ProgressStore,
        history_store: TestHistoryStore,
        word_store: WordStore,
        scheduler: ReviewScheduler,
        log_store: Optional[ScheduleLogStore] = None,
    ):
        """Initialize the service with its collaborators."""
        self.progress_store = progress_store
        self.history_store = history_store
        self.word_store = word_store
        self.scheduler = scheduler
        self.log_store = log_store

    def start_batch(
        self,
        user_id: str,
        word_ids: Iterable[str],
        phase: TestPhase,
        spelling_enabled: Optional[bool] = None,
    ) -> AssessmentBatch:
        """Create one engine per word from that word's test history."""
        if spelling_enabled is None:
            spelling_enabled = settings.learning.spelling_enabled

        engines: Dict[str, AssessmentFlowEngine] = {}
        for word_id in word_ids:
            if word_id in engines:
                continue
            history = self.history_store.list_levels(user_id, word_id)
            if phase == TestPhase.POST_TEST:
                engines[word_id] = PostTestFlowEngine(history)
            else:
                engines[word_id] = AssessmentFlowEngine(history, spelling_enabled=spelling_enabled)
            engines[word_id].start()

        logger.info("Started %s batch of %d words for user %s", phase.name, len(engines), user_id)
        return AssessmentBatch(user_id=user_id, phase=phase, engines=engines)

    def submit_answer(
        self,
        batch: AssessmentBatch,
        word_id: str,
        correct: bool,
        review_time: Optional[datetime] = None,
    ) -> AssessmentState:
        """Advance the word's engine; a finished word is recorded immediately."""
        if word_id in batch.skipped:
            raise AssessmentStateError(f"Word {word_id} was skipped")
        engine = batch.engine_for(word_id)
        state = engine.submit_answer(correct)
        if engine.is_terminal():
            level = engine.result()
            batch.results[word_id] = level
            self.record_result(batch.user_id, word_id, batch.phase, level, review_time)
        return state

    def skip_word(
        self,
        batch: AssessmentBatch,
        word_id: str,
        review_time: Optional[datetime] = None,
    ) -> Optional[WordProgress]:
        """Leave a word unassessed; a word never seen before is scheduled as L0.

        An existing progress record is returned untouched.
        """
        engine = batch.engine_for(word_id)
        if engine.is_terminal():
            raise AssessmentStateError(f"Word {word_id} was already assessed")
        batch.skipped.add(word_id)

        progress = self.progress_store.get_progress(batch.user_id, word_id)
        if progress is not None:
            logger.debug("Skipped word %s for user %s, progress kept", word_id, batch.user_id)
            return progress

        logger.info("Skipped new word %s for user %s, scheduling as L0", word_id, batch.user_id)
        review_time = as_utc(review_time) if review_time is not None else utc_now()
        return self._reschedule(self._new_progress(batch.user_id, word_id, 0), 0, review_time)

    def record_result(
        self,
        user_id: str,
        word_id: str,
        phase: TestPhase,
        level: int,
        review_time: Optional[datetime] = None,
    ) -> Optional[WordProgress]:
        """Store the level in the history and update the word's progress.

        A pre-test level reschedules the word. A post-test level only turns the
        pre-test level into a difficulty, see :func:`post_test_difficulty`.
        Returns the saved progress record, or None when nothing was saved.
        """
        review_time = as_utc(review_time) if review_time is not None else utc_now()

        self.history_store.append(
            TestHistoryEntry(
                user_id=user_id,
                word_id=word_id,
                phase=phase,
                test_date=review_time,
                test_level=level,
            )
        )
        assessments_completed.labels(phase=phase.name.lower(), level=str(level)).inc()

        if phase == TestPhase.POST_TEST:
            return self._record_post_test(user_id, word_id, level)

        progress = self.progress_store.get_progress(user_id, word_id)
        if progress is None:
            progress = self._new_progress(user_id, word_id, level)
        return self._reschedule(progress, level, review_time)

    def _record_post_test(self, user_id: str, word_id: str, level: int) -> Optional[WordProgress]:
        progress = self.progress_store.get_progress(user_id, word_id)
        if progress is None:
            logger.error("No progress for word %s of user %s, post-test level %d dropped", word_id, user_id, level)
            return None

        difficulty = post_test_difficulty(progress.proficiency_level, level)
        logger.info(
            "Post-test of word %s for user %s: pre-test level %d, post-test level %d, difficulty %d",
            word_id,
            user_id,
            progress.proficiency_level,
            level,
            difficulty,
        )
        return self.progress_store.save_progress(replace(progress, proficiency_level=difficulty))

    def _new_progress(self, user_id: str, word_id: str, level: int) -> WordProgress:
        # The strategy of a first review comes from this level and the word's length
        word = self.word_store.get_word(word_id)
        return WordProgress(
            user_id=user_id,
            word_id=word_id,
            proficiency_level=level,
            is_long_difficult=is_long_difficult_word(word.spelling, word.syllable_count),
        )

    def _reschedule(self, progress: WordProgress, level: int, review_time: datetime) -> Optional[WordProgress]:
        updated = self.scheduler.update_progress(progress, level, review_time)
        if updated is None:
            return None

        saved = self.progress_store.save_progress(updated)
        if self.log_store is not None:
            self.log_store.append_log(self._schedule_log(saved, review_time))
        return saved

    @staticmethod
    def _schedule_log(progress: WordProgress, review_time: datetime) -> ScheduleLogEntry:
        hours = (progress.next_review_date - review_time).total_seconds() / 3600
        return ScheduleLogEntry(
            user_id=progress.user_id,
            word_id=progress.word_id,
            review_time=review_time,
            next_review_time=progress.next_review_date,
            schedule_days=math.ceil(hours / 24),
            strategy_id=progress.strategy_id.value,
            reviewed_times=progress.reviewed_times,
            proficiency_level=progress.proficiency_level,
        )

"""Adaptive assessment of how well a word is known.

An engine picks one question sequence (a flow) from the word's past test
levels, then moves one state per answer until it reaches a level L0-L4. All
moves go through :func:`transition`, a pure function over a closed table.
"""
import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from wordcoach.errors import AssessmentStateError
from wordcoach.models.assessment_models import AssessmentState, Flow, QuestionType

logger = logging.getLogger(__name__)

S = AssessmentState

# state -> (next state on a correct answer, next state on a wrong answer)
TRANSITIONS: Dict[AssessmentState, Tuple[AssessmentState, AssessmentState]] = {
    # Pre-test flows
    S.FLOW1_LISTEN: (S.FLOW1_SPELLING, S.FLOW1_TRANSLATE_TO_NATIVE),
    S.FLOW1_SPELLING: (S.L4, S.L3),
    S.FLOW1_TRANSLATE_TO_NATIVE: (S.L1, S.L0),
    S.FLOW2_TRANSLATE_TO_NATIVE: (S.L3, S.L0),
    S.FLOW3_LISTEN: (S.L3, S.FLOW3_TRANSLATE_TO_NATIVE),
    S.FLOW3_TRANSLATE_TO_NATIVE: (S.L2, S.L0),
    S.FLOW4_TRANSLATE_FROM_NATIVE: (S.FLOW4_PRONOUNCE, S.L0),
    S.FLOW4_PRONOUNCE: (S.L2, S.L1),
    S.FLOW5_TRANSLATE_TO_NATIVE: (S.FLOW5_PRONOUNCE, S.L0),
    S.FLOW5_PRONOUNCE: (S.L2, S.L1),
    # Post-test flows
    S.POST_FLOW1_TRANSLATE_TO_NATIVE: (S.POST_FLOW1_PRONOUNCE, S.L0),
    S.POST_FLOW1_PRONOUNCE: (S.L2, S.L1),
    S.POST_FLOW2_LISTEN: (S.L3, S.POST_FLOW2_TRANSLATE_TO_NATIVE),
    S.POST_FLOW2_TRANSLATE_TO_NATIVE: (S.L2, S.L0),
    S.POST_FLOW3_TRANSLATE_FROM_NATIVE: (S.POST_FLOW3_LISTEN, S.POST_FLOW3_PRONOUNCE),
    S.POST_FLOW3_LISTEN: (S.L3, S.L1),
    S.POST_FLOW3_PRONOUNCE: (S.L2, S.L0),
}

ENTRY_STATES: Dict[Flow, AssessmentState] = {
    Flow.FLOW1: S.FLOW1_LISTEN,
    Flow.FLOW2: S.FLOW2_TRANSLATE_TO_NATIVE,
    Flow.FLOW3: S.FLOW3_LISTEN,
    Flow.FLOW4: S.FLOW4_TRANSLATE_FROM_NATIVE,
    Flow.FLOW5: S.FLOW5_TRANSLATE_TO_NATIVE,
    Flow.POST_FLOW1: S.POST_FLOW1_TRANSLATE_TO_NATIVE,
    Flow.POST_FLOW2: S.POST_FLOW2_LISTEN,
    Flow.POST_FLOW3: S.POST_FLOW3_TRANSLATE_FROM_NATIVE,
}

# No flow asks more than this many questions
MAX_QUESTIONS = 3


def transition(state: AssessmentState, correct: bool, spelling_enabled: bool = False) -> AssessmentState:
    """Return the state reached from ``state`` after one answer."""
    if state not in TRANSITIONS:
        raise AssessmentStateError(f"No answer is expected in state {state.name}")
    if state is S.FLOW1_LISTEN and correct and not spelling_enabled:
        return S.L3
    on_correct, on_wrong = TRANSITIONS[state]
    return on_correct if correct else on_wrong


def _all_at_least(levels: Sequence[int], minimum: int) -> bool:
    return all(level >= minimum for level in levels)


def select_pre_test_flow(history_levels: Sequence[int]) -> Flow:
    """Pick the pre-test flow; guards are tried in order, the last always matches."""
    history = list(history_levels)
    if not history:
        return Flow.FLOW1
    if len(history) == 1 and history[0] == 3:
        return Flow.FLOW2
    if history[-1] == 3 or (len(history) >= 3 and _all_at_least(history[-3:], 2)):
        return Flow.FLOW3
    if (len(history) == 1 and history[0] == 1) or (
        len(history) >= 2 and history[0] == 0 and _all_at_least(history[-2:], 2)
    ):
        return Flow.FLOW4
    return Flow.FLOW5


def select_post_test_flow(history_levels: Sequence[int]) -> Flow:
    """Pick the post-test flow: deeper checks for words with a longer clean record."""
    history = list(history_levels)
    if len(history) >= 4 and history[-1] != 0:
        return Flow.POST_FLOW3
    if len(history) >= 2 and history[-1] != 0:
        return Flow.POST_FLOW2
    return Flow.POST_FLOW1


class AssessmentFlowEngine:
    """State machine assessing one word during the pre-test.

    The engine starts in ``SELECTING_PATH`` and leaves it exactly once, on the
    first call to :meth:`start`, :meth:`current_step` or :meth:`submit_answer`.
    It does no I/O; the caller feeds it answers and reads the final level.
    """

    def __init__(self, history_levels: Sequence[int], spelling_enabled: bool = False):
        self.history_levels: Tuple[int, ...] = tuple(history_levels)
        self.spelling_enabled = spelling_enabled
        self.state = AssessmentState.SELECTING_PATH
        self.flow: Optional[Flow] = None
        self.answers: List[bool] = []

    def select_path(self) -> Flow:
        return select_pre_test_flow(self.history_levels)

    def start(self) -> AssessmentState:
        """Leave ``SELECTING_PATH`` for the first question of the selected flow."""
        if self.state is not AssessmentState.SELECTING_PATH:
            raise AssessmentStateError("Assessment already started")
        self.flow = self.select_path()
        self.state = ENTRY_STATES[self.flow]
        logger.debug("History %s selects %s", list(self.history_levels), self.flow.value)
        return self.state

    def _ensure_started(self) -> None:
        if self.state is AssessmentState.SELECTING_PATH:
            self.start()

    def current_step(self) -> QuestionType:
        """Return the question to present next."""
        self._ensure_started()
        if self.state.is_terminal:
            raise AssessmentStateError("Assessment is finished, there is no next question")
        return self.state.question

    def submit_answer(self, correct: bool) -> AssessmentState:
        """Advance one step; answering a finished assessment is an error."""
        self._ensure_started()
        if self.state.is_terminal:
            raise AssessmentStateError(
                f"Assessment already finished with level {self.state.level}"
            )
        previous = self.state
        self.state = transition(previous, correct, self.spelling_enabled)
        self.answers.append(correct)
        logger.debug(
            "%s: %s answered %s -> %s",
            self.flow.value,
            previous.name,
            "correctly" if correct else "wrongly",
            self.state.name,
        )
        return self.state

    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def result(self) -> int:
        """Return the proficiency level reached; only valid once terminal."""
        if not self.state.is_terminal:
            raise AssessmentStateError("Assessment has not reached a final level yet")
        return self.state.level


class PostTestFlowEngine(AssessmentFlowEngine):
    """Same-day re-test after learning; levels stop at L3."""

    def __init__(self, history_levels: Sequence[int]):
        super().__init__(history_levels, spelling_enabled=False)

    def select_path(self) -> Flow:
        return select_post_test_flow(self.history_levels)


def run_flow(engine: AssessmentFlowEngine, answers: Sequence[bool]) -> int:
    """Feed answers to an engine until it finishes and return the level.

    Extra answers past the final state raise ``AssessmentStateError``.
    """
    for correct in answers:
        engine.submit_answer(correct)
    return engine.result()


def create_engines(
    history_by_word: Mapping[str, Sequence[int]],
    post_test: bool = False,
    spelling_enabled: bool = False,
) -> Dict[str, AssessmentFlowEngine]:
    """Build one independent engine per word id."""
    if post_test:
        return {word_id: PostTestFlowEngine(history) for word_id, history in history_by_word.items()}
    return {
        word_id: AssessmentFlowEngine(history, spelling_enabled=spelling_enabled)
        for word_id, history in history_by_word.items()
    }

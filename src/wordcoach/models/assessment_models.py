"""States, flows and question types of the assessment engines."""
from enum import Enum
from typing import Optional


class QuestionType(Enum):
    """Question shown to the learner; rendering happens elsewhere."""
    LISTEN = "listen"  # hear the word, recognise it
    SPELLING = "spelling"  # write the word from audio
    TRANSLATE_TO_NATIVE = "translate_to_native"
    TRANSLATE_FROM_NATIVE = "translate_from_native"
    PRONOUNCE = "pronounce"  # read the word aloud


class Flow(Enum):
    """Question sequence picked from the test history."""
    FLOW1 = "flow1"
    FLOW2 = "flow2"
    FLOW3 = "flow3"
    FLOW4 = "flow4"
    FLOW5 = "flow5"
    POST_FLOW1 = "post_flow1"
    POST_FLOW2 = "post_flow2"
    POST_FLOW3 = "post_flow3"


class AssessmentState(Enum):
    """Closed set of engine states.

    Each value is ``(flow, question, level)``: question states carry a flow and a
    question type, terminal states carry only the proficiency level.
    """
    SELECTING_PATH = (None, None, None)

    FLOW1_LISTEN = (Flow.FLOW1, QuestionType.LISTEN, None)
    FLOW1_SPELLING = (Flow.FLOW1, QuestionType.SPELLING, None)
    FLOW1_TRANSLATE_TO_NATIVE = (Flow.FLOW1, QuestionType.TRANSLATE_TO_NATIVE, None)
    FLOW2_TRANSLATE_TO_NATIVE = (Flow.FLOW2, QuestionType.TRANSLATE_TO_NATIVE, None)
    FLOW3_LISTEN = (Flow.FLOW3, QuestionType.LISTEN, None)
    FLOW3_TRANSLATE_TO_NATIVE = (Flow.FLOW3, QuestionType.TRANSLATE_TO_NATIVE, None)
    FLOW4_TRANSLATE_FROM_NATIVE = (Flow.FLOW4, QuestionType.TRANSLATE_FROM_NATIVE, None)
    FLOW4_PRONOUNCE = (Flow.FLOW4, QuestionType.PRONOUNCE, None)
    FLOW5_TRANSLATE_TO_NATIVE = (Flow.FLOW5, QuestionType.TRANSLATE_TO_NATIVE, None)
    FLOW5_PRONOUNCE = (Flow.FLOW5, QuestionType.PRONOUNCE, None)

    POST_FLOW1_TRANSLATE_TO_NATIVE = (Flow.POST_FLOW1, QuestionType.TRANSLATE_TO_NATIVE, None)
    POST_FLOW1_PRONOUNCE = (Flow.POST_FLOW1, QuestionType.PRONOUNCE, None)
    POST_FLOW2_LISTEN = (Flow.POST_FLOW2, QuestionType.LISTEN, None)
    POST_FLOW2_TRANSLATE_TO_NATIVE = (Flow.POST_FLOW2, QuestionType.TRANSLATE_TO_NATIVE, None)
    POST_FLOW3_TRANSLATE_FROM_NATIVE = (Flow.POST_FLOW3, QuestionType.TRANSLATE_FROM_NATIVE, None)
    POST_FLOW3_LISTEN = (Flow.POST_FLOW3, QuestionType.LISTEN, None)
    POST_FLOW3_PRONOUNCE = (Flow.POST_FLOW3, QuestionType.PRONOUNCE, None)

    L0 = (None, None, 0)
    L1 = (None, None, 1)
    L2 = (None, None, 2)
    L3 = (None, None, 3)
    L4 = (None, None, 4)

    @property
    def flow(self) -> Optional[Flow]:
        return self.value[0]

    @property
    def question(self) -> Optional[QuestionType]:
        return self.value[1]

    @property
    def level(self) -> Optional[int]:
        return self.value[2]

    @property
    def is_terminal(self) -> bool:
        return self.level is not None


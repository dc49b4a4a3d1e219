"""Exceptions raised by wordcoach."""


class WordCoachError(Exception):
    """Base class for wordcoach errors."""


class NotFoundError(WordCoachError, LookupError):
    """A strategy, word, mode or progress record does not exist."""


class StoreError(WordCoachError):
    """The persistence layer failed; callers decide whether to retry."""


class AssessmentStateError(WordCoachError, RuntimeError):
    """An assessment engine was driven outside its contract."""


class SessionStateError(WordCoachError, RuntimeError):
    """A daily session was moved past its final status."""

"""Initial strategy choice for a word entering review."""
from wordcoach.models.progress_models import StrategyId


def select_strategy(proficiency_level: int, is_long_difficult: bool) -> StrategyId:
    """Map a proficiency level and the long-difficult flag to a strategy.

    Unknown words that are historically hard get the densest schedule, mastered
    hard words the sparsest; everything else is reviewed on the normal table.
    """
    if proficiency_level == 0 and is_long_difficult:
        return StrategyId.DENSE

    if (proficiency_level == 0 and not is_long_difficult) or (
        proficiency_level in (1, 2) and is_long_difficult
    ):
        return StrategyId.NORMAL

    if proficiency_level == 3 and is_long_difficult:
        return StrategyId.SPARSE

    return StrategyId.NORMAL


def is_long_difficult_word(spelling: str, syllable_count: int) -> bool:
    """Words longer than 8 letters with at least 3 syllables start out flagged as hard."""
    return len(spelling) > 8 and syllable_count >= 3

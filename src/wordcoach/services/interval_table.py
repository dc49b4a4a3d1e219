"""Parsing of textual review interval rules such as ``"1h,3h,6h,1d,2d"``."""
import logging
import re
from datetime import datetime, timedelta
from typing import List, Sequence

logger = logging.getLogger(__name__)

INTERVAL_TOKEN = re.compile(r"^(\d+)([hd])$")
HOURS_PER_UNIT = {"h": 1, "d": 24}


def parse_time_to_hours(token: str) -> int:
    """Convert a single ``<N>h`` / ``<N>d`` token to hours.

    Returns 0 for anything that does not match the token format.
    """
    match = INTERVAL_TOKEN.match(token)
    if not match:
        logger.warning("Invalid interval token: %r", token)
        return 0
    value, unit = match.groups()
    return int(value) * HOURS_PER_UNIT[unit]


def parse_interval_rule(rule: str) -> List[int]:
    """Parse a comma-separated interval rule into hour offsets.

    Malformed, empty and zero-length tokens are dropped, so
    ``"1h,invalid,2d,3x,4d"`` becomes ``[1, 48, 96]``.
    """
    if not rule or not rule.strip():
        return []

    intervals = []
    for part in rule.split(","):
        hours = parse_time_to_hours(part.strip())
        if hours > 0:
            intervals.append(hours)
    return intervals


def interval_for(intervals: Sequence[int], reviewed_times: int) -> int:
    """Pick the interval for the n-th review, reusing the last one past the end."""
    if not intervals:
        raise ValueError("interval table is empty")
    index = min(max(reviewed_times, 0), len(intervals) - 1)
    return intervals[index]


def add_hours(moment: datetime, hours: int) -> datetime:
    """Shift a timestamp by a whole number of hours."""
    return moment + timedelta(hours=hours)

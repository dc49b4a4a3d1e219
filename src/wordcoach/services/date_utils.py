"""Date helpers; every timestamp in wordcoach is timezone-aware UTC."""
from datetime import UTC, date, datetime
from typing import Optional

SECONDS_PER_DAY = 24 * 60 * 60


def as_utc(moment: Optional[datetime]) -> Optional[datetime]:
    """Return ``moment`` in UTC, treating naive values as UTC already."""
    if moment is None:
        return None
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def utc_now() -> datetime:
    return datetime.now(UTC)


def same_calendar_day(first: datetime, second: datetime) -> bool:
    """True when both timestamps fall on the same UTC date."""
    return as_utc(first).date() == as_utc(second).date()


def whole_days_between(start: datetime, end: datetime) -> int:
    """Floor of the number of days from ``start`` to ``end``."""
    return int((as_utc(end) - as_utc(start)).total_seconds() // SECONDS_PER_DAY)


def format_session_date(day: date) -> str:
    return day.strftime("%Y-%m-%d")

"""Tests for interval rule parsing."""
from datetime import UTC, datetime

import pytest

from wordcoach.services.interval_table import (
    add_hours,
    interval_for,
    parse_interval_rule,
    parse_time_to_hours,
)


@pytest.mark.parametrize(
    "token, hours",
    [
        ("1h", 1),
        ("12h", 12),
        ("1d", 24),
        ("30d", 720),
        ("0h", 0),
        ("3x", 0),
        ("h", 0),
        ("1.5h", 0),
        ("-1d", 0),
        ("1 d", 0),
        ("", 0),
    ],
)
def test_parse_time_to_hours(token: str, hours: int) -> None:
    """Test single token conversion."""
    assert parse_time_to_hours(token) == hours


def test_parse_interval_rule_drops_invalid_tokens() -> None:
    """Test that malformed tokens are skipped, not fatal."""
    assert parse_interval_rule("1h,invalid,2d,3x,4d") == [1, 48, 96]


def test_parse_interval_rule_default_tables() -> None:
    """Test the shipped strategy tables."""
    assert parse_interval_rule("1h,3h,6h,1d,2d") == [1, 3, 6, 24, 48]
    assert parse_interval_rule("3h,1d,2d,4d,7d") == [3, 24, 48, 96, 168]
    assert parse_interval_rule("1d,3d,7d,14d,30d") == [24, 72, 168, 336, 720]


def test_parse_interval_rule_whitespace_and_empty_tokens() -> None:
    """Test that surrounding spaces are tolerated and empty tokens dropped."""
    assert parse_interval_rule(" 1h , ,3h,,1d ") == [1, 3, 24]


@pytest.mark.parametrize("rule", ["", "   ", "x,y,z", "0h,0d", ","])
def test_parse_interval_rule_without_valid_tokens(rule: str) -> None:
    """Test rules that yield no interval at all."""
    assert parse_interval_rule(rule) == []


def test_interval_for_clamps_to_last_interval() -> None:
    """Test that repetitions past the table reuse the last interval."""
    intervals = [1, 3, 24, 48, 96]
    assert interval_for(intervals, 0) == 1
    assert interval_for(intervals, 4) == 96
    assert interval_for(intervals, 10) == 96


def test_interval_for_empty_table() -> None:
    """Test that an empty table is rejected."""
    with pytest.raises(ValueError):
        interval_for([], 0)


def test_add_hours() -> None:
    """Test shifting a timestamp across a day boundary."""
    moment = datetime(2024, 1, 1, 23, 0, tzinfo=UTC)
    assert add_hours(moment, 3) == datetime(2024, 1, 2, 2, 0, tzinfo=UTC)

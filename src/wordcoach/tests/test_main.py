"""Tests for the command line entry point."""
import logging

import pytest

from wordcoach.__main__ import build_parser, main
from wordcoach.models.base import Base, engine


@pytest.fixture(autouse=True)
def clean_database():
    """Drop the tables created by ``init-db``."""
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def restore_logging():
    """Keep ``setup_logging`` from leaking handlers into other tests."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        if handler not in handlers:
            root_logger.removeHandler(handler)
    root_logger.setLevel(level)


def last_line(capsys) -> str:
    return capsys.readouterr().out.strip().splitlines()[-1]


def test_parse_rule(capsys) -> None:
    assert main(["parse-rule", "1h,invalid,2d"]) == 0
    assert last_line(capsys) == "1,48"


def test_next_review_uses_seeded_strategy(capsys) -> None:
    assert main(["init-db"]) == 0
    assert main(["next-review", "--strategy", "strategy_dense", "--at", "2024-01-01T00:00:00+00:00"]) == 0
    assert last_line(capsys) == "2024-01-01T01:00:00+00:00"


def test_next_review_past_table(capsys) -> None:
    main(["init-db"])
    main(["next-review", "--strategy", "strategy_sparse", "--times", "9", "--at", "2024-01-01T00:00:00"])
    assert last_line(capsys) == "2024-01-31T00:00:00+00:00"


def test_next_review_unknown_strategy(capsys) -> None:
    main(["init-db"])
    main(["next-review", "--strategy", "strategy_missing", "--at", "2024-01-01T00:00:00+00:00"])
    assert last_line(capsys) == "2024-01-02T00:00:00+00:00"


def test_daily_list_without_words(capsys) -> None:
    main(["init-db"])
    assert main(["daily-list", "--user", "u1"]) == 0
    lines = [line.rstrip() for line in capsys.readouterr().out.splitlines()]
    assert lines[-3:] == ["pre-test:", "learning:", "post-test:"]


def test_command_is_required() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])

"""Command line entry point."""
import argparse
import logging
import sys
from datetime import datetime
from typing import List, Optional

from wordcoach.config import settings
from wordcoach.logging_config import setup_logging
from wordcoach.models.base import SessionLocal, init_db
from wordcoach.monitoring import start_monitoring
from wordcoach.services.daily_word_list import DailyWordListGenerator
from wordcoach.services.date_utils import as_utc, utc_now
from wordcoach.services.interval_table import parse_interval_rule
from wordcoach.services.review_scheduler import ReviewScheduler
from wordcoach.services.sql_stores import (
    SqlLearningModeStore,
    SqlProgressStore,
    SqlStrategyStore,
    SqlWordStore,
    seed_reference_data,
)

logger = logging.getLogger(__name__)


def cmd_init_db(args: argparse.Namespace) -> int:
    init_db()
    db = SessionLocal()
    try:
        seed_reference_data(db)
    finally:
        db.close()
    logger.info("Database initialized at %s", settings.database.url)
    return 0


def cmd_daily_list(args: argparse.Namespace) -> int:
    db = SessionLocal()
    try:
        generator = DailyWordListGenerator(
            SqlLearningModeStore(db), SqlProgressStore(db), SqlWordStore(db)
        )
        lists = generator.generate(args.user, args.mode)
    finally:
        db.close()
    print("pre-test: " + ",".join(lists.pre_test))
    print("learning: " + ",".join(lists.learning))
    print("post-test: " + ",".join(lists.post_test))
    return 0


def cmd_next_review(args: argparse.Namespace) -> int:
    review_time = as_utc(datetime.fromisoformat(args.at)) if args.at else utc_now()
    db = SessionLocal()
    try:
        scheduler = ReviewScheduler(SqlStrategyStore(db))
        next_review = scheduler.compute_next_review_date(args.strategy, review_time, args.times)
    finally:
        db.close()
    print(next_review.isoformat())
    return 0


def cmd_parse_rule(args: argparse.Namespace) -> int:
    print(",".join(str(hours) for hours in parse_interval_rule(args.rule)))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wordcoach", description="Vocabulary review scheduling")
    parser.add_argument("--log-level", default=None, help="override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init-db", help="create tables and seed strategies and modes")
    init_parser.set_defaults(func=cmd_init_db)

    list_parser = subparsers.add_parser("daily-list", help="print today's word lists for a user")
    list_parser.add_argument("--user", required=True)
    list_parser.add_argument("--mode", type=int, default=settings.learning.default_mode_id)
    list_parser.set_defaults(func=cmd_daily_list)

    review_parser = subparsers.add_parser("next-review", help="compute a due date from a strategy")
    review_parser.add_argument("--strategy", required=True, help="strategy id, e.g. strategy_dense")
    review_parser.add_argument("--times", type=int, default=0, help="reviews done in the current cycle")
    review_parser.add_argument("--at", default=None, help="review time (ISO 8601), defaults to now")
    review_parser.set_defaults(func=cmd_next_review)

    rule_parser = subparsers.add_parser("parse-rule", help="show the hour offsets of an interval rule")
    rule_parser.add_argument("rule")
    rule_parser.set_defaults(func=cmd_parse_rule)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level)
    if settings.monitoring.enabled:
        start_monitoring(settings.monitoring.port)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

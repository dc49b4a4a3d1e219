"""Prometheus metrics for scheduling and daily sessions."""
from prometheus_client import Counter, Histogram, start_http_server

# Scheduling metrics
progress_updates = Counter(
    "wordcoach_progress_updates_total",
    "Number of word progress records rescheduled",
    ["strategy_id"],
)

progress_skipped = Counter(
    "wordcoach_progress_skipped_total",
    "Number of reviews ignored because the word was already reviewed that day",
)

strategy_downgrades = Counter(
    "wordcoach_strategy_downgrades_total",
    "Number of strategy downgrades after a long-cycle failure",
    ["from_strategy"],
)

# Assessment metrics
assessments_completed = Counter(
    "wordcoach_assessments_completed_total",
    "Number of finished word assessments",
    ["phase", "level"],
)

# Daily session metrics
sessions_created = Counter(
    "wordcoach_sessions_created_total",
    "Number of daily learning sessions created",
)

word_list_failures = Counter(
    "wordcoach_word_list_failures_total",
    "Number of daily word lists that fell back to empty lists",
)

daily_list_size = Histogram(
    "wordcoach_daily_list_size",
    "Number of words in a generated learning list",
    buckets=[0, 5, 10, 20, 30, 50, 100],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)

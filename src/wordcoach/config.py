"""Configuration settings for wordcoach."""
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Scheduling settings
DEFAULT_INTERVAL_HOURS = 24  # used when a strategy is missing or unparseable
DOWNGRADE_AFTER_DAYS = 90
DEFAULT_INTERVAL_RULES = {
    "strategy_dense": "1h,3h,6h,1d,2d",
    "strategy_normal": "3h,1d,2d,4d,7d",
    "strategy_sparse": "1d,3d,7d,14d,30d",
}

# Learning modes: mode id -> (name, words per day)
DEFAULT_LEARNING_MODES = {
    1: ("easy", 10),
    2: ("normal", 20),
    3: ("intensive", 30),
}


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///wordcoach.db")
    echo: bool = _env_bool("DATABASE_ECHO", "false")


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class SchedulingSettings:
    """Spaced-repetition settings."""
    default_interval_hours: int = int(os.getenv("DEFAULT_INTERVAL_HOURS", str(DEFAULT_INTERVAL_HOURS)))
    downgrade_after_days: int = int(os.getenv("DOWNGRADE_AFTER_DAYS", str(DOWNGRADE_AFTER_DAYS)))
    interval_rules: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_INTERVAL_RULES))


@dataclass
class LearningSettings:
    """Daily learning settings."""
    spelling_enabled: bool = _env_bool("SPELLING_ENABLED", "false")
    stale_review_hours: int = int(os.getenv("STALE_REVIEW_HOURS", "24"))
    default_mode_id: int = int(os.getenv("DEFAULT_MODE_ID", "1"))
    modes: dict[int, tuple[str, int]] = field(default_factory=lambda: dict(DEFAULT_LEARNING_MODES))


@dataclass
class MonitoringSettings:
    """Prometheus settings."""
    enabled: bool = _env_bool("METRICS_ENABLED", "false")
    port: int = int(os.getenv("METRICS_PORT", "9090"))


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_scheduling_settings() -> SchedulingSettings:
    """Get scheduling settings."""
    return SchedulingSettings()


def get_learning_settings() -> LearningSettings:
    """Get learning settings."""
    return LearningSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    scheduling: SchedulingSettings = field(default_factory=get_scheduling_settings)
    learning: LearningSettings = field(default_factory=get_learning_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        from wordcoach.services.interval_table import parse_interval_rule

        if self.scheduling.default_interval_hours < 1:
            raise ValueError("DEFAULT_INTERVAL_HOURS must be positive")

        if self.scheduling.downgrade_after_days < 1:
            raise ValueError("DOWNGRADE_AFTER_DAYS must be positive")

        if self.learning.stale_review_hours < 1:
            raise ValueError("STALE_REVIEW_HOURS must be positive")

        for strategy_id, rule in self.scheduling.interval_rules.items():
            if not parse_interval_rule(rule):
                raise ValueError(f"Interval rule for {strategy_id} has no valid intervals: {rule!r}")

        for mode_id, (_, word_count) in self.learning.modes.items():
            if word_count < 1:
                raise ValueError(f"Learning mode {mode_id} must have a positive word count")

        if self.learning.default_mode_id not in self.learning.modes:
            raise ValueError("DEFAULT_MODE_ID must name a configured learning mode")


# Create global settings instance
settings = Settings()
settings.validate()

"""Configuration management for CheckMate."""

import calendar
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .core.context import UserContext
from .core.recommend import DEFAULT_LIMIT
from .core.tasks import Location, MentalLoad, TaskValidationError, TimeEstimate

logger = logging.getLogger(__name__)

CHECKMATE_HOME = Path(os.environ.get("CHECKMATE_HOME", Path.home() / "checkmate"))
CONFIG_FILE = CHECKMATE_HOME / "config" / "checkmate.conf"
DATA_DIR = CHECKMATE_HOME / "data"

DEFAULT_STORE_KEY = "checkmate-tasks"

WEEKDAYS = {name.lower(): i for i, name in enumerate(calendar.day_name)}


@dataclass
class Config:
    """CheckMate configuration."""

    store_backend: str = "file"
    store_key: str = DEFAULT_STORE_KEY
    store_url: str = ""
    store_token: str = ""
    data_dir: str = ""
    recommendation_limit: int = DEFAULT_LIMIT
    headline_count: int = 3
    week_start_day: str = "Sunday"
    default_available_time: str = "medium"
    default_energy_level: str = "medium"
    default_location: str = "home"
    # Telegram bot settings
    telegram_bot_token: str = ""
    telegram_allowed_users: list[int] = field(default_factory=list)

    @property
    def week_start(self) -> int:
        """week_start_day as a datetime.weekday() number (Monday=0)."""
        return WEEKDAYS.get(self.week_start_day.strip().lower(), calendar.SUNDAY)

    @property
    def data_path(self) -> Path:
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return DATA_DIR

    def default_context(self) -> UserContext:
        """Context used when a command is not given one explicitly."""
        try:
            return UserContext.parse(
                self.default_available_time,
                self.default_energy_level,
                self.default_location,
            )
        except (TaskValidationError, ValueError) as e:
            logger.warning(f"Invalid default context in checkmate.conf: {e}")
            return UserContext(TimeEstimate.MEDIUM, MentalLoad.MEDIUM, Location.HOME)


def _parse_int(key: str, value: str, fallback: int) -> int:
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: {value}")
        return fallback


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    if value[:1] in ('"', "'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def load_config(config_file: Path | None = None) -> Config:
    """Load configuration from checkmate.conf."""
    config = Config()
    config_file = config_file or CONFIG_FILE

    if not config_file.exists():
        return config

    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "store_backend":
                if value.lower() in ("file", "http"):
                    config.store_backend = value.lower()
                else:
                    logger.warning(f"Unknown STORE_BACKEND '{value}', using file")
            case "store_key":
                config.store_key = value or DEFAULT_STORE_KEY
            case "store_url":
                config.store_url = value
            case "store_token":
                config.store_token = value
            case "data_dir":
                config.data_dir = value
            case "recommendation_limit":
                limit = _parse_int(key, value, config.recommendation_limit)
                if limit > DEFAULT_LIMIT:
                    logger.warning(f"RECOMMENDATION_LIMIT {limit} is above {DEFAULT_LIMIT}, using {DEFAULT_LIMIT}")
                    limit = DEFAULT_LIMIT
                config.recommendation_limit = limit
            case "headline_count":
                config.headline_count = _parse_int(key, value, config.headline_count)
            case "week_start_day":
                if value.lower() in WEEKDAYS:
                    config.week_start_day = value
                else:
                    logger.warning(f"Unknown WEEK_START_DAY '{value}', using Sunday")
            case "default_available_time":
                config.default_available_time = value
            case "default_energy_level":
                config.default_energy_level = value
            case "default_location":
                config.default_location = value
            case "telegram_bot_token":
                config.telegram_bot_token = value
            case "telegram_allowed_users":
                try:
                    config.telegram_allowed_users = [int(u.strip()) for u in value.split(",") if u.strip()]
                except ValueError:
                    logger.warning(f"Invalid TELEGRAM_ALLOWED_USERS: {value}")

    return config

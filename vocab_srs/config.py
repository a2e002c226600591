"""
Environment-driven settings.

Values come from the process environment, with a local .env file loaded
first (python-dotenv).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from vocab_srs.exceptions import ConfigurationError
from vocab_srs.sm2.constants import (
    ANCHOR_CALENDAR,
    NEXT_REVIEW_ANCHORS,
    ROUND_HALF_AWAY,
    ROUNDING_MODES,
    STORAGE_KEY,
)

# Load environment
load_dotenv()

STORAGE_BACKENDS = ("memory", "sqlalchemy", "mongo")
LOG_FORMATS = ("json", "text")


def is_test_mode() -> bool:
    """Check if running in test mode."""
    return os.getenv("TEST_MODE", "false").lower() == "true"


def get_default_user_id() -> str:
    """Get default user id for scoping cards."""
    return os.getenv("DEFAULT_USER_ID", "default")


def get_database_url() -> str:
    """
    Get the database URL from environment variables.

    Without DATABASE_URL a local SQLite file under logs/ is used;
    test mode switches to a separate file.
    """
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    db_name = "test_srs.sqlite" if is_test_mode() else "srs.sqlite"
    return f"sqlite:///logs/{db_name}"


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _env_choice(name: str, default: str, choices: tuple[str, ...]) -> str:
    value = os.getenv(name, default).strip().lower()
    if value not in choices:
        raise ConfigurationError(f"{name} must be one of {', '.join(choices)}, got {value!r}")
    return value


def resolve_timezone(name: str) -> tzinfo:
    """Map a time zone name to a tzinfo (UTC needs no tz database)."""
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown time zone: {name!r}") from exc


@dataclass(frozen=True)
class SrsSettings:
    """All runtime settings of the engine."""
    storage_backend: str = "sqlalchemy"
    database_url: str = "sqlite:///logs/srs.sqlite"
    mongo_uri: Optional[str] = None
    mongo_db: str = "vocab_srs"
    mongo_collection: str = "srs_store"
    storage_key: str = STORAGE_KEY
    timezone_name: str = "UTC"
    next_review_anchor: str = ANCHOR_CALENDAR
    interval_rounding: str = ROUND_HALF_AWAY
    strict_persistence: bool = False
    log_level: str = "INFO"
    log_format: str = "json"
    default_user_id: str = "default"

    @property
    def tz(self) -> tzinfo:
        return resolve_timezone(self.timezone_name)

    @classmethod
    def from_env(cls) -> "SrsSettings":
        """
        Read settings from environment variables.

        Raises:
            ConfigurationError: if a value is not usable
        """
        settings = cls(
            storage_backend=_env_choice("SRS_STORAGE_BACKEND", "sqlalchemy", STORAGE_BACKENDS),
            database_url=get_database_url(),
            mongo_uri=os.getenv("MONGO_URI"),
            mongo_db=os.getenv("SRS_MONGO_DB", "vocab_srs"),
            mongo_collection=os.getenv("SRS_MONGO_COLLECTION", "srs_store"),
            storage_key=os.getenv("SRS_STORAGE_KEY", STORAGE_KEY),
            timezone_name=os.getenv("SRS_TIMEZONE", "UTC"),
            next_review_anchor=_env_choice("SRS_NEXT_REVIEW_ANCHOR", ANCHOR_CALENDAR, NEXT_REVIEW_ANCHORS),
            interval_rounding=_env_choice("SRS_INTERVAL_ROUNDING", ROUND_HALF_AWAY, ROUNDING_MODES),
            strict_persistence=_env_bool("SRS_STRICT_PERSISTENCE"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_format=_env_choice("LOG_FORMAT", "json", LOG_FORMATS),
            default_user_id=get_default_user_id(),
        )
        # Fail early on a bad zone name
        resolve_timezone(settings.timezone_name)
        return settings

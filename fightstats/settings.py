"""Configuration for the fightstats engine.

Values come from the process environment and a local ``.env`` file.  Besides
the connection strings, the settings carry the engine tunables: win streak
caching and ranking mode, the duration dataset preference and the accuracy
threshold default.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Loaded at import so every entry point sees the same environment.
load_dotenv()

DEFAULT_SQLITE_DATABASE_URL = "sqlite+aiosqlite:///./data/fightstats.db"
POSTGRES_ASYNC_PREFIX = "postgresql+psycopg://"
POSTGRES_SYNC_PREFIXES = ("postgres://", "postgresql://")
SUPPORTED_ASYNC_PREFIXES = (POSTGRES_ASYNC_PREFIX, "sqlite+aiosqlite://")
DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_WIN_STREAK_CACHE_TTL_SECONDS = 24 * 60 * 60
DEFAULT_WIN_STREAK_POOL_MULTIPLIER = 10
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

WinStreakMode = Literal["candidate_pool", "exact"]


def resolve_database_url(raw_url: str | None, *, force_sqlite: bool = False) -> str:
    """Map a configured URL onto an async driver URL.

    Unset URLs and ``force_sqlite`` select the bundled SQLite file.  Sync
    PostgreSQL URLs are rewritten for psycopg's async driver.
    """

    if force_sqlite or not raw_url or not raw_url.strip():
        return DEFAULT_SQLITE_DATABASE_URL

    url = raw_url.strip()
    for prefix in POSTGRES_SYNC_PREFIXES:
        if url.startswith(prefix):
            return POSTGRES_ASYNC_PREFIX + url[len(prefix) :]
    if url.startswith(SUPPORTED_ASYNC_PREFIXES):
        return url
    raise RuntimeError(
        f"Expected a PostgreSQL connection string or SQLite fallback, received: {url}"
    )


class AppSettings(BaseSettings):
    """Typed settings; field aliases are the environment variable names."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Storage
    database_url: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description="PostgreSQL URL; sync postgres:// forms are coerced to psycopg async.",
    )
    use_sqlite: bool = Field(
        default=False,
        alias="USE_SQLITE",
        description="Force the SQLite fallback regardless of DATABASE_URL.",
    )
    use_fight_durations_view: bool = Field(
        default=True,
        alias="USE_FIGHT_DURATIONS_VIEW",
        description="Read durations from fight_durations when the dataset exists.",
    )

    # Cache
    redis_url: str = Field(default=DEFAULT_REDIS_URL, alias="REDIS_URL")
    cache_enabled: bool = Field(
        default=True,
        alias="CACHE_ENABLED",
        description="When false every aggregation runs against the store directly.",
    )
    win_streak_cache_ttl_seconds: int = Field(
        default=DEFAULT_WIN_STREAK_CACHE_TTL_SECONDS,
        alias="WIN_STREAK_CACHE_TTL_SECONDS",
        gt=0,
    )

    # Aggregation
    win_streak_mode: WinStreakMode = Field(
        default="candidate_pool",
        alias="WIN_STREAK_MODE",
        description=(
            "candidate_pool scans only the top total-win fighters; exact scans"
            " every fighter with a consecutive-run query."
        ),
    )
    win_streak_pool_multiplier: int = Field(
        default=DEFAULT_WIN_STREAK_POOL_MULTIPLIER,
        alias="WIN_STREAK_POOL_MULTIPLIER",
        ge=1,
        description="Candidate pool size as a multiple of the result limit.",
    )
    accuracy_apply_threshold: bool = Field(
        default=True,
        alias="ACCURACY_APPLY_THRESHOLD",
        description="Default for enforcing the minimum attempts threshold.",
    )

    # Diagnostics
    log_level: str = Field(default=DEFAULT_LOG_LEVEL, alias="LOG_LEVEL")
    slow_query_threshold: float = Field(
        default=0.1,
        alias="SLOW_QUERY_THRESHOLD",
        description="Seconds after which a statement is logged as slow.",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.strip().upper() or DEFAULT_LOG_LEVEL

    @property
    def resolved_database_url(self) -> str:
        return resolve_database_url(self.database_url, force_sqlite=self.use_sqlite)

    @property
    def database_type(self) -> str:
        """``sqlite`` or ``postgresql``."""

        if self.resolved_database_url.startswith("sqlite"):
            return "sqlite"
        return "postgresql"

    @property
    def log_level_numeric(self) -> int:
        level = logging.getLevelName(self.log_level)
        return level if isinstance(level, int) else logging.INFO

    def optional_config_warnings(self) -> list[str]:
        """Describe optional settings left at a fallback worth knowing about."""

        warnings: list[str] = []
        if not self.cache_enabled:
            warnings.append(
                "CACHE_ENABLED is false - longest win streaks are recomputed on every call"
            )
        elif "redis_url" not in self.model_fields_set:
            warnings.append(
                "REDIS_URL is not set - assuming a local Redis instance; caching is "
                "skipped if it is unreachable"
            )
        if self.database_type == "sqlite":
            warnings.append("DATABASE_URL is not set - using the SQLite fallback database")
        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()


def configure_logging(settings: AppSettings | None = None) -> None:
    """Install the root logging configuration used by command line entry points."""

    resolved = settings or get_settings()
    logging.basicConfig(level=resolved.log_level_numeric, format=LOG_FORMAT)


__all__ = [
    "AppSettings",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_REDIS_URL",
    "DEFAULT_SQLITE_DATABASE_URL",
    "DEFAULT_WIN_STREAK_CACHE_TTL_SECONDS",
    "DEFAULT_WIN_STREAK_POOL_MULTIPLIER",
    "LOG_FORMAT",
    "WinStreakMode",
    "configure_logging",
    "get_settings",
    "resolve_database_url",
]

"""Runtime configuration for finsync.

A value is taken from the first source that defines it:

- the process environment
- the file named by ``FINSYNC_ENV_FILE``, else ``config/.env.dev``,
  else ``config/.env``
- the field default below

pydantic-settings does the parsing, so bad values fail at startup.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import SecretStr, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from finsync.domain.sync.value_objects import CheckpointPolicy

_ENV_FILE_CANDIDATES = (".env.dev", ".env")


def _project_root() -> Path:
    here = Path(__file__).resolve()
    for directory in here.parents:
        if (directory / "config").is_dir() or (directory / "pyproject.toml").is_file():
            return directory
    return here.parents[2]


def get_config_dir() -> Path:
    """Directory holding the optional ``.env`` files."""
    return _project_root() / "config"


def _pick_env_file() -> Path | None:
    explicit = os.environ.get("FINSYNC_ENV_FILE")
    if explicit:
        candidate = Path(explicit)
        if not candidate.is_absolute():
            candidate = _project_root() / candidate
        if candidate.exists():
            return candidate

    for name in _ENV_FILE_CANDIDATES:
        candidate = get_config_dir() / name
        if candidate.exists():
            return candidate
    return None


def _split_csv(v: Any) -> str:
    if isinstance(v, (list, tuple, set, frozenset)):
        return ",".join(str(item) for item in v)
    return str(v) if v else ""


def _csv_items(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseSettings):
    """All tunables of the API, the CLI and the sync orchestrator."""

    model_config = SettingsConfigDict(
        env_file=_pick_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "finsync"
    debug: bool = False

    # Remote sync endpoint (SYNC_ prefix)
    sync_endpoint_url: str = "http://localhost:3000"
    sync_connect_timeout_seconds: float = 10.0
    sync_read_timeout_seconds: float = 600.0
    sync_rate_limited_vendors_csv: str = "isracard,amex"
    sync_vendor_delay_min_seconds: float = 3.0
    sync_vendor_delay_max_seconds: float = 8.0
    sync_notification_buffer_size: int = 100

    # Checkpoints
    checkpoint_overlap_days: int = 2
    checkpoint_fallback_days: int = 90

    # Duplicates
    duplicate_exact_threshold: float = 0.95

    # PostgreSQL connection parts
    postgres_user: str = "postgres"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_password: SecretStr = SecretStr("")
    postgres_db: str = "finsync"
    # Full URL override, e.g. sqlite+aiosqlite:///./data/finsync.db
    database_url_override: str | None = None

    # API (API_ prefix)
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False
    api_cors_origins: str = ""  # Empty = no CORS allowed

    # Logging (LOG_ prefix)
    log_level: str = "INFO"

    @field_validator("api_cors_origins", "sync_rate_limited_vendors_csv", mode="before")
    @classmethod
    def _validate_csv(cls, v: Any) -> str:
        """Store list-like values as comma-separated strings."""
        return _split_csv(v)

    @model_validator(mode="after")
    def _validate_ranges(self) -> Settings:
        if self.sync_vendor_delay_min_seconds > self.sync_vendor_delay_max_seconds:
            msg = "sync_vendor_delay_min_seconds must not exceed the max"
            raise ValueError(msg)
        if not 0.0 <= self.duplicate_exact_threshold <= 1.0:
            msg = "duplicate_exact_threshold must be within [0, 1]"
            raise ValueError(msg)
        if self.sync_notification_buffer_size < 1:
            msg = "sync_notification_buffer_size must be at least 1"
            raise ValueError(msg)
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def database_url(self) -> str:
        """SQLAlchemy URL: the override when set, else built for asyncpg."""
        if self.database_url_override:
            return self.database_url_override
        password = self.postgres_password.get_secret_value()
        credentials = f"{self.postgres_user}:{password}"
        location = f"{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        return f"postgresql+asyncpg://{credentials}@{location}"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins(self) -> list[str]:
        return _csv_items(self.api_cors_origins)

    @property
    def sync_rate_limited_vendors(self) -> frozenset[str]:
        return frozenset(
            vendor.lower() for vendor in _csv_items(self.sync_rate_limited_vendors_csv)
        )

    @property
    def checkpoint_policy(self) -> CheckpointPolicy:
        return CheckpointPolicy(
            overlap_days=self.checkpoint_overlap_days,
            fallback_days=self.checkpoint_fallback_days,
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def clear_settings_cache() -> None:
    """Forget the cached Settings so the next call re-reads the environment."""
    get_settings.cache_clear()

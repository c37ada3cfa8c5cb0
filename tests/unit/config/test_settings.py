"""Unit tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from finsync_config.settings import Settings


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SYNC_RATE_LIMITED_VENDORS_CSV", raising=False)
        monkeypatch.delenv("CHECKPOINT_OVERLAP_DAYS", raising=False)
        monkeypatch.delenv("CHECKPOINT_FALLBACK_DAYS", raising=False)

        settings = _settings()

        assert settings.sync_rate_limited_vendors == frozenset({"isracard", "amex"})
        assert settings.checkpoint_policy.overlap_days == 2
        assert settings.checkpoint_policy.fallback_days == 90

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("SYNC_RATE_LIMITED_VENDORS_CSV", " Isracard , visaCal,")
        monkeypatch.setenv("CHECKPOINT_OVERLAP_DAYS", "5")

        settings = _settings()

        assert settings.sync_rate_limited_vendors == frozenset({"isracard", "visacal"})
        assert settings.checkpoint_policy.overlap_days == 5

    def test_list_values_become_csv(self):
        settings = _settings(api_cors_origins=["http://a", "http://b"])

        assert settings.cors_origins == ["http://a", "http://b"]

    def test_database_url(self):
        settings = _settings(
            postgres_user="u",
            postgres_password="p",
            postgres_host="db",
            postgres_port=5433,
            postgres_db="money",
            database_url_override=None,
        )

        assert settings.database_url == "postgresql+asyncpg://u:p@db:5433/money"

    def test_database_url_override(self):
        settings = _settings(database_url_override="sqlite+aiosqlite:///tmp/x.db")

        assert settings.database_url == "sqlite+aiosqlite:///tmp/x.db"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"sync_vendor_delay_min_seconds": 9, "sync_vendor_delay_max_seconds": 2},
            {"duplicate_exact_threshold": 1.5},
            {"sync_notification_buffer_size": 0},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValidationError):
            _settings(**overrides)

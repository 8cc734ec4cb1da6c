"""Unit tests for configuration settings."""

import pytest
from pydantic import ValidationError

from pbmigrate.core.config import Settings, get_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in (
        "PBMIGRATE_DATABASE_URL",
        "PBMIGRATE_MIGRATIONS_DIR",
        "PBMIGRATE_ENVIRONMENT",
        "PBMIGRATE_LOG_LEVEL",
        "PBMIGRATE_LOCK_OWNER",
    ):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.database_url == "sqlite+aiosqlite:///./pb_data/data.db"
    assert settings.migrations_dir == "./pb_migrations"
    assert settings.is_development is True
    assert settings.log_format == "json"
    assert ":" in settings.lock_owner


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PBMIGRATE_MIGRATIONS_DIR", "/srv/migrations")
    monkeypatch.setenv("PBMIGRATE_ENVIRONMENT", "production")
    monkeypatch.setenv("PBMIGRATE_LOCK_OWNER", "deploy-1")

    settings = get_settings()

    assert settings.migrations_dir == "/srv/migrations"
    assert settings.is_production is True
    assert settings.lock_owner == "deploy-1"


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_empty_migrations_dir_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, migrations_dir="  ")


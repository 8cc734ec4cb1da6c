"""Configuration management for pbmigrate.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded once per
process and is immutable during a migration run.
"""

import os
import socket
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_lock_owner() -> str:
    return f"{socket.gethostname()}:{os.getpid()}"


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PBMIGRATE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "pbmigrate"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./pb_data/data.db"
    db_echo: bool = False

    # Migration Settings
    migrations_dir: str = "./pb_migrations"
    lock_owner: str = Field(
        default_factory=_default_lock_owner,
        description="Identifier written to the run lock (defaults to host:pid)",
    )

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("migrations_dir")
    @classmethod
    def validate_migrations_dir(cls, v: str) -> str:
        """Reject an empty migrations directory."""
        if not v.strip():
            raise ValueError("migrations_dir must not be empty")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()

"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables or a local .env file.
"""

from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "MultiVote"
    APP_ENV: str = "development"
    DEBUG: bool = False
    SECRET_KEY: str = ""  # Required - loaded from environment

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_required_secrets(cls, v: str, info: Any) -> str:
        """Validate that required secrets are set."""
        if not v:
            raise ValueError(f"{info.field_name} must be set in environment")
        return v

    # Authentication
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Election lifecycle
    ELECTION_DURATION_HOURS: int = 8  # Voting window opened by start()
    # When False a repeated start() on a running election is a no-op.
    # When True it re-stamps the end time from now.
    ELECTION_RESTART_EXTENDS_WINDOW: bool = False

    # Super admin bootstrap record, written once on first access
    SUPER_ADMIN_ID: str = "superadmin"
    SUPER_ADMIN_NAME: str = "Super Admin"
    SUPER_ADMIN_PASSWORD: str = "super123"  # Weak on purpose, change after first login

    DEFAULT_USER_IMAGE: str = "https://i.pravatar.cc/150?u=default"

    # Persistence
    STORAGE_BACKEND: str = "memory"  # memory or file
    STORAGE_PATH: str = "data/election_store.json"
    STORAGE_LOCK_TIMEOUT_SECONDS: float = 10.0  # Wait for the file lock held by another process

    # CORS - stored as comma-separated string to avoid pydantic-settings JSON parsing issues
    CORS_ORIGINS: str = "http://localhost:3000"

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        import json

        try:
            return json.loads(self.CORS_ORIGINS)
        except json.JSONDecodeError:
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def election_duration_ms(self) -> int:
        """Voting window length in milliseconds."""
        return self.ELECTION_DURATION_HOURS * 60 * 60 * 1000


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()

"""
Configuration settings for the Refit project manager.
All values can be overridden from environment variables or a .env file.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "Refit Project Manager"
    debug: bool = False
    environment: str = "production"  # development enables the data reset control

    # Storage
    storage_backend: str = "json"  # memory, json, sql, redis
    storage_path: str = "refit_data.json"
    database_url: str = "sqlite:///refit.db"
    redis_url: str = "redis://localhost:6379"
    storage_key_prefix: str = "refit_"
    storage_quota_bytes: int = Field(default=5 * 1024 * 1024, ge=0)

    # Locale
    timezone: str = "Europe/Rome"
    currency: str = "EUR"

    # Activity feed
    activity_retention_days: int = Field(default=30, ge=0)

    # Automatic notifications
    notification_dedupe_hours: int = Field(default=24, ge=0)
    deadline_warning_days: int = Field(default=3, ge=1)
    overload_threshold: float = 90.0

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev")


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the application settings."""
    return settings

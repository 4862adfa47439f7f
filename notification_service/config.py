"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    app_timezone: str = Field(
        default="UTC",
        description="IANA timezone used for stored timestamps",
    )
    scheduler_enabled: bool = Field(
        default=False,
        description="Start the retention sweep scheduler together with the API",
    )
    retention_dismissed_days: int = Field(
        default=7, gt=0, description="Age in days after which dismissed receipts are purged"
    )
    retention_read_days: int = Field(
        default=90, gt=0, description="Age in days after which read receipts are purged"
    )
    retention_unread_days: int = Field(
        default=180, gt=0, description="Age in days after which unread receipts are purged"
    )
    cleanup_expired_interval_minutes: int = Field(
        default=60, gt=0, description="Interval between expired-notification sweeps"
    )
    cleanup_dismissed_interval_days: int = Field(
        default=7, gt=0, description="Interval between dismissed-receipt sweeps"
    )
    cleanup_read_interval_days: int = Field(
        default=90, gt=0, description="Interval between read-receipt sweeps"
    )
    cleanup_unread_interval_days: int = Field(
        default=180, gt=0, description="Interval between unread-receipt sweeps"
    )
    default_page_size: int = Field(
        default=20, gt=0, description="Page size used when a search omits it"
    )
    max_page_size: int = Field(
        default=100, gt=0, description="Largest page size a search may request"
    )
    counts_cache_ttl_seconds: int = Field(
        default=60,
        ge=0,
        description="Seconds a computed badge count stays cached (0 disables caching)",
    )

    @model_validator(mode="after")
    def _validate_page_sizes(self) -> "Settings":
        if self.default_page_size > self.max_page_size:
            raise ValueError("DEFAULT_PAGE_SIZE must not exceed MAX_PAGE_SIZE")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]

"""Configuration management for the task scheduler."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="production", description="Deployment environment reported to Logfire")

    # Scheduling Configuration
    skip_lookahead_limit: int = Field(
        default=365,
        gt=0,
        description="Maximum number of recurrence steps taken over skipped dates before giving up",
    )
    upcoming_occurrences_default: int = Field(
        default=10, gt=0, description="Number of occurrences listed when no count is given"
    )


# Application Constants
class Constants:
    """Application-wide constants."""

    # Calendar dates stored in skipped_dates
    DATE_FORMAT: str = "%Y-%m-%d"
    DATE_PATTERN: str = r"^\d{4}-\d{2}-\d{2}$"


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()

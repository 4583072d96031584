"""
Configuration Utility - Environment Variables Management

Centralized configuration loading from .env files using pydantic-settings.
Type-safe access to all environment variables with validation.

Usage:
    from utils.config import settings

    api_base = settings.API_BASE_URL
    page_size = settings.PAGE_SIZE

Components accept an optional Settings instance and fall back to the
global one, so tests can build their own:

    client = PatientApiClient(Settings(API_KEY="test-key", PAGE_DELAY=0))
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Patient API Configuration
    API_BASE_URL: str = Field(default="https://assessment.ksensetech.com/api")
    API_KEY: str = Field(default="")
    API_TIMEOUT: float = Field(default=30.0)

    # Retry Configuration
    FETCH_MAX_ATTEMPTS: int = Field(default=5)
    RETRY_INITIAL_DELAY: float = Field(default=1.0)

    # Pagination Configuration
    PAGE_SIZE: int = Field(default=20)
    PAGE_DELAY: float = Field(default=0.25)
    MAX_PAGES: int = Field(default=500)

    # Alert Thresholds
    HIGH_RISK_THRESHOLD: int = Field(default=4)
    FEVER_THRESHOLD: float = Field(default=99.6)

    # Scheduler Configuration
    RUN_ONCE: bool = Field(default=True)
    ASSESS_SCHEDULE_CRON: str = Field(default="0 6 * * *")

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="text")

    # Application Metadata
    ENVIRONMENT: str = Field(default="production")
    APP_NAME: str = Field(default="vitals-triage")
    APP_VERSION: str = Field(default="0.1.0")

    @field_validator("FETCH_MAX_ATTEMPTS", "PAGE_SIZE", "MAX_PAGES")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Counts must be at least 1."""
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @field_validator("RETRY_INITIAL_DELAY", "PAGE_DELAY", "API_TIMEOUT")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator("API_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "text"):
            raise ValueError("LOG_FORMAT must be 'json' or 'text'")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Singleton Settings instance
    """
    return Settings()


# Global settings instance
settings = get_settings()

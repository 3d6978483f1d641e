"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated defaults for the retry policy, the httpx clients
fetchkit opens itself, and logging. Supports .env files.

Example:
    >>> from fetchkit.config import get_settings
    >>> settings = get_settings()
    >>> settings.retry.max_retries
    3
    >>> settings.logging.level
    'INFO'

    # Or with environment variables:
    # FETCHKIT_RETRY_MAX_RETRIES=5
    # FETCHKIT_RETRY_RETRYABLE_STATUS_CODES=[429,503]
    # FETCHKIT_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import (
    Field,
    NonNegativeInt,
    PositiveFloat,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from fetchkit import __version__


class RetrySettings(BaseSettings):
    """Default retry policy configuration (delays in milliseconds)."""

    model_config = SettingsConfigDict(
        env_prefix="FETCHKIT_RETRY_",
        extra="ignore",
    )

    max_retries: NonNegativeInt = 3
    initial_delay_ms: NonNegativeInt = Field(default=1000, description="Delay after the first failure")
    max_delay_ms: NonNegativeInt = Field(default=30000, description="Delay cap before jitter")
    backoff_multiplier: PositiveFloat = Field(default=2.0, description="Exponential growth factor")
    jitter_fraction: Annotated[float, Field(ge=0.0, le=1.0)] = 0.1
    retryable_status_codes: list[int] = Field(default_factory=lambda: [408, 429, 500, 502, 503, 504])
    retryable_errors: list[str] = Field(default_factory=lambda: ["ECONNREFUSED", "ENOTFOUND", "ETIMEDOUT"])


class HttpSettings(BaseSettings):
    """Defaults for httpx clients opened by fetchkit."""

    model_config = SettingsConfigDict(
        env_prefix="FETCHKIT_HTTP_",
        extra="ignore",
    )

    timeout: PositiveFloat = Field(default=30.0, description="Default request timeout in seconds")
    verify_ssl: bool = True
    follow_redirects: bool = True
    user_agent: str = f"fetchkit/{__version__}"


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FETCHKIT_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text"] = "text"
    include_timestamps: bool = True

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class FetchkitSettings(BaseSettings):
    """Root settings for fetchkit.

    Loads configuration from environment variables with FETCHKIT_ prefix.

    Example environment variables:
        FETCHKIT_RETRY_INITIAL_DELAY_MS=250
        FETCHKIT_HTTP_TIMEOUT=60
        FETCHKIT_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="FETCHKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    # Nested settings (loaded with FETCHKIT_RETRY_, FETCHKIT_HTTP_, FETCHKIT_LOG_)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> FetchkitSettings:
    """Get the global settings instance (cached)."""
    return FetchkitSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()

"""Configuration management using pydantic-settings."""

from .settings import (
    FetchkitSettings,
    HttpSettings,
    LoggingSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "FetchkitSettings",
    "HttpSettings",
    "LoggingSettings",
    "RetrySettings",
    "clear_settings_cache",
    "get_settings",
]

"""Environment-based configuration using pydantic-settings.

Settings supply process-wide defaults. Per-call options passed to block()
always take precedence.

Example:
    >>> from nursery.foundation.config import get_settings
    >>> get_settings().thread_name_prefix
    'nursery-'
    
    # Or with environment variables:
    # NURSERY_DEFAULT_MAX_GOROUTINES=8
    # NURSERY_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Logging configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="NURSERY_LOG_",
        extra="ignore",
    )
    
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["json", "text"] = "text"
    
    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class NurserySettings(BaseSettings):
    """Root settings for nurseries.
    
    Example environment variables:
        NURSERY_DEFAULT_MAX_GOROUTINES=4
        NURSERY_THREAD_NAME_PREFIX=worker-
        NURSERY_LOG_SUPPRESSED_PANICS=false
        NURSERY_LOG_LEVEL=DEBUG
    """
    
    model_config = SettingsConfigDict(
        env_prefix="NURSERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )
    
    default_max_goroutines: PositiveInt | None = Field(
        default=None,
        description="Concurrency cap used when block() gets no with_max_goroutines option (None = unlimited)",
    )
    thread_name_prefix: str = Field(default="nursery-", description="Prefix for task thread names")
    log_suppressed_panics: bool = Field(
        default=True,
        description="Log panics that lost the first-panic race",
    )
    
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> NurserySettings:
    """Get the global settings instance (cached)."""
    return NurserySettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).
    
    The next get_settings() call reloads configuration from environment.
    """
    get_settings.cache_clear()

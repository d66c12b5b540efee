"""Configuration: environment-driven defaults via pydantic-settings."""

from .settings import LoggingSettings, NurserySettings, clear_settings_cache, get_settings

__all__ = ["LoggingSettings", "NurserySettings", "clear_settings_cache", "get_settings"]

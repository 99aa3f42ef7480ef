"""Configuration loaded from TOOLWIRE_* environment variables."""

from .settings import (
    LoggingSettings,
    MediaSettings,
    ModelSettings,
    ParallelSettings,
    ToolwireSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "ToolwireSettings",
    "LoggingSettings",
    "ParallelSettings",
    "MediaSettings",
    "ModelSettings",
    "get_settings",
    "clear_settings_cache",
]

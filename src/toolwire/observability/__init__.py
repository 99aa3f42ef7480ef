"""Structured logging for toolwire."""

from .logging import (
    BoundLogger,
    ConsoleRenderer,
    JsonRenderer,
    LogEntry,
    LogRenderer,
    NoOpRenderer,
    configure_from_settings,
    configure_logging,
    get_logger,
    log_context,
    timed,
)

__all__ = [
    "BoundLogger",
    "LogEntry",
    "LogRenderer",
    "ConsoleRenderer",
    "JsonRenderer",
    "NoOpRenderer",
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "log_context",
    "timed",
]

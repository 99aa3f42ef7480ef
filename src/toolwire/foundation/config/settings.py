"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated configuration from environment variables
with sensible defaults. Supports .env files and nested configuration.

Example:
    >>> from toolwire.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.parallel.fail_fast
    True
    >>> settings.logging.level
    'INFO'

    # Or with environment variables:
    # TOOLWIRE_PARALLEL_MAX_CONCURRENCY=4
    # TOOLWIRE_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import ByteSize, Field, PositiveFloat, PositiveInt, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TOOLWIRE_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class ParallelSettings(BaseSettings):
    """Defaults for parallel compositions."""

    model_config = SettingsConfigDict(
        env_prefix="TOOLWIRE_PARALLEL_",
        extra="ignore",
    )

    max_concurrency: PositiveInt | None = Field(
        default=None,
        description="Max stages awaited at once in async mode (None = unbounded)",
    )
    fail_fast: bool = Field(default=True, description="Re-raise the first stage failure")


class MediaSettings(BaseSettings):
    """Inline media encoding limits."""

    model_config = SettingsConfigDict(
        env_prefix="TOOLWIRE_MEDIA_",
        extra="ignore",
    )

    max_bytes: ByteSize = Field(
        default=ByteSize(20 * 1024 * 1024),
        description="Largest payload accepted for base64 inlining",
    )
    fetch_timeout: PositiveFloat = Field(default=30.0, description="Timeout for downloading media URLs")


class ModelSettings(BaseSettings):
    """Chat model defaults."""

    model_config = SettingsConfigDict(
        env_prefix="TOOLWIRE_MODEL_",
        extra="ignore",
    )

    default_model: str = "fake-chat"
    temperature: Annotated[float, Field(ge=0.0, le=2.0)] = 0.0


class ToolwireSettings(BaseSettings):
    """Root settings for toolwire.

    Loads configuration from environment variables with TOOLWIRE_ prefix.
    Supports nested configuration and .env files.

    Example environment variables:
        TOOLWIRE_DEBUG=true
        TOOLWIRE_LOG_LEVEL=DEBUG
        TOOLWIRE_PARALLEL_FAIL_FAST=false
        TOOLWIRE_MEDIA_MAX_BYTES=5MiB
    """

    model_config = SettingsConfigDict(
        env_prefix="TOOLWIRE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    debug: bool = Field(default=False, description="Enable debug mode")
    environment: Literal["development", "staging", "production"] = "development"

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    parallel: ParallelSettings = Field(default_factory=ParallelSettings)
    media: MediaSettings = Field(default_factory=MediaSettings)
    model: ModelSettings = Field(default_factory=ModelSettings)

    @field_validator("environment", mode="before")
    @classmethod
    def _normalize_env(cls, v: str) -> str:
        """Normalize environment name to lowercase."""
        return v.lower() if isinstance(v, str) else v

    @computed_field
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> ToolwireSettings:
    """Get the global settings instance (cached)."""
    return ToolwireSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()

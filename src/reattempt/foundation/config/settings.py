"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated defaults for retry strategies, timer backend
selection and logging. Supports .env files and nested configuration.

Example:
    >>> from reattempt.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.retry.kind
    'exponential'

    # Or with environment variables:
    # REATTEMPT_RETRY_BASE_DELAY=0.5
    # REATTEMPT_TIMER_BACKEND=thread
    # REATTEMPT_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Literal

from pydantic import Field, NonNegativeFloat, NonNegativeInt, PositiveFloat, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from reattempt.timer import Timer


StrategyKind = Literal["fixed", "exponential", "linear", "fibonacci"]


class RetrySettings(BaseSettings):
    """Default retry strategy configuration (defaults match ``RetryPolicy()``)."""

    model_config = SettingsConfigDict(
        env_prefix="REATTEMPT_RETRY_",
        extra="ignore",
    )

    kind: StrategyKind = "exponential"
    base_delay: NonNegativeFloat = Field(default=0.1, description="Base delay in seconds")
    max_delay: PositiveFloat | None = Field(default=None, description="Cap on any single delay in seconds, None for uncapped")
    max_retries: NonNegativeInt | None = Field(default=3, description="Retries after the first attempt, None for unlimited")
    jitter: bool = False


class TimerSettings(BaseSettings):
    """Timer backend selection."""

    model_config = SettingsConfigDict(
        env_prefix="REATTEMPT_TIMER_",
        extra="ignore",
    )

    backend: Literal["loop", "thread"] = "loop"


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="REATTEMPT_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text"] = "text"


class ReattemptSettings(BaseSettings):
    """Root settings for reattempt.

    Example environment variables:
        REATTEMPT_RETRY_KIND=fixed
        REATTEMPT_RETRY_MAX_RETRIES=3
        REATTEMPT_TIMER_BACKEND=thread
        REATTEMPT_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="REATTEMPT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    retry: RetrySettings = Field(default_factory=RetrySettings)
    timer: TimerSettings = Field(default_factory=TimerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @computed_field
    @property
    def retries_enabled(self) -> bool:
        """Whether the configured strategy allows at least one retry."""
        return self.retry.max_retries != 0


@lru_cache(maxsize=1)
def get_settings() -> ReattemptSettings:
    """Get the global settings instance (cached)."""
    return ReattemptSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    The next get_settings() call reloads configuration from the environment.
    """
    get_settings.cache_clear()


def timer_from_settings(settings: ReattemptSettings | None = None) -> Timer:
    """Build the timer backend named by settings.timer.backend."""
    from reattempt.timer import LoopTimer, ThreadTimer

    settings = settings or get_settings()
    return ThreadTimer() if settings.timer.backend == "thread" else LoopTimer()

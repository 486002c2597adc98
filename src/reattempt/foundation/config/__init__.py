"""Configuration management via pydantic-settings."""

from .settings import (
    LoggingSettings,
    ReattemptSettings,
    RetrySettings,
    StrategyKind,
    TimerSettings,
    clear_settings_cache,
    get_settings,
    timer_from_settings,
)

__all__ = [
    "ReattemptSettings",
    "RetrySettings",
    "TimerSettings",
    "LoggingSettings",
    "StrategyKind",
    "get_settings",
    "clear_settings_cache",
    "timer_from_settings",
]

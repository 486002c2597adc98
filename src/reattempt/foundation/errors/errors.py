"""Exceptions raised by reattempt itself.

Action failures are never wrapped in these types: the driver always hands
back the action's own failure value. These exceptions cover misuse of the
library (bad strategy parameters, illegal session transitions) and an
unavailable timer.
"""

from __future__ import annotations


class ReattemptError(Exception):
    """Base exception for all errors raised by reattempt."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class StrategyError(ReattemptError, ValueError):
    """Raised when a strategy is built with invalid parameters.

    Negative durations, negative retry counts and non-numeric delays all end
    up here. Subclasses ValueError so plain ``except ValueError`` keeps working.
    """


class TimerError(ReattemptError, RuntimeError):
    """Raised when a timer cannot schedule a suspension (e.g. it was closed)."""


class RetryStateError(ReattemptError, RuntimeError):
    """Raised on an illegal retry session transition."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move retry session from {current!r} to {target!r}")
        self.current = current
        self.target = target

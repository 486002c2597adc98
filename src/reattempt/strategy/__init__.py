"""Retry strategies: lazy, composable sequences of delays.

Example:
    >>> from reattempt.strategy import ExponentialBackoff
    >>> strategy = (
    ...     ExponentialBackoff.from_millis(10)
    ...     .limit_delay(1.0)
    ...     .jitter()
    ...     .limit_retries(3)
    ... )
    >>> len(strategy.take(10))
    3
"""

from .combinators import Jitter, LimitDelay, LimitRetries, jitter
from .intervals import ExponentialBackoff, FibonacciBackoff, FixedInterval, LinearBackoff
from .sequence import MAX_DURATION, DurationLike, FromIterable, Strategy, to_duration

__all__ = [
    # Base
    "Strategy", "FromIterable", "DurationLike", "MAX_DURATION", "to_duration",
    # Concrete strategies
    "FixedInterval", "ExponentialBackoff", "LinearBackoff", "FibonacciBackoff",
    # Combinators
    "LimitDelay", "LimitRetries", "Jitter", "jitter",
]

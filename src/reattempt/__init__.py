"""reattempt - Composable async retry strategies.

Retrying is split into three independent pieces:
- Strategy: a lazy sequence of delays (what delay comes next)
- Retry driver: re-invokes an action on failure (how retries are driven)
- Timer: turns a delay into an awaitable suspension (how time is measured)

Quick Start:
    >>> from reattempt import ExponentialBackoff, LoopTimer
    >>>
    >>> strategy = (
    ...     ExponentialBackoff.from_millis(10)
    ...     .limit_delay(1.0)
    ...     .jitter()
    ...     .limit_retries(3)
    ... )
    >>> result = await strategy.run(LoopTimer(), fetch_page)
    >>> result.unwrap()

Decorator:
    >>> from reattempt import RetryPolicy, retry
    >>>
    >>> @retry(RetryPolicy(kind="fixed", base_delay=0.5, max_retries=5))
    ... async def fetch_page() -> str: ...

Dedicated timer thread:
    >>> from reattempt import ThreadTimer
    >>> with ThreadTimer() as timer:
    ...     result = asyncio.run(Retry(strategy, fetch_page, timer=timer).run())
"""

from __future__ import annotations

__version__ = "0.1.0"

from .driver import Retry, RetrySession, RetryState, retry, run
from .foundation.config import ReattemptSettings, get_settings, timer_from_settings
from .foundation.errors import Err, Ok, ReattemptError, Result, RetryStateError, StrategyError, TimerError
from .foundation.logging import configure_logging
from .policy import NO_RETRY, RetryPolicy
from .strategy import (
    MAX_DURATION,
    ExponentialBackoff,
    FibonacciBackoff,
    FixedInterval,
    Jitter,
    LimitDelay,
    LimitRetries,
    LinearBackoff,
    Strategy,
    jitter,
)
from .timer import LoopTimer, ThreadTimer, Timer, default_timer

__all__ = [
    "__version__",
    # Strategies
    "Strategy", "FixedInterval", "ExponentialBackoff", "LinearBackoff", "FibonacciBackoff", "MAX_DURATION",
    # Combinators
    "LimitDelay", "LimitRetries", "Jitter", "jitter",
    # Driver
    "Retry", "RetrySession", "RetryState", "retry", "run",
    # Policy
    "RetryPolicy", "NO_RETRY",
    # Timers
    "Timer", "LoopTimer", "ThreadTimer", "default_timer",
    # Errors
    "Result", "Ok", "Err", "ReattemptError", "StrategyError", "TimerError", "RetryStateError",
    # Config & logging
    "ReattemptSettings", "get_settings", "timer_from_settings", "configure_logging",
]

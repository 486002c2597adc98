"""Strategy decorators.

Each combinator wraps an inner strategy and owns it exclusively:
- LimitDelay: Caps every delay, keeps the length
- LimitRetries: Caps the length, keeps the delays
- Jitter: Full jitter, uniform in [0, delay]

Order matters only for what each step sees: ``jitter().limit_retries(3)`` and
``limit_retries(3).jitter()`` both allow three retries.
"""

from __future__ import annotations

import random
from datetime import timedelta
from typing import TYPE_CHECKING

from reattempt.foundation.errors import StrategyError

from .sequence import DurationLike, Strategy, to_duration

if TYPE_CHECKING:
    from collections.abc import Iterable


def jitter(duration: timedelta, rng: random.Random | None = None) -> timedelta:
    """Uniformly random duration in [0, duration].

    Uses the module-level ``random`` functions unless an explicit generator is
    passed. Usable directly with ``map`` over any iterable of delays.
    """
    r = (rng or random).random()
    # timedelta * float rounds to the microsecond and never exceeds the input for r < 1
    return duration * r


class LimitDelay(Strategy):
    """Yields ``min(delay, cap)`` for every inner delay."""

    __slots__ = ("_inner", "cap")

    def __init__(self, inner: Iterable[DurationLike], cap: DurationLike) -> None:
        self._inner = Strategy.from_iterable(inner)
        self.cap = to_duration(cap)

    def __next__(self) -> timedelta:
        return min(next(self._inner), self.cap)

    def __repr__(self) -> str:
        return f"{self._inner!r}.limit_delay({self.cap!r})"


class LimitRetries(Strategy):
    """Yields at most ``count`` inner delays, then stops.

    A count of zero never pulls from the inner strategy.
    """

    __slots__ = ("_inner", "count", "_remaining")

    def __init__(self, inner: Iterable[DurationLike], count: int) -> None:
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise StrategyError(f"Retry count must be a non-negative integer, got {count!r}")
        self._inner = Strategy.from_iterable(inner)
        self.count = count
        self._remaining = count

    @property
    def remaining(self) -> int:
        return self._remaining

    def __next__(self) -> timedelta:
        if self._remaining <= 0:
            raise StopIteration
        value = next(self._inner)
        self._remaining -= 1
        return value

    def __repr__(self) -> str:
        return f"{self._inner!r}.limit_retries({self.count})"


class Jitter(Strategy):
    """Replaces each inner delay with ``jitter(delay)``."""

    __slots__ = ("_inner", "_rng")

    def __init__(self, inner: Iterable[DurationLike], rng: random.Random | None = None) -> None:
        self._inner = Strategy.from_iterable(inner)
        self._rng = rng

    def __next__(self) -> timedelta:
        return jitter(next(self._inner), self._rng)

    def __repr__(self) -> str:
        return f"{self._inner!r}.jitter()"

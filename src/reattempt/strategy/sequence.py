"""Lazy duration sequences: the seed abstraction every retry strategy implements.

A Strategy is an iterator of ``timedelta`` values. Each failed attempt pulls
exactly one value; ``StopIteration`` means the strategy is exhausted and no
further attempt will be made. Strategies are single-use: re-running a retry
requires building a new strategy.

Decorators (delay cap, retry cap, jitter) are themselves strategies wrapping
another one, so the fluent methods below can be chained in any order:

    >>> s = ExponentialBackoff.from_millis(10).limit_delay(timedelta(seconds=1)).jitter().limit_retries(5)
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Iterable, Iterator
from datetime import timedelta
from itertools import islice
from typing import TYPE_CHECKING, Callable, TypeVar

from reattempt.foundation.errors import StrategyError

if TYPE_CHECKING:
    import random
    from collections.abc import Awaitable

    from reattempt.driver import OnRetry
    from reattempt.foundation.errors import Result
    from reattempt.strategy.combinators import Jitter, LimitDelay, LimitRetries
    from reattempt.timer import Timer

T = TypeVar("T")
E = TypeVar("E")

MAX_DURATION: timedelta = timedelta.max
"""Largest representable delay; growth strategies saturate here."""

DurationLike = timedelta | float | int


def to_duration(value: DurationLike) -> timedelta:
    """Coerce seconds or a timedelta to a non-negative timedelta.

    Raises:
        StrategyError: If the value is negative, not a number, or out of range
    """
    if isinstance(value, timedelta):
        duration = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            duration = timedelta(seconds=value)
        except (OverflowError, ValueError) as e:
            raise StrategyError(f"Duration out of range: {value!r}") from e
    else:
        raise StrategyError(f"Expected timedelta or seconds, got {type(value).__name__}")
    if duration < timedelta(0):
        raise StrategyError(f"Duration must not be negative, got {duration}")
    return duration


def saturating_mul(duration: timedelta, factor: int | float) -> timedelta:
    """Multiply a duration, clamping to MAX_DURATION instead of overflowing."""
    try:
        return min(duration * factor, MAX_DURATION)
    except OverflowError:
        return MAX_DURATION


def saturating_add(left: timedelta, right: timedelta) -> timedelta:
    """Add two durations, clamping to MAX_DURATION instead of overflowing."""
    try:
        return left + right
    except OverflowError:
        return MAX_DURATION


class Strategy(Iterator[timedelta]):
    """Base class for all duration sequences.

    Subclasses implement ``__next__``. Every fluent method returns a new
    strategy that takes exclusive ownership of ``self``; do not keep pulling
    from a strategy after wrapping it.
    """

    __slots__ = ()

    def __iter__(self) -> Strategy:
        return self

    @abstractmethod
    def __next__(self) -> timedelta:
        """Return the next delay or raise StopIteration when exhausted."""

    # ─────────────────────────────────────────────────────────────────
    # Fluent combinators
    # ─────────────────────────────────────────────────────────────────

    def limit_delay(self, cap: DurationLike) -> LimitDelay:
        """Cap every yielded delay at ``cap``. Does not change the length."""
        from .combinators import LimitDelay
        return LimitDelay(self, cap)

    def limit_retries(self, count: int) -> LimitRetries:
        """Yield at most ``count`` delays, i.e. allow ``count`` retries."""
        from .combinators import LimitRetries
        return LimitRetries(self, count)

    def jitter(self, rng: random.Random | None = None) -> Jitter:
        """Replace every delay with a uniform random draw from [0, delay]."""
        from .combinators import Jitter
        return Jitter(self, rng)

    def map(self, f: Callable[[timedelta], timedelta]) -> Strategy:
        """Apply an arbitrary delay transformation."""
        return FromIterable(map(f, self))

    # ─────────────────────────────────────────────────────────────────
    # Consumption
    # ─────────────────────────────────────────────────────────────────

    def take(self, count: int) -> list[timedelta]:
        """Pull up to ``count`` delays. Consumes them from this strategy."""
        return list(islice(self, count))

    async def run(
        self,
        timer: Timer | None,
        action: Callable[[], Awaitable[T | Result[T, E]]],
        *,
        on_retry: OnRetry | None = None,
    ) -> Result[T, object]:
        """Drive ``action`` with this strategy. See reattempt.driver.Retry."""
        from reattempt.driver import Retry
        return await Retry(self, action, timer=timer, on_retry=on_retry).run()

    @staticmethod
    def from_iterable(delays: Iterable[DurationLike]) -> Strategy:
        """Wrap any iterable of delays (seconds or timedeltas) as a Strategy."""
        return delays if isinstance(delays, Strategy) else FromIterable(delays)


class FromIterable(Strategy):
    """Adapter turning a plain iterable into a Strategy."""

    __slots__ = ("_it",)

    def __init__(self, delays: Iterable[DurationLike]) -> None:
        self._it: Iterator[DurationLike] = iter(delays)

    def __next__(self) -> timedelta:
        return to_duration(next(self._it))

    def __repr__(self) -> str:
        return f"FromIterable({self._it!r})"

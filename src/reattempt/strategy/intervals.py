"""Concrete retry strategies.

Provides the base delay generators every combinator chain starts from:
- FixedInterval: The same delay forever
- ExponentialBackoff: base, 2*base, 4*base, ... (doubling)
- LinearBackoff: base, base+inc, base+2*inc, ...
- FibonacciBackoff: base, base, 2*base, 3*base, 5*base, ...

All of them are infinite; bound them with ``limit_retries``. Growth strategies
saturate at MAX_DURATION rather than overflowing.
"""

from __future__ import annotations

from datetime import timedelta

from .sequence import MAX_DURATION, DurationLike, Strategy, saturating_add, saturating_mul, to_duration


class _FromUnits:
    """Alternate constructors shared by all single-base strategies."""

    __slots__ = ()

    @classmethod
    def from_millis(cls, millis: float):  # noqa: ANN206 - returns cls
        return cls(millis / 1000)

    @classmethod
    def from_seconds(cls, seconds: float):  # noqa: ANN206 - returns cls
        return cls(seconds)


class FixedInterval(_FromUnits, Strategy):
    """Yields the same delay forever.

    Example:
        >>> [d.total_seconds() for d in FixedInterval.from_millis(100).take(3)]
        [0.1, 0.1, 0.1]
    """

    __slots__ = ("interval",)

    def __init__(self, interval: DurationLike) -> None:
        self.interval = to_duration(interval)

    def __next__(self) -> timedelta:
        return self.interval

    def __repr__(self) -> str:
        return f"FixedInterval({self.interval!r})"


class ExponentialBackoff(_FromUnits, Strategy):
    """Doubling delays starting at ``base``.

    The n-th value (0-indexed) is ``base * 2**n``. Once the product no longer
    fits in a timedelta every further value is MAX_DURATION.
    """

    __slots__ = ("base", "_current")

    def __init__(self, base: DurationLike) -> None:
        self.base = to_duration(base)
        self._current = self.base

    def __next__(self) -> timedelta:
        value = self._current
        self._current = saturating_mul(value, 2)
        return value

    def __repr__(self) -> str:
        return f"ExponentialBackoff(base={self.base!r})"


class LinearBackoff(_FromUnits, Strategy):
    """Delays growing by a constant increment (defaults to ``base``)."""

    __slots__ = ("base", "increment", "_current")

    def __init__(self, base: DurationLike, increment: DurationLike | None = None) -> None:
        self.base = to_duration(base)
        self.increment = self.base if increment is None else to_duration(increment)
        self._current = self.base

    def __next__(self) -> timedelta:
        value = self._current
        self._current = saturating_add(value, self.increment)
        return value

    def __repr__(self) -> str:
        return f"LinearBackoff(base={self.base!r}, increment={self.increment!r})"


class FibonacciBackoff(_FromUnits, Strategy):
    """Delays following the Fibonacci sequence scaled by ``base``."""

    __slots__ = ("base", "_current", "_next")

    def __init__(self, base: DurationLike) -> None:
        self.base = to_duration(base)
        self._current, self._next = self.base, self.base

    def __next__(self) -> timedelta:
        value = self._current
        self._current, self._next = self._next, saturating_add(self._current, self._next)
        return value

    def __repr__(self) -> str:
        return f"FibonacciBackoff(base={self.base!r})"


__all__ = ["FixedInterval", "ExponentialBackoff", "LinearBackoff", "FibonacciBackoff", "MAX_DURATION"]

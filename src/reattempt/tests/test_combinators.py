"""Tests for strategy combinators (limit_delay, limit_retries, jitter)."""

from __future__ import annotations

import random
from collections.abc import Iterator
from datetime import timedelta

import pytest

from reattempt.foundation.errors import StrategyError
from reattempt.strategy import (
    MAX_DURATION,
    ExponentialBackoff,
    FixedInterval,
    Jitter,
    LimitDelay,
    LimitRetries,
    Strategy,
    jitter,
)

MS = timedelta(milliseconds=1)


def counting(pulls: list[int], delay: timedelta = timedelta(0)) -> Iterator[timedelta]:
    """Infinite delay source recording every pull."""
    while True:
        pulls.append(len(pulls))
        yield delay


# ─────────────────────────────────────────────────────────────────────────────
# limit_delay
# ─────────────────────────────────────────────────────────────────────────────


class TestLimitDelay:
    def test_never_exceeds_cap(self) -> None:
        values = ExponentialBackoff.from_millis(1).limit_delay(timedelta(milliseconds=100)).take(50)

        assert max(values) == 100 * MS
        assert all(v <= 100 * MS for v in values)

    def test_preserves_length(self) -> None:
        values = Strategy.from_iterable([0.5, 2, 3]).limit_delay(1).take(10)

        assert values == [timedelta(seconds=0.5), timedelta(seconds=1), timedelta(seconds=1)]

    def test_values_below_cap_pass_through(self) -> None:
        assert ExponentialBackoff.from_millis(10).limit_delay(1).take(3) == [10 * MS, 20 * MS, 40 * MS]

    def test_caps_saturated_values(self) -> None:
        strategy = FixedInterval(MAX_DURATION).limit_delay(timedelta(hours=1))
        assert next(strategy) == timedelta(hours=1)

    def test_negative_cap_rejected(self) -> None:
        with pytest.raises(StrategyError):
            FixedInterval(1).limit_delay(-1)

    def test_wraps_plain_iterables(self) -> None:
        assert LimitDelay([3, 0.2], 1).take(5) == [timedelta(seconds=1), timedelta(seconds=0.2)]


# ─────────────────────────────────────────────────────────────────────────────
# limit_retries
# ─────────────────────────────────────────────────────────────────────────────


class TestLimitRetries:
    @pytest.mark.parametrize("count", [0, 1, 3, 17])
    def test_caps_infinite_sequence(self, count: int) -> None:
        assert len(FixedInterval(0).limit_retries(count).take(100)) == count

    @pytest.mark.parametrize("count,expected", [(0, 0), (2, 2), (5, 3), (9, 3)])
    def test_yields_min_of_count_and_length(self, count: int, expected: int) -> None:
        strategy = Strategy.from_iterable([1, 2, 3]).limit_retries(count)
        assert len(strategy.take(100)) == expected

    def test_zero_never_pulls_inner(self) -> None:
        pulls: list[int] = []
        strategy = LimitRetries(counting(pulls), 0)

        assert strategy.take(10) == []
        assert pulls == []

    def test_pulls_exactly_count_values(self) -> None:
        pulls: list[int] = []
        strategy = LimitRetries(counting(pulls), 2)

        strategy.take(10)
        strategy.take(10)

        assert len(pulls) == 2
        assert strategy.remaining == 0

    def test_stays_exhausted(self) -> None:
        strategy = FixedInterval(1).limit_retries(1)
        next(strategy)

        for _ in range(3):
            with pytest.raises(StopIteration):
                next(strategy)

    @pytest.mark.parametrize("bad", [-1, 1.5, "3", None, True])
    def test_invalid_count_rejected(self, bad: object) -> None:
        with pytest.raises(StrategyError):
            FixedInterval(1).limit_retries(bad)  # type: ignore[arg-type]


# ─────────────────────────────────────────────────────────────────────────────
# jitter
# ─────────────────────────────────────────────────────────────────────────────


class TestJitter:
    def test_values_within_zero_and_original(self) -> None:
        """Statistical property over 10,000 draws."""
        original = timedelta(milliseconds=100)
        values = FixedInterval(original).jitter().take(10_000)

        assert all(timedelta(0) <= v <= original for v in values)
        assert len(set(values)) > 1

    def test_covers_the_range(self) -> None:
        values = FixedInterval(1).jitter().take(10_000)
        mean = sum(v.total_seconds() for v in values) / len(values)

        assert min(values) < timedelta(seconds=0.05)
        assert max(values) > timedelta(seconds=0.95)
        assert 0.4 < mean < 0.6

    def test_each_value_bounded_by_its_own_original(self) -> None:
        originals = ExponentialBackoff.from_millis(1).take(30)
        jittered = ExponentialBackoff.from_millis(1).jitter().take(30)

        assert all(timedelta(0) <= j <= o for j, o in zip(jittered, originals))

    def test_zero_stays_zero(self) -> None:
        assert FixedInterval(0).jitter().take(5) == [timedelta(0)] * 5

    def test_max_duration_does_not_overflow(self) -> None:
        for _ in range(100):
            assert timedelta(0) <= jitter(MAX_DURATION) <= MAX_DURATION

    def test_seeded_rng_is_reproducible(self) -> None:
        a = Jitter(FixedInterval(1), random.Random(7)).take(20)
        b = FixedInterval(1).jitter(random.Random(7)).take(20)
        assert a == b

    def test_draws_are_independent(self) -> None:
        values = FixedInterval(1).jitter(random.Random(3)).take(50)
        assert len(set(values)) > 45

    def test_jitter_function_maps_over_iterables(self) -> None:
        values = list(map(jitter, [timedelta(seconds=1)] * 100))
        assert all(timedelta(0) <= v <= timedelta(seconds=1) for v in values)


# ─────────────────────────────────────────────────────────────────────────────
# Composition
# ─────────────────────────────────────────────────────────────────────────────


class TestComposition:
    def test_jitter_then_limit_retries(self) -> None:
        values = FixedInterval(1).jitter().limit_retries(3).take(10)

        assert len(values) == 3
        assert all(v <= timedelta(seconds=1) for v in values)

    def test_limit_retries_then_jitter(self) -> None:
        values = FixedInterval(1).limit_retries(3).jitter().take(10)

        assert len(values) == 3
        assert all(v <= timedelta(seconds=1) for v in values)

    def test_cap_then_jitter_bounded_by_cap(self) -> None:
        values = ExponentialBackoff(1).limit_delay(2).jitter().take(100)
        assert all(v <= timedelta(seconds=2) for v in values)

    def test_jitter_then_cap_bounded_by_cap(self) -> None:
        values = ExponentialBackoff(1).jitter().limit_delay(2).take(100)
        assert all(v <= timedelta(seconds=2) for v in values)

    def test_each_combinator_returns_new_strategy(self) -> None:
        base = FixedInterval(1)
        capped = base.limit_delay(0.5)
        limited = capped.limit_retries(2)

        assert capped is not base
        assert limited is not capped
        assert isinstance(limited, LimitRetries)

    def test_repr_shows_chain(self) -> None:
        text = repr(FixedInterval(1).limit_delay(0.5).jitter().limit_retries(2))

        assert text.startswith("FixedInterval(")
        assert text.endswith(".limit_delay(datetime.timedelta(microseconds=500000)).jitter().limit_retries(2)")

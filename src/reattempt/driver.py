"""Retry driver: re-invokes a fallible async action according to a strategy.

The driver pulls one delay per failure, suspends on a Timer for that delay
and tries again. It stops on the first success or when the strategy is
exhausted, resolving to ``Ok(value)`` or ``Err(last_failure)``.

Failures are either exceptions raised by the action or ``Err`` values it
returns. They are never inspected or classified; only the most recent one is
kept. Cancellation (``asyncio.CancelledError``) is not a failure and always
propagates.

Example:
    >>> strategy = FixedInterval.from_millis(10).limit_retries(3)
    >>> result = await Retry(strategy, fetch_page).run()
    >>> page = result.unwrap()

    >>> @retry(lambda: ExponentialBackoff.from_millis(50).limit_retries(5))
    ... async def fetch_page() -> str: ...
"""

from __future__ import annotations

import functools
import inspect
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from enum import StrEnum
from typing import TYPE_CHECKING, Awaitable, Callable, Generic, ParamSpec, TypeVar, Union

from reattempt.foundation.errors import Err, Ok, Result, RetryStateError
from reattempt.strategy import Strategy
from reattempt.timer import default_timer

if TYPE_CHECKING:
    from collections.abc import Iterable

    from reattempt.policy import RetryPolicy
    from reattempt.strategy import DurationLike
    from reattempt.timer import Timer

logger = logging.getLogger("reattempt.driver")

P = ParamSpec("P")
T = TypeVar("T")

Action = Callable[[], Awaitable[Union[T, Result[T, object]]]]
OnRetry = Callable[[int, object, timedelta], None]
"""Callback(retry_index, failure, delay) invoked before each suspension."""


class RetryState(StrEnum):
    """Lifecycle of one retry session."""
    ATTEMPTING = "attempting"
    WAITING = "waiting"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


_TRANSITIONS: dict[RetryState, frozenset[RetryState]] = {
    RetryState.ATTEMPTING: frozenset({RetryState.SUCCEEDED, RetryState.WAITING, RetryState.EXHAUSTED}),
    RetryState.WAITING: frozenset({RetryState.ATTEMPTING}),
    RetryState.SUCCEEDED: frozenset(),
    RetryState.EXHAUSTED: frozenset(),
}


@dataclass(slots=True)
class RetrySession:
    """Mutable state of a single ``run``.

    Attributes:
        state: Current lifecycle state
        attempts: Number of action invocations so far
        last_error: Most recent failure (earlier ones are discarded)
        delays: Delays actually waited, in order
    """

    state: RetryState = RetryState.ATTEMPTING
    attempts: int = 0
    last_error: object | None = None
    delays: list[timedelta] = field(default_factory=list)

    @property
    def done(self) -> bool:
        return not _TRANSITIONS[self.state]

    @property
    def retries(self) -> int:
        return len(self.delays)

    def transition(self, target: RetryState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise RetryStateError(self.state.value, target.value)
        self.state = target


class Retry(Generic[T]):
    """One retry session over ``action`` driven by ``strategy``.

    A Retry runs once; the strategy it consumes is single-use as well.

    Args:
        strategy: Strategy or any iterable of delays (seconds or timedeltas)
        action: Zero-argument callable returning a fresh awaitable per call
        timer: Timer backend (default: process-wide LoopTimer)
        on_retry: Optional callback(retry_index, failure, delay)
        name: Label used in log messages
    """

    __slots__ = ("_strategy", "_action", "_timer", "_on_retry", "_name", "_session", "_started")

    def __init__(
        self,
        strategy: Iterable[DurationLike],
        action: Action[T],
        *,
        timer: Timer | None = None,
        on_retry: OnRetry | None = None,
        name: str | None = None,
    ) -> None:
        self._strategy = Strategy.from_iterable(strategy)
        self._action = action
        self._timer = timer if timer is not None else default_timer()
        self._on_retry = on_retry
        self._name = name or getattr(action, "__qualname__", None) or type(action).__name__
        self._session = RetrySession()
        self._started = False

    @property
    def session(self) -> RetrySession:
        return self._session

    @classmethod
    async def spawn(
        cls,
        strategy: Iterable[DurationLike],
        action: Action[T],
        *,
        timer: Timer | None = None,
        on_retry: OnRetry | None = None,
    ) -> Result[T, object]:
        """Build a session and run it."""
        return await cls(strategy, action, timer=timer, on_retry=on_retry).run()

    async def run(self) -> Result[T, object]:
        """Drive attempts until success or strategy exhaustion.

        Raises:
            RetryStateError: If this session has already been run
            TypeError: If the action does not return an awaitable
            Exception: Whatever the timer raises; timer failures are not retried
        """
        if self._started:
            raise RetryStateError(self._session.state.value, RetryState.ATTEMPTING.value)
        self._started = True
        session = self._session

        while True:
            session.attempts += 1
            outcome = await self._attempt()
            if outcome.is_ok():
                session.transition(RetryState.SUCCEEDED)
                if session.retries:
                    logger.debug(f"[{self._name}] Succeeded after {session.attempts} attempts")
                return outcome

            session.last_error = failure = outcome.unwrap_err()
            delay = next(self._strategy, None)
            if delay is None:
                session.transition(RetryState.EXHAUSTED)
                logger.warning(f"[{self._name}] Giving up after {session.attempts} attempts: {failure!r}")
                return outcome

            session.transition(RetryState.WAITING)
            logger.info(
                f"[{self._name}] Retry {session.retries + 1} "
                f"after {delay.total_seconds():.3f}s ({failure!r})"
            )
            if self._on_retry:
                self._on_retry(session.retries, failure, delay)
            await self._timer.sleep(delay)
            session.delays.append(delay)
            session.transition(RetryState.ATTEMPTING)

    async def _attempt(self) -> Result[T, object]:
        awaitable = self._action()
        if not inspect.isawaitable(awaitable):
            raise TypeError(f"[{self._name}] action returned {type(awaitable).__name__}, expected an awaitable")
        try:
            value = await awaitable
        except Exception as e:  # noqa: BLE001 - every action failure is retryable
            return Err(e)
        return value if isinstance(value, Result) else Ok(value)

    def __repr__(self) -> str:
        return f"Retry({self._name}, {self._strategy!r}, state={self._session.state.value})"


async def run(
    timer: Timer | None,
    strategy: Iterable[DurationLike],
    action: Action[T],
    *,
    on_retry: OnRetry | None = None,
) -> Result[T, object]:
    """Functional entry point: ``await run(timer, strategy, action)``."""
    return await Retry(strategy, action, timer=timer, on_retry=on_retry).run()


def retry(
    strategy: RetryPolicy | Callable[[], Iterable[DurationLike]],
    *,
    timer: Timer | None = None,
    on_retry: OnRetry | None = None,
    unwrap: bool = True,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator retrying an async function on every call.

    Args:
        strategy: RetryPolicy, or factory returning a fresh strategy per call
        timer: Timer backend (default: process-wide LoopTimer)
        on_retry: Optional callback(retry_index, failure, delay)
        unwrap: Return the value / raise the last exception (True), or return
            the Result itself (False)
    """
    factory: Callable[[], Iterable[DurationLike]] = getattr(strategy, "build", strategy)
    if isinstance(strategy, Strategy) or not callable(factory):
        raise TypeError(
            f"retry() expects a RetryPolicy or a strategy factory, got {type(strategy).__name__}; "
            "strategies are single-use, pass `lambda: strategy` or a RetryPolicy instead"
        )

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            result = await Retry(
                factory(), functools.partial(func, *args, **kwargs),
                timer=timer, on_retry=on_retry, name=func.__qualname__,
            ).run()
            return result.unwrap() if unwrap else result  # type: ignore[return-value]

        return wrapper

    return decorator

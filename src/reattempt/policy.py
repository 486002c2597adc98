"""Declarative retry policies.

A RetryPolicy is a frozen, validated description of a strategy chain. Unlike
strategies it is reusable: ``build()`` returns a fresh strategy each time, so a
policy can be stored on a class, shared across calls or loaded from settings.

Example:
    >>> policy = RetryPolicy(kind="exponential", base_delay=0.05, max_delay=2.0, max_retries=4)
    >>> @retry(policy)
    ... async def fetch() -> bytes: ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, NonNegativeInt, PositiveFloat, computed_field

from reattempt.foundation.config import StrategyKind
from reattempt.strategy import ExponentialBackoff, FibonacciBackoff, FixedInterval, LinearBackoff, Strategy

if TYPE_CHECKING:
    from reattempt.foundation.config import RetrySettings

_KINDS: dict[str, type[Strategy]] = {
    "fixed": FixedInterval,
    "exponential": ExponentialBackoff,
    "linear": LinearBackoff,
    "fibonacci": FibonacciBackoff,
}


class RetryPolicy(BaseModel):
    """Reusable recipe for a strategy chain.

    Chain order is fixed: base -> limit_delay -> jitter -> limit_retries.

    Attributes:
        kind: Base strategy ("fixed", "exponential", "linear", "fibonacci")
        base_delay: Base delay in seconds
        max_delay: Cap on each delay in seconds (None = uncapped)
        max_retries: Retries after the first attempt (None = unlimited)
        jitter: Apply full jitter to every delay
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        json_schema_extra={
            "title": "Retry Policy",
            "examples": [{"kind": "exponential", "base_delay": 0.1, "max_delay": 30.0, "max_retries": 5}],
        },
    )

    kind: StrategyKind = "exponential"
    base_delay: NonNegativeFloat = 0.1
    max_delay: PositiveFloat | None = None
    max_retries: NonNegativeInt | None = Field(default=3)
    jitter: bool = False

    @computed_field
    @property
    def is_disabled(self) -> bool:
        """Whether the policy never retries."""
        return self.max_retries == 0

    def build(self) -> Strategy:
        """Return a fresh strategy implementing this policy."""
        strategy: Strategy = _KINDS[self.kind](self.base_delay)
        if self.max_delay is not None:
            strategy = strategy.limit_delay(self.max_delay)
        if self.jitter:
            strategy = strategy.jitter()
        if self.max_retries is not None:
            strategy = strategy.limit_retries(self.max_retries)
        return strategy

    @classmethod
    def from_settings(cls, settings: RetrySettings | None = None) -> RetryPolicy:
        """Policy from RetrySettings (defaults to the global settings)."""
        if settings is None:
            from reattempt.foundation.config import get_settings
            settings = get_settings().retry
        return cls(
            kind=settings.kind, base_delay=settings.base_delay, max_delay=settings.max_delay,
            max_retries=settings.max_retries, jitter=settings.jitter,
        )


NO_RETRY = RetryPolicy(max_retries=0)

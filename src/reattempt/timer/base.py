"""Timer capability: turn a duration into an awaitable suspension."""

from __future__ import annotations

from datetime import timedelta
from typing import Protocol, runtime_checkable


@runtime_checkable
class Timer(Protocol):
    """Protocol for anything that can suspend the calling task.

    Implementations must support many concurrent, independent sleeps (one per
    retry session). Cancelling the awaiting task abandons the sleep.
    """

    async def sleep(self, duration: timedelta) -> None:
        """Resume the caller once ``duration`` has elapsed."""
        ...


def seconds(duration: timedelta) -> float:
    """Delay in seconds as accepted by event loop APIs."""
    return max(duration.total_seconds(), 0.0)

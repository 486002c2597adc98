"""Event loop timer: schedules wake-ups through a loop handle."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from .base import seconds

if TYPE_CHECKING:
    from datetime import timedelta


def _wake(fut: asyncio.Future[None]) -> None:
    if not fut.done():
        fut.set_result(None)


class LoopTimer:
    """Timer backed by ``loop.call_later``.

    Bound to a specific event loop when one is passed, otherwise uses whatever
    loop is running at the time of the sleep. One instance can serve any
    number of concurrent sessions on that loop.

    Example:
        >>> timer = LoopTimer()
        >>> await timer.sleep(timedelta(milliseconds=10))
    """

    __slots__ = ("_loop",)

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop | None:
        return self._loop

    async def sleep(self, duration: timedelta) -> None:
        loop = self._loop or asyncio.get_running_loop()
        fut: asyncio.Future[None] = loop.create_future()
        handle = loop.call_later(seconds(duration), _wake, fut)
        try:
            await fut
        finally:
            handle.cancel()  # No-op if it already fired

    def __repr__(self) -> str:
        return f"LoopTimer(loop={self._loop!r})"

"""Dedicated-thread timer.

A single daemon thread keeps a heap of deadlines and wakes waiting tasks via
``loop.call_soon_threadsafe``. Useful when timekeeping should not depend on
the event loop's own timer resolution, or when one timer is shared by tasks
on several loops.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from reattempt.foundation.errors import TimerError

from .base import seconds

if TYPE_CHECKING:
    from datetime import timedelta
    from types import TracebackType

logger = logging.getLogger("reattempt.timer")


@dataclass(order=True, slots=True)
class _Entry:
    deadline: float
    seq: int
    loop: asyncio.AbstractEventLoop = field(compare=False)
    fut: asyncio.Future[None] = field(compare=False)


def _wake(fut: asyncio.Future[None]) -> None:
    if not fut.done():
        fut.set_result(None)


class ThreadTimer:
    """Timer driven by one background thread.

    The thread starts on first use and lives until close(). Sleeps on a
    closed timer raise TimerError; pending sleeps are released with the same
    error when the timer closes.

    Example:
        >>> with ThreadTimer() as timer:
        ...     result = asyncio.run(strategy.run(timer, fetch))
    """

    def __init__(self, *, name: str = "reattempt-timer") -> None:
        self._name = name
        self._heap: list[_Entry] = []
        self._seq = itertools.count()
        self._cond = threading.Condition()
        self._thread: threading.Thread | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Number of scheduled wake-ups not yet delivered."""
        with self._cond:
            return len(self._heap)

    async def sleep(self, duration: timedelta) -> None:
        loop = asyncio.get_running_loop()
        fut: asyncio.Future[None] = loop.create_future()
        entry = _Entry(time.monotonic() + seconds(duration), next(self._seq), loop, fut)
        with self._cond:
            if self._closed:
                raise TimerError("Timer is closed")
            self._ensure_thread()
            heapq.heappush(self._heap, entry)
            self._cond.notify()
        try:
            await fut
        except asyncio.CancelledError:
            with self._cond:
                if entry in self._heap:
                    self._heap.remove(entry)
                    heapq.heapify(self._heap)
            raise

    def _ensure_thread(self) -> None:
        if self._thread is None:
            self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
            self._thread.start()

    def _run(self) -> None:
        while True:
            with self._cond:
                while not self._closed and (not self._heap or self._heap[0].deadline > time.monotonic()):
                    timeout = min(self._heap[0].deadline - time.monotonic(), threading.TIMEOUT_MAX) if self._heap else None
                    self._cond.wait(timeout)
                if self._closed:
                    return
                entry = heapq.heappop(self._heap)
            self._deliver(entry, _wake)

    @staticmethod
    def _deliver(entry: _Entry, callback: Callable[..., None], *args: object) -> None:
        try:
            entry.loop.call_soon_threadsafe(callback, entry.fut, *args)
        except RuntimeError:
            logger.debug("Dropping wake-up for closed event loop")

    def close(self) -> None:
        """Stop the timer thread and fail all pending sleeps with TimerError."""
        with self._cond:
            if self._closed:
                return
            self._closed = True
            pending, self._heap = self._heap, []
            self._cond.notify_all()
            thread = self._thread
        for entry in pending:
            self._deliver(entry, _fail, TimerError("Timer closed while sleeping"))
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def __enter__(self) -> ThreadTimer:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    async def __aenter__(self) -> ThreadTimer:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ThreadTimer(pending={self.pending}, closed={self._closed})"


def _fail(fut: asyncio.Future[None], exc: BaseException) -> None:
    if not fut.done():
        fut.set_exception(exc)

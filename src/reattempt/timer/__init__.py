"""Timer backends for the retry driver.

- Timer: Protocol every backend satisfies
- LoopTimer: Wake-ups scheduled on the event loop (loop.call_later)
- ThreadTimer: Wake-ups delivered by a dedicated timer thread

Backends are interchangeable; the driver only calls ``await timer.sleep(d)``.
"""

from __future__ import annotations

from .base import Timer
from .loop import LoopTimer
from .thread import ThreadTimer

_default: LoopTimer | None = None


def default_timer() -> Timer:
    """Process-wide LoopTimer used when no timer is given."""
    global _default
    if _default is None:
        _default = LoopTimer()
    return _default


__all__ = ["Timer", "LoopTimer", "ThreadTimer", "default_timer"]

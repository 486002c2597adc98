"""Test doubles for code built on reattempt.

- RecordingTimer: Timer that records requested delays without waiting
- FlakyAction: Action that fails a set number of times, then succeeds
"""

from .mock import FlakyAction, Invocation, RecordingTimer

__all__ = ["RecordingTimer", "FlakyAction", "Invocation"]

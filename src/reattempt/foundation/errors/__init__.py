"""Error handling for reattempt.

- Result/Ok/Err: Outcome of a retry session (and optional action return type)
- ReattemptError and subclasses: Misuse of the library or timer failures
"""

from .errors import ReattemptError, RetryStateError, StrategyError, TimerError
from .result import Err, Ok, Result

__all__ = [
    # Result monad
    "Result", "Ok", "Err",
    # Library errors
    "ReattemptError", "StrategyError", "TimerError", "RetryStateError",
]

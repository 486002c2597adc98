"""Foundation layer: errors, configuration and logging.

Everything here is free of strategy and driver logic so that the rest of the
package can depend on it without cycles.
"""

from .config import ReattemptSettings, RetrySettings, get_settings
from .errors import Err, Ok, ReattemptError, Result, RetryStateError, StrategyError, TimerError
from .logging import configure_logging

__all__ = [
    "Result", "Ok", "Err",
    "ReattemptError", "StrategyError", "TimerError", "RetryStateError",
    "ReattemptSettings", "RetrySettings", "get_settings",
    "configure_logging",
]

"""
Bounded retry combinator.

``retry_operation`` calls an operation, and on failure waits according to a
delay strategy before trying again, up to ``retries`` additional attempts.
The last exception is re-raised once attempts are exhausted.
"""

import time
from typing import Callable, Optional, TypeVar

from .logger_utils import get_logger

T = TypeVar("T")

DelayStrategy = Callable[[int], float]

logger = get_logger(__name__)


def fixed_delay(seconds: float) -> DelayStrategy:
    """Wait the same number of seconds before every retry."""
    return lambda attempt: seconds


def exponential_backoff(
    base: float, factor: float = 2.0, maximum: Optional[float] = None
) -> DelayStrategy:
    """Wait ``base * factor ** (attempt - 1)`` seconds, optionally capped at ``maximum``."""

    def delay(attempt: int) -> float:
        seconds = base * (factor ** (attempt - 1))
        return min(seconds, maximum) if maximum is not None else seconds

    return delay


def retry_operation(
    operation: Callable[[], T],
    retries: int = 3,
    delay: DelayStrategy = fixed_delay(1.0),
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Optional[Callable[[int, Exception], None]] = None,
    description: str = "Operation",
) -> T:
    """
    Run ``operation`` with up to ``retries`` additional attempts.

    Args:
        operation: Zero-argument callable to run
        retries: Number of retries after the first attempt (0 = no retry)
        delay: Maps the 1-based retry number to a wait in seconds
        sleep: Sleep function (injectable for tests)
        on_retry: Optional callback invoked with (retry number, error) before waiting
        description: Label used in log messages

    Returns:
        The operation's result

    Raises:
        Exception: The last error raised by ``operation`` once retries are exhausted
    """
    if retries < 0:
        raise ValueError(f"retries must be >= 0, got {retries}")

    attempt = 0
    while True:
        try:
            return operation()
        except Exception as e:
            if attempt >= retries:
                raise
            attempt += 1
            wait = delay(attempt)
            logger.warning(
                f"{description} failed, retrying in {wait:.1f}s "
                f"({retries - attempt + 1} attempts left): {e}",
                extra={"event": "retry", "attempt": attempt, "error": str(e)},
            )
            if on_retry is not None:
                on_retry(attempt, e)
            sleep(wait)

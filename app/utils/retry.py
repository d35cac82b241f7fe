"""
Bounded retry with backoff for async operations.

Independent of any particular remote API: callers supply the operation,
a predicate deciding which failures are worth retrying, and the delay
schedule.
"""

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

from app.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

TRANSIENT_ERROR_MARKERS = (
    "overloaded",
    "503",
    "rate limit",
    "temporarily unavailable",
)


def is_transient_error(error: BaseException) -> bool:
    """True for failures expected to clear up with time (overload, rate limit)."""
    message = str(error).lower()
    return any(marker in message for marker in TRANSIENT_ERROR_MARKERS)


def exponential_backoff(base_delay: float) -> Callable[[int], float]:
    """Delay before retry ``n`` (1-based): base, 2*base, 4*base, ..."""
    def _delay(retry_number: int) -> float:
        return base_delay * (2 ** (retry_number - 1))
    return _delay


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    max_retries: int,
    is_transient: Callable[[BaseException], bool] = is_transient_error,
    backoff: Callable[[int], float] = exponential_backoff(1.0),
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    label: str = "operation",
) -> T:
    """
    Run ``operation`` until it succeeds, retrying transient failures.

    At most ``max_retries + 1`` attempts are made. A non-transient failure,
    or a transient one after the last attempt, is re-raised unchanged.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            logger.info(f"[Retry] {label} attempt {attempt}/{max_retries + 1}")
            return await operation()
        except Exception as e:
            retries_used = attempt - 1
            if not is_transient(e) or retries_used >= max_retries:
                logger.warning(f"[Retry] {label} attempt {attempt} failed, giving up: {e}")
                raise
            delay = backoff(attempt)
            logger.warning(
                f"[Retry] {label} attempt {attempt} failed: {e}. "
                f"Retrying in {delay:.1f}s... ({attempt}/{max_retries})"
            )
            await sleep(delay)

"""Retry with exponential backoff for upstream API calls."""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from .errors import TTSVoiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504, 520, 521, 522, 523, 524})

NETWORK_ERRORS = (
    "network error",
    "connection timeout",
    "connection reset",
    "socket timeout",
    "enotfound",
    "econnreset",
    "etimedout",
    "fetch failed",
    "network request failed",
)

VOICE_ERRORS = (
    "voice not found",
    "voice unavailable",
    "voice model error",
    "invalid voice",
    "voice id not found",
    "voice quota exceeded",
)


def is_retryable_error(error: BaseException | None) -> bool:
    """Whether an error is transient: a retryable HTTP status or a network failure."""
    if error is None:
        return False

    status = getattr(error, "status_code", None) or getattr(error, "status", None)
    if status in RETRYABLE_STATUSES:
        return True

    message = str(error).lower()
    return any(fragment in message for fragment in NETWORK_ERRORS)


def is_voice_error(error: BaseException | None) -> bool:
    """Whether an error means the requested voice itself is unusable."""
    if error is None:
        return False
    if isinstance(error, TTSVoiceError):
        return True

    message = str(error).lower()
    return any(fragment in message for fragment in VOICE_ERRORS)


def calculate_delay(
    attempt: int,
    base_delay_ms: float = 1000,
    max_delay_ms: float = 10000,
    exponential: bool = True,
    rng: random.Random | None = None,
) -> float:
    """Backoff delay in milliseconds before the next attempt.

    Exponential backoff doubles the base delay per attempt. Jitter scales
    the delay by a factor in [0.5, 1.0) so that concurrent clients spread
    out. The result never exceeds max_delay_ms.
    """
    delay = base_delay_ms * 2 ** (attempt - 1) if exponential else base_delay_ms
    delay *= 0.5 + (rng or random).random() * 0.5
    return min(delay, max_delay_ms)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay_ms: float = 1000,
    max_delay_ms: float = 10000,
    retry_if: Callable[[BaseException], bool] = is_retryable_error,
) -> T:
    """Run operation, retrying transient failures with backoff.

    Args:
        operation: Zero-argument coroutine function to run
        max_retries: Total number of attempts
        base_delay_ms: Delay before the second attempt
        max_delay_ms: Upper bound for any single delay
        retry_if: Predicate selecting errors worth retrying

    Returns:
        Result of the first successful attempt

    Raises:
        Exception: The first non-retryable error, or the last error once
            all attempts are used up
    """
    for attempt in range(1, max_retries + 1):
        try:
            return await operation()
        except Exception as e:
            if not retry_if(e) or attempt == max_retries:
                raise

            delay = calculate_delay(attempt, base_delay_ms, max_delay_ms)
            logger.warning(
                f"Operation failed on attempt {attempt}/{max_retries}, "
                f"retrying in {delay:.0f}ms: {e}"
            )
            await asyncio.sleep(delay / 1000)

    raise ValueError("max_retries must be at least 1")

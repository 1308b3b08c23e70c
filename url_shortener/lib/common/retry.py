"""Bounded retry for alias generation."""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from ..exceptions import GenerationExhaustedError

T = TypeVar("T")

logger = logging.getLogger("url_shortener.retry")


class RetryAttempt(Exception):
    """Raised by an attempt to ask for another attempt."""


async def retry_bounded(
    attempt: Callable[[int], Awaitable[T]],
    max_attempts: int,
    what: str = "short code",
) -> T:
    """Run ``attempt`` until it returns, at most ``max_attempts`` times.

    Each call receives the 1-based attempt number. An attempt requests a retry
    by raising RetryAttempt; any other exception propagates immediately.

    Args:
        attempt: Coroutine function performing one regenerate-and-insert round
        max_attempts: Retry budget
        what: Description used in the exhaustion message

    Returns:
        Whatever the first successful attempt returned

    Raises:
        GenerationExhaustedError: If every attempt asked for a retry
    """
    last: Optional[RetryAttempt] = None

    for number in range(1, max_attempts + 1):
        try:
            return await attempt(number)
        except RetryAttempt as e:
            logger.debug(f"Attempt {number}/{max_attempts} for {what} needs retry: {e}")
            last = e

    raise GenerationExhaustedError(
        f"Unable to generate unique {what} after {max_attempts} attempts"
    ) from last

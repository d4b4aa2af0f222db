"""Retry with exponential backoff for booru requests."""

import asyncio
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar
import logging

from ..errors import BooruError, RateLimited, RequestError

logger = logging.getLogger(__name__)

T = TypeVar('T')

DEFAULT_MAX_RETRIES = 3
DEFAULT_INITIAL_DELAY = 0.1
DEFAULT_MAX_DELAY = 5.0
DEFAULT_BACKOFF_FACTOR = 2.0


@dataclass(frozen=True)
class RetryConfig:
    """Backoff schedule. Delays are in seconds."""

    max_retries: int = DEFAULT_MAX_RETRIES
    initial_delay: float = DEFAULT_INITIAL_DELAY
    max_delay: float = DEFAULT_MAX_DELAY
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR

    @classmethod
    def no_retry(cls) -> 'RetryConfig':
        return cls(max_retries=0)

    @classmethod
    def from_config(cls, retry_config: Optional[Dict[str, Any]] = None) -> 'RetryConfig':
        """Create a schedule from the ``retry`` config section."""
        retry_config = retry_config or {}
        return cls(
            max_retries=int(retry_config.get('max_retries', DEFAULT_MAX_RETRIES)),
            initial_delay=float(retry_config.get('initial_delay', DEFAULT_INITIAL_DELAY)),
            max_delay=float(retry_config.get('max_delay', DEFAULT_MAX_DELAY)),
            backoff_factor=float(retry_config.get('backoff_factor', DEFAULT_BACKOFF_FACTOR)),
        )

    def with_initial_delay(self, delay: float) -> 'RetryConfig':
        return replace(self, initial_delay=delay)

    def with_max_delay(self, delay: float) -> 'RetryConfig':
        return replace(self, max_delay=delay)

    def with_backoff_factor(self, factor: float) -> 'RetryConfig':
        return replace(self, backoff_factor=factor)

    def delay_for_attempt(self, attempt: int) -> float:
        """Delay before the given attempt; attempt 0 (the first try) is immediate."""
        if attempt <= 0:
            return 0.0
        delay = self.initial_delay * self.backoff_factor ** (attempt - 1)
        return min(delay, self.max_delay)


def is_retryable(error: BaseException) -> bool:
    """Decide from the error kind alone whether another attempt can help.

    Timeouts, connection failures, other transport failures and HTTP 5xx are
    retryable, as is explicit throttling. Everything else (parse errors, not
    found, auth, tag limits, 4xx, local I/O) is not.
    """
    if isinstance(error, RateLimited):
        return True
    if isinstance(error, RequestError):
        if error.is_timeout or error.is_connect:
            return True
        if error.status_code is not None:
            return error.is_server_error
        return True
    return False


async def with_retry(config: RetryConfig,
                     operation: Callable[[], Awaitable[T]],
                     classify: Callable[[BaseException], bool] = is_retryable) -> T:
    """Run an async operation, retrying retryable failures with backoff.

    Args:
        config: Backoff schedule
        operation: Zero-argument callable returning a fresh awaitable per attempt
        classify: Predicate deciding whether an error is worth retrying

    Returns:
        The operation's result

    Raises:
        BooruError: The last error once retries are exhausted or on a
            non-retryable error
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except BooruError as e:
            if attempt >= config.max_retries or not classify(e):
                raise

            attempt += 1
            delay = config.delay_for_attempt(attempt)
            logger.warning(f"Attempt {attempt}/{config.max_retries} failed ({e}), "
                           f"retrying in {delay:.2f}s")
            await asyncio.sleep(delay)

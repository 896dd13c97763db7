"""Bounded retries with capped exponential backoff."""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from ..exceptions import RetryExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExecutor:
    """Runs an async operation up to ``max_attempts`` times.

    Every exception is retried unless it carries ``retryable = False``
    (see ScraperError). After failed attempt ``n`` the executor sleeps
    ``min(base_delay * 2**n, max_delay)`` seconds.
    """

    def __init__(self, max_attempts: int = 3, base_delay: float = 1.0, max_delay: float = 10.0):
        """Initialize the executor.

        Args:
            max_attempts: Default number of attempts
            base_delay: Backoff base in seconds
            max_delay: Backoff cap in seconds
        """
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        return min(self.base_delay * (2 ** attempt), self.max_delay)

    async def run(self, operation: Callable[[], Awaitable[T]], label: str,
                  max_attempts: Optional[int] = None) -> T:
        """Run an operation with retries.

        Args:
            operation: Zero-argument coroutine function, invoked once per attempt
            label: Name used in logs and in the final error
            max_attempts: Override for this call

        Returns:
            The operation's result

        Raises:
            RetryExhaustedError: If every attempt failed or a failure was non-retryable
        """
        attempts_allowed = max_attempts or self.max_attempts
        last_error: Optional[BaseException] = None
        attempt = 0

        while attempt < attempts_allowed:
            attempt += 1
            try:
                return await operation()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                last_error = e
                logger.warning(f"{label} attempt {attempt}/{attempts_allowed} failed: {e}")

                if getattr(e, "retryable", True) is False:
                    logger.error(f"{label} failed with a non-retryable error, giving up")
                    break

                if attempt < attempts_allowed:
                    delay = self.backoff_delay(attempt)
                    logger.info(f"Retrying {label} in {delay:.1f} seconds")
                    await asyncio.sleep(delay)

        logger.error(f"{label} failed after {attempt} attempts")
        raise RetryExhaustedError(label, attempt, last_error) from last_error


async def with_retry(operation: Callable[[], Awaitable[Any]], label: str, max_attempts: int = 3) -> Any:
    """Run ``operation`` with the default backoff policy."""
    return await RetryExecutor(max_attempts=max_attempts).run(operation, label)

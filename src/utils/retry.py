"""Retry utilities with exponential backoff for external API calls."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 3
    base_delay: float = 1.0  # seconds
    max_delay: float = 30.0  # seconds
    exponential_base: float = 2.0
    retryable_exceptions: tuple = (
        httpx.TimeoutException,
        httpx.ConnectError,
        httpx.ReadError,
        ConnectionError,
        TimeoutError,
    )
    # Matched against a ``status`` attribute on the raised exception
    retryable_status_codes: tuple = (500, 502, 503, 504)
    # Callers that recover from exhaustion lower this to WARNING
    exhausted_log_level: int = logging.ERROR

    def delay_for(self, attempt: int) -> float:
        return min(self.base_delay * (self.exponential_base**attempt), self.max_delay)

    def is_retryable(self, exc: Exception) -> bool:
        if isinstance(exc, self.retryable_exceptions):
            return True
        return getattr(exc, "status", None) in self.retryable_status_codes


DEFAULT_RETRY_CONFIG = RetryConfig()


async def retry_async(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    config: RetryConfig = DEFAULT_RETRY_CONFIG,
    operation_name: str = "operation",
    **kwargs: Any,
) -> T | None:
    """Execute an async function with retry logic and exponential backoff.

    Args:
        func: Async function to execute
        *args: Positional arguments for the function
        config: Retry configuration
        operation_name: Name of the operation for logging
        **kwargs: Keyword arguments for the function

    Returns:
        The result of the function, or None if all retries failed

    Raises:
        Exception: Any non-retryable exception raised by ``func``
    """
    for attempt in range(config.max_retries + 1):
        try:
            return await func(*args, **kwargs)

        except Exception as e:
            if not config.is_retryable(e):
                logger.debug(f"{operation_name}: Non-retryable error: {e}")
                raise

            if attempt < config.max_retries:
                delay = config.delay_for(attempt)
                logger.warning(
                    f"{operation_name}: {type(e).__name__}, "
                    f"retrying in {delay:.1f}s (attempt {attempt + 1}/{config.max_retries + 1})"
                )
                await asyncio.sleep(delay)
            else:
                logger.log(
                    config.exhausted_log_level,
                    f"{operation_name}: Failed after {config.max_retries + 1} attempts: {e}",
                )

    return None

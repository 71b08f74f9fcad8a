"""Utility modules for Guess the Commit."""

from src.utils.logging import get_logger, LogContext, redact, setup_logging, TokenRedactingFilter
from src.utils.rate_limiter import rate_limiter, RateLimitConfig
from src.utils.retry import retry_async, RetryConfig

__all__ = [
    # Logging
    "get_logger",
    "LogContext",
    "redact",
    "setup_logging",
    "TokenRedactingFilter",
    # Rate limiting
    "rate_limiter",
    "RateLimitConfig",
    # Retry
    "retry_async",
    "RetryConfig",
]

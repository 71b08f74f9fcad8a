"""Client-side throttle for GitHub API calls.

Every branch and commit request fanned out by the collector goes through
the same bucket, so a large organization sweep cannot burn the
credential's hourly quota in a single burst.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field

from src.config import get_settings
from src.constants import GITHUB_SERVICE

logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Configuration for rate limiting."""

    requests_per_second: float = 2.0  # refill rate; 0 disables throttling
    burst_size: int = 5


@dataclass
class TokenBucket:
    """Token bucket for rate limiting."""

    capacity: int
    refill_rate: float  # tokens per second
    tokens: float = field(init=False)
    last_refill: float = field(default_factory=time.monotonic)

    def __post_init__(self):
        self.tokens = float(self.capacity)

    @property
    def unlimited(self) -> bool:
        return self.refill_rate <= 0

    def _refill(self) -> None:
        now = time.monotonic()
        self.tokens = min(self.capacity, self.tokens + (now - self.last_refill) * self.refill_rate)
        self.last_refill = now

    def take(self) -> float:
        """Take one token.

        Returns:
            Seconds to wait before the token is really available (0 if none)
        """
        if self.unlimited:
            return 0.0

        self._refill()
        self.tokens -= 1
        if self.tokens >= 0:
            return 0.0
        # The debt is repaid by the refill that happens while the caller sleeps
        return -self.tokens / self.refill_rate


class RateLimiter:
    """Process-wide limiter with one bucket per service name."""

    def __init__(self):
        self._configs: dict[str, RateLimitConfig] = {}
        self._buckets: dict[str, TokenBucket] = {}

    def _default_config(self, service: str) -> RateLimitConfig:
        if service == GITHUB_SERVICE:
            settings = get_settings()
            return RateLimitConfig(
                requests_per_second=settings.github_requests_per_second,
                burst_size=settings.github_burst_size,
            )
        return RateLimitConfig()

    def configure(self, service: str, config: RateLimitConfig) -> None:
        """Replace the limits for a service and start it with a full bucket."""
        self._configs[service] = config
        self._buckets.pop(service, None)

    def bucket(self, service: str = GITHUB_SERVICE) -> TokenBucket:
        if service not in self._buckets:
            config = self._configs.setdefault(service, self._default_config(service))
            self._buckets[service] = TokenBucket(
                capacity=config.burst_size,
                refill_rate=config.requests_per_second,
            )
        return self._buckets[service]

    async def acquire(self, service: str = GITHUB_SERVICE) -> None:
        """Wait until a request to ``service`` may be sent."""
        wait = self.bucket(service).take()
        if wait > 0:
            logger.debug(f"Rate limit [{service}]: waiting {wait:.2f}s")
            await asyncio.sleep(wait)


# Global rate limiter instance
rate_limiter = RateLimiter()

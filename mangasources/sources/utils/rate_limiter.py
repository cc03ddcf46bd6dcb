"""Per-domain request throttling shared by all sources of a host."""

import asyncio
import time
from typing import Dict, Optional

import structlog

from mangasources.config import settings


logger = structlog.get_logger(__name__)


class TokenBucket:
    """Token bucket: starts full, refills continuously, one token per request.

    Args:
        rate: Tokens added per second
        capacity: Burst size
    """

    def __init__(self, rate: float, capacity: float):
        self.rate = rate
        self.capacity = capacity
        self.tokens = capacity
        self.updated_at = time.monotonic()
        self._lock = asyncio.Lock()

    @classmethod
    def per_minute(cls, rpm: int) -> "TokenBucket":
        """Bucket for a requests-per-minute limit; bursts up to a tenth of it (at least 2)."""
        return cls(rate=rpm / 60.0, capacity=max(2.0, rpm / 10.0))

    @property
    def rpm(self) -> float:
        return self.rate * 60.0

    def _top_up(self) -> None:
        now = time.monotonic()
        self.tokens = min(self.capacity, self.tokens + (now - self.updated_at) * self.rate)
        self.updated_at = now

    async def acquire(self, tokens: float = 1.0) -> float:
        """Take tokens, sleeping until they are available.

        Returns:
            Seconds spent waiting
        """
        waited = 0.0
        async with self._lock:
            self._top_up()
            while self.tokens < tokens:
                delay = (tokens - self.tokens) / self.rate
                await asyncio.sleep(delay)
                waited += delay
                self._top_up()
            self.tokens -= tokens
        return waited


class DomainRateLimiter:
    """One token bucket per host name.

    Sources register their own limit with set_custom_limit (usually via
    HttpSource.attach_rate_limiter); any other host gets default_rpm.
    """

    def __init__(self, default_rpm: Optional[int] = None):
        self.default_rpm = default_rpm or settings.DEFAULT_RATE_LIMIT_RPM
        self._buckets: Dict[str, TokenBucket] = {}

    def _bucket_for(self, domain: str) -> TokenBucket:
        bucket = self._buckets.get(domain)
        if bucket is None:
            bucket = self._buckets[domain] = TokenBucket.per_minute(self.default_rpm)
        return bucket

    async def acquire(self, domain: str, tokens: float = 1.0) -> None:
        """Block until the domain's bucket allows another request."""
        waited = await self._bucket_for(domain).acquire(tokens)
        if waited:
            logger.debug("rate_limited", domain=domain, waited=round(waited, 3))

    def set_custom_limit(self, domain: str, rpm: int) -> None:
        """Replace the domain's bucket with one limited to rpm."""
        self._buckets[domain] = TokenBucket.per_minute(rpm)

    def get_current_rate(self, domain: str) -> float:
        """Requests per minute currently allowed for domain."""
        return self._bucket_for(domain).rpm

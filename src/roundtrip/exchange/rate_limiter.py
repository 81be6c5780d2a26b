"""
Token bucket rate limiter for aggregator requests.

Public aggregator endpoints throttle aggressively. The limiter keeps the
polling loop under the configured request rate so that throttling shows
up as a short local wait rather than as failed quotes.
"""

import asyncio
from dataclasses import dataclass, field

from roundtrip.config.constants import (
    DEFAULT_QUOTE_REQUESTS_PER_SECOND,
    DEFAULT_SWAP_REQUESTS_PER_SECOND,
)
from roundtrip.utils.time import monotonic_s


@dataclass
class TokenBucket:
    """
    Token bucket refilled at a constant rate up to its capacity.

    Each request consumes one or more tokens; callers without enough
    tokens wait for the refill.
    """

    capacity: int
    refill_rate: float  # tokens per second
    tokens: float = field(init=False)
    last_refill: float = field(init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        self.tokens = float(self.capacity)
        self.last_refill = monotonic_s()

    def _refill(self) -> None:
        now = monotonic_s()
        elapsed = now - self.last_refill
        self.tokens = min(float(self.capacity), self.tokens + elapsed * self.refill_rate)
        self.last_refill = now

    async def acquire(self, tokens: int = 1) -> None:
        """
        Take tokens, sleeping until the bucket holds enough.

        Args:
            tokens: Number of tokens to take.
        """
        async with self._lock:
            self._refill()
            if self.tokens < tokens:
                await asyncio.sleep((tokens - self.tokens) / self.refill_rate)
                self._refill()
            self.tokens -= tokens

    def try_acquire(self, tokens: int = 1) -> bool:
        """Take tokens only if they are available right now."""
        self._refill()
        if self.tokens >= tokens:
            self.tokens -= tokens
            return True
        return False


class RateLimiter:
    """
    Separate buckets for quote and swap requests.

    Swap requests are rare but must not be starved by quote polling, so
    they draw from their own bucket. Burst capacity is twice the rate.
    """

    def __init__(
        self,
        quotes_per_second: int = DEFAULT_QUOTE_REQUESTS_PER_SECOND,
        swaps_per_second: int = DEFAULT_SWAP_REQUESTS_PER_SECOND,
    ) -> None:
        self._quote_bucket = TokenBucket(
            capacity=quotes_per_second * 2,
            refill_rate=float(quotes_per_second),
        )
        self._swap_bucket = TokenBucket(
            capacity=swaps_per_second * 2,
            refill_rate=float(swaps_per_second),
        )

    async def acquire_quote(self) -> None:
        """Wait for permission to send one quote request."""
        await self._quote_bucket.acquire(1)

    async def acquire_swap(self) -> None:
        """Wait for permission to send one swap request."""
        await self._swap_bucket.acquire(1)

    @property
    def available_quotes(self) -> float:
        """Get approximate number of available quote tokens."""
        return self._quote_bucket.tokens

"""Time-bounded single-value cache.

Providers keep the most recent genre listing here. The cache owns the value
and the time it was fetched; staleness is measured with an injectable clock
so expiry can be tested without sleeping.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Validity window of the genre listing
GENRE_CACHE_TTL_SECONDS = 60


class TimedCache(Generic[T]):
    """Cache of one value that stays valid for ttl_seconds after a successful fetch.

    Attributes:
        ttl_seconds: Validity window, measured from completion of the last
            successful fetch
        clock: Monotonic time source in seconds (default: time.monotonic)

    Example:
        >>> cache = TimedCache(ttl_seconds=60)
        >>> genres = await cache.get_or_refresh(fetch_genres)
    """

    def __init__(
        self,
        ttl_seconds: float = GENRE_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._value: Optional[T] = None
        self._fetched_at: Optional[float] = None
        self._lock: Optional[asyncio.Lock] = None

    def _get_lock(self) -> asyncio.Lock:
        # created on first use, inside the running event loop
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    def is_expired(self) -> bool:
        """Check whether the cached value must be refetched.

        Returns:
            True if nothing was fetched yet or the window has elapsed
        """
        if self._fetched_at is None:
            return True
        return self.clock() - self._fetched_at >= self.ttl_seconds

    async def get_or_refresh(self, fetch: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value, fetching a fresh one if it has expired.

        The expiry check, the fetch and the store form one critical section,
        so the value and its timestamp are always replaced together.

        Args:
            fetch: Coroutine function returning a fresh value

        Returns:
            Cached or freshly fetched value

        Raises:
            Exception: Whatever fetch raises. The previous value and timestamp
                are kept, so the next call retries immediately.
        """
        async with self._get_lock():
            if not self.is_expired():
                logger.debug(f"Using cached value (age: {self.clock() - self._fetched_at:.1f}s)")
                return self._value

            value = await fetch()
            self._value = value
            self._fetched_at = self.clock()
            logger.debug("Refreshed cached value")
            return value

    def clear(self):
        """Drop the cached value so the next call fetches."""
        self._value = None
        self._fetched_at = None

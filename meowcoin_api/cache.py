"""
In-memory metrics cache with stale fallback

Keeps the last value served for each metric so a node outage degrades
freshness instead of availability. Volatile: rebuilt from the node after
a restart.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

from meowcoin_api.exceptions import TransportError

logger = logging.getLogger(__name__)

CACHE_KEYS = (
    "total_supply",
    "circulating_supply",
    "block_reward",
    "reward_breakdown",
    "mining_info",
)


class MetricsCache:
    """
    Last-known value per metric plus ONE shared write timestamp.

    Freshness is global, not per key: writing any key makes every cached
    key look fresh until the TTL elapses. Callers rely on this timing, so
    it is kept as-is.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._data: Dict[str, Any] = dict.fromkeys(CACHE_KEYS)
        self.last_write: float = 0.0

    def _check_key(self, key: str):
        if key not in self._data:
            raise KeyError(f"Unknown cache key: {key}")

    def get(self, key: str) -> Optional[Any]:
        """Last value written for key, or None"""
        self._check_key(key)
        return self._data[key]

    def set(self, key: str, value: Any):
        """Store value and stamp the shared write time"""
        self._check_key(key)
        self._data[key] = value
        self.last_write = self._clock()

    def is_fresh(self, ttl_ms: int) -> bool:
        if self.last_write == 0:
            return False
        return (self._clock() - self.last_write) * 1000 < ttl_ms

    def age_ms(self) -> int:
        """Milliseconds since the last write (since the epoch if never written)"""
        return int((self._clock() - self.last_write) * 1000)

    def clear(self):
        self._data = dict.fromkeys(CACHE_KEYS)
        self.last_write = 0.0


class CachedFetcher:
    """
    Cache-aside coordinator for metric producers.

    fetch() returns the cached value while the cache is fresh, otherwise
    runs the producer. If the producer fails and any earlier value exists
    for the key, that stale value is returned instead of the error.

    Concurrent misses for the same key share one in-flight future, so the
    node sees a single request per key at a time.
    """

    def __init__(self, cache: MetricsCache, ttl_ms: int):
        self.cache = cache
        self.ttl_ms = ttl_ms
        # In-flight futures: key -> Future
        self._in_flight: Dict[str, asyncio.Future] = {}

    async def fetch(self, key: str, producer: Callable[[], Awaitable[Any]]) -> Any:
        """
        Get a metric from cache or produce it.

        Args:
            key: Cache key (one of CACHE_KEYS)
            producer: Async callable computing a fresh value
        """
        cached = self.cache.get(key)
        if cached is not None and self.cache.is_fresh(self.ttl_ms):
            logger.debug(f"Cache hit for {key}")
            return cached

        # Another coroutine is already producing this key
        if key in self._in_flight:
            return await asyncio.shield(self._in_flight[key])

        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        self._in_flight[key] = future

        try:
            result = await self._refresh(key, producer)
            future.set_result(result)
            return result
        except asyncio.CancelledError:
            # Waiters still get an outcome; only the cancelled caller re-raises
            self._abandon(key, future)
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Nobody else may be waiting; mark the exception as retrieved
            future.exception()
            raise
        finally:
            self._in_flight.pop(key, None)

    def _abandon(self, key: str, future: asyncio.Future):
        """Resolve a shared future whose producing caller was cancelled"""
        stale = self.cache.get(key)
        if stale is not None:
            logger.warning(f"Fetch for {key} cancelled, using cached fallback")
            future.set_result(stale)
            return
        logger.warning(f"Fetch for {key} cancelled with no cached fallback")
        future.set_exception(TransportError("fetch abandoned", command=key))
        future.exception()

    async def _refresh(self, key: str, producer: Callable[[], Awaitable[Any]]) -> Any:
        try:
            value = await producer()
        except Exception as e:
            logger.error(f"RPC failure for {key}: {e}")
            stale = self.cache.get(key)
            if stale is not None:
                logger.warning(f"Using cached fallback for {key}")
                return stale
            raise

        self.cache.set(key, value)
        logger.info(f"Updated cache for {key}: {value!r}")
        return value

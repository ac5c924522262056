"""In-memory cache provider using cachetools.TTLCache.

Process-local and single-event-loop only: ``TTLCache`` is not thread-safe,
and every caller runs on the asyncio loop.  Expiry is lazy: an entry
written at time ``T`` is invisible to reads at ``T + ttl`` and later, and
is physically dropped the next time the cache expires items on write.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import structlog
from cachetools import TTLCache

from src.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)


class MemoryCacheProvider(ICacheProvider):
    """In-memory TTL cache backed by ``cachetools.TTLCache``.

    Parameters
    ----------
    max_size:
        Maximum number of entries before the least-recently-used entry
        is evicted.  Eviction only costs a later cache miss.
    ttl:
        Time-to-live in seconds for every entry.
    timer:
        Monotonic clock returning seconds.  Tests pass a fake clock to
        step over the TTL boundary.
    name:
        Label used in log events to tell several caches apart.
    """

    def __init__(
        self,
        max_size: int = 1000,
        ttl: float = 3600,
        timer: Callable[[], float] = time.monotonic,
        name: str = "memory",
    ) -> None:
        self._ttl = ttl
        self._name = name
        self._cache: TTLCache[str, Any] = TTLCache(maxsize=max_size, ttl=ttl, timer=timer)

    @property
    def ttl(self) -> float:
        return self._ttl

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """Retrieve the cached value for *key*, or ``None`` if missing/expired."""
        value = self._cache.get(key)
        if value is not None:
            logger.debug("cache_hit", cache=self._name, key=key)
        else:
            logger.debug("cache_miss", cache=self._name, key=key)
        return value

    async def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*."""
        if value is None:
            msg = "MemoryCacheProvider cannot store None; use a sentinel value"
            raise ValueError(msg)
        self._cache[key] = value
        logger.debug("cache_set", cache=self._name, key=key)

    async def delete(self, key: str) -> None:
        """Remove *key* from the cache (no-op if absent)."""
        self._cache.pop(key, None)
        logger.debug("cache_delete", cache=self._name, key=key)

    async def delete_prefix(self, prefix: str) -> int:
        """Remove every key starting with *prefix*.  Returns the count removed."""
        # Snapshot the keys first; TTLCache must not change size mid-iteration.
        doomed = [key for key in list(self._cache.keys()) if key.startswith(prefix)]
        for key in doomed:
            self._cache.pop(key, None)
        logger.debug("cache_delete_prefix", cache=self._name, prefix=prefix, removed=len(doomed))
        return len(doomed)

    async def clear(self) -> None:
        """Drop every entry."""
        self._cache.clear()
        logger.debug("cache_clear", cache=self._name)

    async def exists(self, key: str) -> bool:
        """Return ``True`` if *key* is present and not expired."""
        return key in self._cache

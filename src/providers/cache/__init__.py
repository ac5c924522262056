"""Cache provider implementations.

Exports
-------
MemoryCacheProvider
    In-memory TTL cache backed by ``cachetools.TTLCache``.
"""

from src.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["MemoryCacheProvider"]

"""Public interface definitions for the services modelResolver depends on.

Business logic talks to storage only through the abstract base classes in
this package.  Concrete adapters live in ``src/providers/`` and are wired
together in ``src/main.py``; tests inject in-memory fakes instead.

    Interface         →  Concrete implementations (in src/providers/)
    ────────────────────────────────────────────────────────────────
    IProviderStore    →  SQLiteProviderStore
    ICacheProvider    →  MemoryCacheProvider
"""

from src.interfaces.cache_provider import ICacheProvider
from src.interfaces.provider_store import IProviderStore

__all__ = [
    "ICacheProvider",
    "IProviderStore",
]

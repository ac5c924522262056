"""Provider store implementations.

Exports
-------
SQLiteProviderStore
    aiosqlite-backed persistence for providers and their model configs.
"""

from src.providers.store.sqlite_provider_store import SQLiteProviderStore

__all__ = ["SQLiteProviderStore"]

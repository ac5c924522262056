"""Abstract base class for cache service providers.

Defines the key-value contract the resolution cache and the model catalog
are built on.  Keys are plain strings; the resolution cache encodes
``"{provider_name}:{model_id}"`` in them so that one provider's entries
can be dropped with :meth:`ICacheProvider.delete_prefix`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ICacheProvider(ABC):
    """Contract for key-value cache services.

    All operations are async so a network-backed store could implement
    the same contract without blocking the event loop.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Retrieve the value stored under *key*.

        Parameters
        ----------
        key:
            The cache key to look up.

        Returns
        -------
        Any or None
            The cached value if present and not expired; ``None`` otherwise.
            Callers that need negative caching must store a non-``None``
            sentinel value.
        """

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*, stamped with the current time.

        Parameters
        ----------
        key:
            The cache key.
        value:
            The value to store.  Must not be ``None``.
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the entry stored under *key*.  No-op if absent."""

    @abstractmethod
    async def delete_prefix(self, prefix: str) -> int:
        """Remove every entry whose key starts with *prefix*.

        Returns
        -------
        int
            Number of entries removed.  Never raises for a missing prefix.
        """

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Return ``True`` if *key* is present in the cache and not expired."""

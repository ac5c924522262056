"""Abstract base class for provider persistence.

Defines the contract for storing provider records together with their
embedded model configs.  The resolution cache only ever calls
:meth:`IProviderStore.find_provider_by_name`; the admin service uses the
mutation methods and invalidates caches after they return.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.provider import ModelConfig, Provider, ProviderUpsert


class IProviderStore(ABC):
    """Contract for provider persistence services.

    Implementations raise ``ProviderStoreError`` when the backing store
    fails, ``ProviderNotFoundError`` when a mutation targets an unknown id
    and ``DuplicateProviderError`` when a name is already taken.  A method
    that returns has durably committed its write.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if they don't exist.  Called at startup."""

    @abstractmethod
    async def find_provider_by_name(self, name: str) -> Provider | None:
        """Return the provider called *name* with its full model list and
        API key, or ``None`` if no such provider exists.
        """

    @abstractmethod
    async def get_provider(self, provider_id: int) -> Provider | None:
        """Return the provider with *provider_id*, or ``None``."""

    @abstractmethod
    async def list_providers(self) -> list[Provider]:
        """Return every provider, most recently updated first."""

    @abstractmethod
    async def save_provider(self, provider: ProviderUpsert) -> Provider:
        """Create (``provider.id is None``) or update a provider.

        Returns
        -------
        Provider
            The stored record after the write.
        """

    @abstractmethod
    async def update_api_key(self, provider_id: int, api_key: str | None) -> Provider:
        """Set or clear (``None``) the provider's API key.  Returns the updated record."""

    @abstractmethod
    async def update_models(self, provider_id: int, models: list[ModelConfig]) -> Provider:
        """Replace the provider's model list.  Returns the updated record."""

    @abstractmethod
    async def delete_provider(self, provider_id: int) -> Provider:
        """Delete a provider.  Returns the record as it was before deletion."""

    @abstractmethod
    async def exists_by_name(self, name: str) -> bool:
        """Return ``True`` if a provider called *name* exists."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this store."""

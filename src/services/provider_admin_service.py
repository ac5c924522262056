"""Provider administration: mutations followed by cache invalidation.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Services (business logic orchestration).
# Depends on: IProviderStore, plus every cache that holds provider data.
#
# Each mutation runs in two strictly ordered steps:
#
#   1. WRITE: the store call returns only after its commit.
#   2. INVALIDATE: every registered cache drops the entries of the
#                  affected provider name.
#
# If step 1 raises, step 2 never runs and cached entries stay as they
# were.
#
#   Mutation                  Invalidation scope
#   ───────────────────────────────────────────────────────────
#   update_provider_api_key   that provider's name
#   update_provider_models    that provider's name
#   save_provider             that provider's name (+ old name on rename)
#   delete_provider           that provider's name
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Protocol

import structlog

from src.interfaces.provider_store import IProviderStore
from src.models.provider import ModelConfig, Provider, ProviderUpsert

logger = structlog.get_logger(logger_name=__name__)


class CacheInvalidator(Protocol):
    """Anything holding provider-derived entries that can be dropped by name."""

    async def invalidate(self, provider_name: str | None = None) -> None: ...


class ProviderAdminService:
    """Admin entry points for provider data, coherent with all caches."""

    def __init__(self, store: IProviderStore, caches: list[CacheInvalidator]) -> None:
        self._store = store
        self._caches = list(caches)

    async def _invalidate(self, *provider_names: str) -> None:
        for name in dict.fromkeys(provider_names):
            for cache in self._caches:
                await cache.invalidate(name)
        logger.info("provider_cache_invalidated", providers=list(dict.fromkeys(provider_names)))

    # ── Mutations ──────────────────────────────────────────────────────

    async def update_provider_api_key(self, provider_id: int, api_key: str | None) -> Provider:
        """Set the provider's API key; an empty string or ``None`` clears it."""
        provider = await self._store.update_api_key(provider_id, api_key or None)
        await self._invalidate(provider.name)
        logger.info(
            "provider_api_key_updated",
            provider=provider.name,
            provider_id=provider.id,
            has_api_key=provider.has_api_key,
        )
        return provider

    async def update_provider_models(self, provider_id: int, models: list[ModelConfig]) -> Provider:
        """Replace the provider's model list."""
        provider = await self._store.update_models(provider_id, models)
        await self._invalidate(provider.name)
        logger.info(
            "provider_models_updated",
            provider=provider.name,
            provider_id=provider.id,
            models=len(provider.models),
        )
        return provider

    async def save_provider(self, upsert: ProviderUpsert) -> Provider:
        """Create or update a provider.

        On a rename both the old and the new name are invalidated, since
        entries may exist under either.
        """
        previous = await self._store.get_provider(upsert.id) if upsert.id is not None else None
        provider = await self._store.save_provider(upsert)

        names = [provider.name]
        if previous is not None and previous.name != provider.name:
            names.append(previous.name)
        await self._invalidate(*names)

        logger.info(
            "provider_saved",
            provider=provider.name,
            provider_id=provider.id,
            created=upsert.id is None,
            renamed_from=previous.name if previous is not None and previous.name != provider.name else None,
        )
        return provider

    async def delete_provider(self, provider_id: int) -> Provider:
        """Delete a provider and drop everything cached for it."""
        provider = await self._store.delete_provider(provider_id)
        await self._invalidate(provider.name)
        logger.info("provider_deleted", provider=provider.name, provider_id=provider.id)
        return provider

    # ── Reads ──────────────────────────────────────────────────────────

    async def get_all_providers(self) -> list[Provider]:
        return await self._store.list_providers()

    async def get_provider(self, provider_id: int) -> Provider | None:
        return await self._store.get_provider(provider_id)

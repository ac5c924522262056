"""Model resolution cache: (provider name, model id) to a usable config.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Services.
# Depends on: IProviderStore (one query per miss), ICacheProvider (entries).
#
# ``resolve`` answers: given the provider and model a user selected, which
# provider connection and model record should be used, if any usable one
# exists?  Both answers are cached under ``"{provider}:{model}"`` for the
# same TTL (24 h by default):
#
#   ResolvedModel: provider snapshot + matching model config
#   NotFound: provider missing, model missing/disabled, wrong
#                  category, or no API key configured
#
# Store failures are raised to the caller and nothing is written for that
# key, so a recovering store is observed on the next read.
#
# One instance serves one model category (chat, audio, ...).  Mutation
# paths call ``invalidate`` after their store write has committed; see
# ProviderAdminService.
#
# Known race: a resolve whose store query started before a mutation
# committed may write its (stale) result just after the mutation's
# invalidate.  The window is bounded by one store query, not by the TTL.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import structlog

from src.interfaces.cache_provider import ICacheProvider
from src.interfaces.provider_store import IProviderStore
from src.models.provider import ModelCategory, Provider
from src.models.resolution import NotFound, NotFoundReason, Resolution, ResolvedModel

logger = structlog.get_logger(logger_name=__name__)

_KEY_SEPARATOR = ":"


def cache_key(provider_name: str, model_id: str) -> str:
    """Return the cache key for a provider/model pair."""
    return f"{provider_name}{_KEY_SEPARATOR}{model_id}"


class ModelResolutionCache:
    """Caches provider/model resolutions for one model category.

    Parameters
    ----------
    store:
        Provider persistence queried on a cache miss.
    cache:
        Entry storage.  Its TTL is the resolution TTL; build it with
        ``MemoryCacheProvider(ttl=...)``.
    category:
        Only models of this category resolve.
    """

    def __init__(
        self,
        store: IProviderStore,
        cache: ICacheProvider,
        category: ModelCategory = ModelCategory.CHAT,
    ) -> None:
        self._store = store
        self._cache = cache
        self._category = category

    @property
    def category(self) -> ModelCategory:
        return self._category

    async def resolve(self, provider_name: str, model_id: str) -> Resolution:
        """Resolve *model_id* of *provider_name*, consulting the cache first.

        Raises
        ------
        ValueError
            If either argument is empty, or *provider_name* contains
            the key separator.
        ProviderStoreError
            If the store query fails.  Nothing is cached in that case.
        """
        if not provider_name:
            raise ValueError("provider_name must be a non-empty string")
        if _KEY_SEPARATOR in provider_name:
            raise ValueError(f"provider_name must not contain {_KEY_SEPARATOR!r}")
        if not model_id:
            raise ValueError("model_id must be a non-empty string")

        key = cache_key(provider_name, model_id)
        cached = await self._cache.get(key)
        if cached is not None:
            logger.debug(
                "resolution_cache_hit",
                category=self._category.value,
                key=key,
                found=cached.found,
            )
            return cached

        logger.debug("resolution_cache_miss", category=self._category.value, key=key)
        provider = await self._store.find_provider_by_name(provider_name)
        result = self._evaluate(provider_name, model_id, provider)
        await self._cache.set(key, result)

        if isinstance(result, NotFound):
            logger.info(
                "model_not_resolved",
                category=self._category.value,
                provider=provider_name,
                model=model_id,
                reason=result.reason.value,
            )
        return result

    async def invalidate(self, provider_name: str | None = None) -> None:
        """Drop cached entries for *provider_name*, or every entry if ``None``.

        Idempotent; removing nothing is not an error.
        """
        if provider_name is None:
            await self._cache.clear()
            logger.info("resolution_cache_cleared", category=self._category.value)
            return

        removed = await self._cache.delete_prefix(f"{provider_name}{_KEY_SEPARATOR}")
        logger.info(
            "resolution_cache_invalidated",
            category=self._category.value,
            provider=provider_name,
            removed=removed,
        )

    def _evaluate(
        self,
        provider_name: str,
        model_id: str,
        provider: Provider | None,
    ) -> Resolution:
        def not_found(reason: NotFoundReason) -> NotFound:
            return NotFound(
                provider_name=provider_name,
                model_id=model_id,
                category=self._category,
                reason=reason,
            )

        if provider is None:
            return not_found(NotFoundReason.PROVIDER_MISSING)

        model = provider.find_model(model_id)
        if model is None:
            return not_found(NotFoundReason.MODEL_MISSING)
        if not model.enabled:
            return not_found(NotFoundReason.MODEL_DISABLED)
        if model.category != self._category:
            return not_found(NotFoundReason.CATEGORY_MISMATCH)
        if not provider.has_api_key:
            return not_found(NotFoundReason.CREDENTIAL_MISSING)

        return ResolvedModel(provider=provider, model=model)


class ModelResolver:
    """Routes resolutions to the per-category caches.

    Holds one :class:`ModelResolutionCache` per configured category and
    fans ``invalidate`` out to all of them.
    """

    def __init__(self, caches: list[ModelResolutionCache]) -> None:
        self._caches: dict[ModelCategory, ModelResolutionCache] = {}
        for cache in caches:
            if cache.category in self._caches:
                msg = f"Duplicate resolution cache for category {cache.category.value}"
                raise ValueError(msg)
            self._caches[cache.category] = cache

    @property
    def categories(self) -> list[ModelCategory]:
        return list(self._caches)

    def for_category(self, category: ModelCategory) -> ModelResolutionCache:
        """Return the cache for *category*.  Raises ``KeyError`` if none is configured."""
        return self._caches[category]

    async def resolve(
        self,
        provider_name: str,
        model_id: str,
        category: ModelCategory = ModelCategory.CHAT,
    ) -> Resolution:
        return await self.for_category(category).resolve(provider_name, model_id)

    async def invalidate(self, provider_name: str | None = None) -> None:
        for cache in self._caches.values():
            await cache.invalidate(provider_name)

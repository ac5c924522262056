"""Model catalog: cached snapshot of every provider and its enabled models.

Backs the model picker and capability lookups.  One ``list_providers``
query fills the snapshot, which lives for ``catalog_cache_ttl_seconds``
(5 minutes by default) or until any provider mutation clears it.  Unlike
the resolution cache, the snapshot spans all providers, so invalidation
is always global.
"""

from __future__ import annotations

import structlog

from src.interfaces.cache_provider import ICacheProvider
from src.interfaces.provider_store import IProviderStore
from src.models.provider import KEYLESS_PROVIDERS, ModelCategory, Provider
from src.models.resolution import ModelInfo, ProviderModelsInfo, ResolvedModel
from src.utils.errors import NoModelsAvailableError

logger = structlog.get_logger(logger_name=__name__)

_SNAPSHOT_KEY = "catalog:providers"


class ModelCatalogService:
    """Read-mostly view over all configured providers."""

    def __init__(self, store: IProviderStore, cache: ICacheProvider) -> None:
        self._store = store
        self._cache = cache

    async def _providers(self) -> list[Provider]:
        cached = await self._cache.get(_SNAPSHOT_KEY)
        if cached is not None:
            return cached

        providers = await self._store.list_providers()
        await self._cache.set(_SNAPSHOT_KEY, providers)
        logger.info("catalog_snapshot_loaded", providers=len(providers))
        return providers

    async def get_models_info(self) -> list[ProviderModelsInfo]:
        """Return every provider with its enabled models and capability flags."""
        providers = await self._providers()
        return [
            ProviderModelsInfo(
                id=p.id,
                provider=p.name,
                alias=p.alias,
                has_api_key=p.has_api_key or p.name in KEYLESS_PROVIDERS,
                models=[
                    ModelInfo(
                        name=m.id,
                        category=m.category,
                        is_tool_call_unsupported=not m.supports_function_call,
                        is_image_input_unsupported=not m.supports_image_input,
                        context_limit=m.context_limit,
                    )
                    for m in p.enabled_models()
                ],
            )
            for p in providers
        ]

    async def get_default_model(self, category: ModelCategory | None = None) -> ResolvedModel:
        """Return the first enabled model of the first usable provider.

        Providers are visited most recently updated first.  With *category*
        set, only models of that category qualify.

        Raises
        ------
        NoModelsAvailableError
            If no usable provider offers a qualifying model.
        """
        for provider in await self._providers():
            if not provider.is_usable:
                continue
            for model in provider.enabled_models():
                if category is None or model.category == category:
                    return ResolvedModel(provider=provider, model=model)

        scope = f" of category {category.value}" if category else ""
        raise NoModelsAvailableError(f"No enabled models{scope} are configured")

    async def is_tool_call_supported(self, provider_name: str, model_id: str) -> bool:
        """Return the model's function-calling flag; unknown models default to ``True``."""
        for provider in await self._providers():
            if provider.name != provider_name:
                continue
            model = provider.find_model(model_id)
            if model is not None:
                return model.supports_function_call
        return True

    async def invalidate(self, provider_name: str | None = None) -> None:
        """Drop the snapshot.  *provider_name* is accepted but the scope is always global."""
        await self._cache.clear()
        logger.info("catalog_snapshot_invalidated", provider=provider_name)

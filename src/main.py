"""modelResolver FastAPI application entry point.

Wires the provider store, the caches and the services together and
mounts the API routes.  Configuration comes from ``config/config.yaml``
overlaid with ``.env`` / environment variables.

Cache topology built by :func:`build_components`:

    SQLiteProviderStore
      ├── ModelResolutionCache (chat)   ─┐
      ├── ModelResolutionCache (audio)  ─┼── ModelResolver
      ├── ModelCatalogService           ─┤
      └── ProviderAdminService ──────────┘ invalidates all of the above
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router as api_router
from src.config.loader import load_config
from src.config.settings import Settings
from src.providers.cache.memory_cache import MemoryCacheProvider
from src.providers.store.sqlite_provider_store import SQLiteProviderStore
from src.services.model_catalog_service import ModelCatalogService
from src.services.model_resolution import ModelResolutionCache, ModelResolver
from src.services.provider_admin_service import ProviderAdminService
from src.utils.errors import ConfigurationError
from src.utils.logging import configure_logging, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component assembly
# ---------------------------------------------------------------------------


def build_components(app_settings: Settings) -> dict[str, Any]:
    """Construct the store, caches and services for one process.

    Returns a flat dict of named components to be stored on ``app.state``.
    Caches start cold; nothing here touches the database.
    """
    try:
        categories = app_settings.get_resolution_categories()
    except ValueError as exc:
        raise ConfigurationError(f"Invalid RESOLUTION_CATEGORIES: {exc}") from exc
    if not categories:
        raise ConfigurationError("RESOLUTION_CATEGORIES must name at least one category")

    store = SQLiteProviderStore(db_path=app_settings.provider_db_path)

    resolution_caches = [
        ModelResolutionCache(
            store=store,
            cache=MemoryCacheProvider(
                max_size=app_settings.resolution_cache_max_size,
                ttl=app_settings.resolution_cache_ttl_seconds,
                name=f"resolution:{category.value}",
            ),
            category=category,
        )
        for category in categories
    ]
    model_resolver = ModelResolver(resolution_caches)

    catalog_service = ModelCatalogService(
        store=store,
        cache=MemoryCacheProvider(
            max_size=1,
            ttl=app_settings.catalog_cache_ttl_seconds,
            name="catalog",
        ),
    )

    admin_service = ProviderAdminService(
        store=store,
        caches=[model_resolver, catalog_service],
    )

    return {
        "provider_store": store,
        "model_resolver": model_resolver,
        "catalog_service": catalog_service,
        "admin_service": admin_service,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


def _make_lifespan(app_settings: Settings):  # noqa: ANN202
    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        """Initialise the store and services on startup."""
        components = build_components(app_settings)
        for key, value in components.items():
            setattr(application.state, key, value)

        await components["provider_store"].initialize()

        _logger.info(
            "app_startup",
            version="0.1.0",
            environment=app_settings.app_env,
            store=components["provider_store"].get_provider_name(),
            resolution_categories=[c.value for c in components["model_resolver"].categories],
            resolution_ttl_seconds=app_settings.resolution_cache_ttl_seconds,
        )

        yield

        _logger.info("app_shutdown")

    return _lifespan


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""
    s = app_settings or load_config()
    configure_logging(
        log_level=s.log_level,
        json_output=(s.app_env == "production"),
    )

    application = FastAPI(
        title="modelResolver API",
        version="0.1.0",
        description=(
            "Provider and model configuration service: resolves a user's "
            "provider/model selection to a usable configuration through a "
            "cache kept coherent with every admin mutation."
        ),
        lifespan=_make_lifespan(s),
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    application.include_router(api_router)
    return application


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    settings = load_config()
    uvicorn.run(
        create_app(settings),
        host=settings.app_host,
        port=settings.app_port,
    )

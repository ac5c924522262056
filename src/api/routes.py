"""FastAPI API routes for modelResolver.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                              Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/health                        GET     Health check + store status
# /api/v1/providers                     GET     List providers (keys masked)
# /api/v1/providers                     POST    Create or update a provider
# /api/v1/providers/{id}                GET     One provider
# /api/v1/providers/{id}                DELETE  Delete a provider
# /api/v1/providers/{id}/api-key        PUT     Set or clear the API key
# /api/v1/providers/{id}/models         PUT     Replace the model list
# /api/v1/models                        GET     Catalog of enabled models
# /api/v1/models/resolve                GET     Resolve provider + model
#
# Services are read from ``app.state`` (populated in main.py's lifespan)
# through ``Annotated[..., Depends(...)]`` aliases, so tests can mount the
# router on a bare FastAPI app with fakes on its state.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from src.api.schemas import (
    ErrorResponse,
    HealthResponse,
    ModelsInfoResponse,
    ProviderListResponse,
    ProviderResponse,
    ResolveModelResponse,
    SaveProviderRequest,
    UpdateApiKeyRequest,
    UpdateModelsRequest,
)
from src.interfaces.provider_store import IProviderStore
from src.models.provider import PROVIDER_NAME_PATTERN, ModelCategory, ModelListUpdate
from src.models.resolution import NotFound
from src.services.model_catalog_service import ModelCatalogService
from src.services.model_resolution import ModelResolver
from src.services.provider_admin_service import ProviderAdminService
from src.utils.errors import ProviderStoreError
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

_VERSION = "0.1.0"

router = APIRouter(prefix="/api/v1")


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_store(request: Request) -> IProviderStore:
    """Return the provider store from application state."""
    return request.app.state.provider_store


def _get_admin_service(request: Request) -> ProviderAdminService:
    """Return the provider admin service from application state."""
    return request.app.state.admin_service


def _get_catalog(request: Request) -> ModelCatalogService:
    """Return the model catalog from application state."""
    return request.app.state.catalog_service


def _get_resolver(request: Request) -> ModelResolver:
    """Return the per-category model resolver from application state."""
    return request.app.state.model_resolver


StoreDep = Annotated[IProviderStore, Depends(_get_store)]
AdminDep = Annotated[ProviderAdminService, Depends(_get_admin_service)]
CatalogDep = Annotated[ModelCatalogService, Depends(_get_catalog)]
ResolverDep = Annotated[ModelResolver, Depends(_get_resolver)]


# ---------------------------------------------------------------------------
# Provider administration
# ---------------------------------------------------------------------------


@router.get(
    "/providers",
    response_model=ProviderListResponse,
    summary="List configured providers",
)
async def list_providers(admin: AdminDep) -> ProviderListResponse:
    """Return every provider, most recently updated first."""
    providers = await admin.get_all_providers()
    return ProviderListResponse(
        providers=[ProviderResponse.from_provider(p) for p in providers],
        total=len(providers),
    )


@router.get(
    "/providers/{provider_id}",
    response_model=ProviderResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get one provider",
)
async def get_provider(provider_id: int, admin: AdminDep) -> ProviderResponse:
    provider = await admin.get_provider(provider_id)
    if provider is None:
        raise HTTPException(status_code=404, detail=f"Provider not found: {provider_id}")
    return ProviderResponse.from_provider(provider)


@router.post(
    "/providers",
    response_model=ProviderResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Create or update a provider",
)
async def save_provider(body: SaveProviderRequest, admin: AdminDep) -> ProviderResponse:
    """Create a provider, or overwrite every field of provider ``body.id``."""
    try:
        upsert = body.to_upsert()
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    provider = await admin.save_provider(upsert)
    return ProviderResponse.from_provider(provider)


@router.put(
    "/providers/{provider_id}/api-key",
    response_model=ProviderResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Set or clear a provider's API key",
)
async def update_provider_api_key(
    provider_id: int,
    body: UpdateApiKeyRequest,
    admin: AdminDep,
) -> ProviderResponse:
    provider = await admin.update_provider_api_key(provider_id, body.api_key)
    return ProviderResponse.from_provider(provider)


@router.put(
    "/providers/{provider_id}/models",
    response_model=ProviderResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Replace a provider's model list",
)
async def update_provider_models(
    provider_id: int,
    body: UpdateModelsRequest,
    admin: AdminDep,
) -> ProviderResponse:
    try:
        update = ModelListUpdate(models=body.models)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    provider = await admin.update_provider_models(provider_id, update.models)
    return ProviderResponse.from_provider(provider)


@router.delete(
    "/providers/{provider_id}",
    response_model=ProviderResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a provider",
)
async def delete_provider(provider_id: int, admin: AdminDep) -> ProviderResponse:
    provider = await admin.delete_provider(provider_id)
    return ProviderResponse.from_provider(provider)


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


@router.get(
    "/models",
    response_model=ModelsInfoResponse,
    summary="List providers with their enabled models",
)
async def list_models(catalog: CatalogDep) -> ModelsInfoResponse:
    return ModelsInfoResponse(providers=await catalog.get_models_info())


@router.get(
    "/models/resolve",
    response_model=ResolveModelResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Resolve a provider/model selection to a usable configuration",
)
async def resolve_model(
    resolver: ResolverDep,
    provider: Annotated[str, Query(min_length=1, pattern=PROVIDER_NAME_PATTERN)],
    model: Annotated[str, Query(min_length=1)],
    category: ModelCategory = ModelCategory.CHAT,
) -> ResolveModelResponse | JSONResponse:
    """Resolve the user's model selection.

    A selection that does not resolve returns 404 with an actionable
    configuration hint rather than a generic server error.
    """
    if category not in resolver.categories:
        raise HTTPException(
            status_code=400,
            detail=f"No resolver configured for category: {category.value}. "
            f"Allowed: {', '.join(c.value for c in resolver.categories)}",
        )

    result = await resolver.resolve(provider, model, category)
    if isinstance(result, NotFound):
        body = ErrorResponse(
            error="ModelNotConfigured",
            detail=result.message,
            reason=result.reason.value,
        )
        return JSONResponse(status_code=404, content=body.model_dump())

    return ResolveModelResponse(
        category=category,
        provider=ProviderResponse.from_provider(result.provider),
        model=result.model,
    )


# ---------------------------------------------------------------------------
# System endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(store: StoreDep, resolver: ResolverDep) -> HealthResponse:
    """Return application health and whether the provider store answers."""
    try:
        await store.exists_by_name("")
        store_available = True
    except ProviderStoreError:
        _logger.warning("health_store_unavailable", store=store.get_provider_name())
        store_available = False

    return HealthResponse(
        status="healthy" if store_available else "degraded",
        version=_VERSION,
        store=store.get_provider_name(),
        store_available=store_available,
        resolution_categories=[c.value for c in resolver.categories],
    )

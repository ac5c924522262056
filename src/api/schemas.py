"""Pydantic request/response schemas for the modelResolver API.

Request schemas end with "Request", response schemas with "Response".
Provider responses never carry the raw API key; only a masked preview
and a ``has_api_key`` flag leave the server.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from src.models.provider import (
    PROVIDER_NAME_PATTERN,
    ModelCategory,
    ModelConfig,
    Provider,
    ProviderUpsert,
)
from src.models.resolution import ProviderModelsInfo

_KEY_PREVIEW_MIN_LENGTH = 12


def mask_api_key(api_key: str | None) -> str | None:
    """Return a display-safe preview of *api_key*, e.g. ``sk-…wxyz``."""
    if not api_key:
        return None
    if len(api_key) < _KEY_PREVIEW_MIN_LENGTH:
        return "****"
    return f"{api_key[:3]}…{api_key[-4:]}"


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class SaveProviderRequest(BaseModel):
    """Create (no ``id``) or fully overwrite (``id`` set) a provider."""

    id: int | None = None
    name: str = Field(..., min_length=1, max_length=100, pattern=PROVIDER_NAME_PATTERN)
    alias: str = ""
    base_url: str = ""
    api_key: str | None = None
    models: list[ModelConfig] = Field(default_factory=list)

    def to_upsert(self) -> ProviderUpsert:
        return ProviderUpsert(
            id=self.id,
            name=self.name,
            alias=self.alias,
            base_url=self.base_url,
            api_key=self.api_key or None,
            models=self.models,
        )


class UpdateApiKeyRequest(BaseModel):
    """New API key; ``null`` or an empty string clears it."""

    api_key: str | None = None


class UpdateModelsRequest(BaseModel):
    """Replacement model list for a provider."""

    models: list[ModelConfig]


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ProviderResponse(BaseModel):
    """A provider as shown to admins."""

    id: int
    name: str
    alias: str
    base_url: str
    has_api_key: bool
    api_key_preview: str | None = None
    models: list[ModelConfig]
    updated_at: datetime

    @classmethod
    def from_provider(cls, provider: Provider) -> ProviderResponse:
        return cls(
            id=provider.id,
            name=provider.name,
            alias=provider.alias,
            base_url=provider.base_url,
            has_api_key=provider.has_api_key,
            api_key_preview=mask_api_key(provider.api_key),
            models=list(provider.models),
            updated_at=provider.updated_at,
        )


class ProviderListResponse(BaseModel):
    """All configured providers."""

    providers: list[ProviderResponse]
    total: int


class ModelsInfoResponse(BaseModel):
    """Catalog of providers and their enabled models."""

    providers: list[ProviderModelsInfo]


class ResolveModelResponse(BaseModel):
    """Successful resolution of a provider/model pair."""

    category: ModelCategory
    provider: ProviderResponse
    model: ModelConfig


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    store: str
    store_available: bool
    resolution_categories: list[str]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
    reason: str | None = None

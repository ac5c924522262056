"""modelResolver API layer: routes, schemas, and middleware."""

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router
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

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "ErrorResponse",
    "HealthResponse",
    "ModelsInfoResponse",
    "ProviderListResponse",
    "ProviderResponse",
    "ResolveModelResponse",
    "SaveProviderRequest",
    "UpdateApiKeyRequest",
    "UpdateModelsRequest",
]

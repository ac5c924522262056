"""Domain models for modelResolver.

- **provider** -- ``Provider`` records with embedded ``ModelConfig`` entries,
  the ``ModelCategory`` enum and admin input models.
- **resolution** -- the ``ResolvedModel | NotFound`` tagged variant returned
  by the resolution cache, plus the catalog views.
"""

from src.models.provider import (
    KEYLESS_PROVIDERS,
    PROVIDER_NAME_PATTERN,
    ModelCategory,
    ModelConfig,
    ModelListUpdate,
    Provider,
    ProviderUpsert,
)
from src.models.resolution import (
    ModelInfo,
    NotFound,
    NotFoundReason,
    ProviderModelsInfo,
    Resolution,
    ResolvedModel,
)

__all__ = [
    "KEYLESS_PROVIDERS",
    "PROVIDER_NAME_PATTERN",
    "ModelCategory",
    "ModelConfig",
    "ModelInfo",
    "ModelListUpdate",
    "NotFound",
    "NotFoundReason",
    "Provider",
    "ProviderModelsInfo",
    "ProviderUpsert",
    "Resolution",
    "ResolvedModel",
]

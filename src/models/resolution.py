"""Resolution results and catalog views.

A resolution is a tagged variant: either :class:`ResolvedModel` (the
provider snapshot plus the matching model config) or :class:`NotFound`
(why nothing usable exists).  Both carry a ``found`` literal so callers
branch on one attribute and type checkers can narrow the union.

``NotFound`` is a normal value.  It is cached exactly like a positive
result; infrastructure failures are raised instead and never take this
shape.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from src.models.provider import ModelCategory, ModelConfig, Provider


class NotFoundReason(str, Enum):
    """Why a (provider, model) pair did not resolve."""

    PROVIDER_MISSING = "PROVIDER_MISSING"
    MODEL_MISSING = "MODEL_MISSING"
    MODEL_DISABLED = "MODEL_DISABLED"
    CATEGORY_MISMATCH = "CATEGORY_MISMATCH"
    CREDENTIAL_MISSING = "CREDENTIAL_MISSING"


_REASON_MESSAGES: dict[NotFoundReason, str] = {
    NotFoundReason.PROVIDER_MISSING: (
        "Provider '{provider}' is not configured. Add it in the admin provider settings."
    ),
    NotFoundReason.MODEL_MISSING: (
        "Model '{model}' is not configured for provider '{provider}'. "
        "Select another model in your preferences."
    ),
    NotFoundReason.MODEL_DISABLED: (
        "Model '{model}' of provider '{provider}' is disabled. "
        "Enable it or select another model in your preferences."
    ),
    NotFoundReason.CATEGORY_MISMATCH: (
        "Model '{model}' of provider '{provider}' cannot be used as a {category} model. "
        "Configure a {category} model in your preferences."
    ),
    NotFoundReason.CREDENTIAL_MISSING: (
        "Provider '{provider}' has no API key configured. "
        "Set an API key in the admin provider settings."
    ),
}


class ResolvedModel(BaseModel):
    """A usable provider connection plus the model capability record."""

    model_config = ConfigDict(frozen=True)

    found: Literal[True] = True
    provider: Provider
    model: ModelConfig


class NotFound(BaseModel):
    """Negative resolution outcome.  Cached with the same TTL as a hit."""

    model_config = ConfigDict(frozen=True)

    found: Literal[False] = False
    provider_name: str
    model_id: str
    category: ModelCategory
    reason: NotFoundReason

    @property
    def message(self) -> str:
        """Actionable, user-facing configuration hint."""
        return _REASON_MESSAGES[self.reason].format(
            provider=self.provider_name,
            model=self.model_id,
            category=self.category.value,
        )


Resolution = Union[ResolvedModel, NotFound]


# ─── Catalog views ────────────────────────────────────────────────────


class ModelInfo(BaseModel):
    """Public capability summary of one enabled model."""

    model_config = ConfigDict(frozen=True)

    name: str
    category: ModelCategory
    is_tool_call_unsupported: bool = False
    is_image_input_unsupported: bool = False
    context_limit: int = 0


class ProviderModelsInfo(BaseModel):
    """Catalog entry: a provider and the models it currently offers."""

    model_config = ConfigDict(frozen=True)

    id: int
    provider: str
    alias: str = ""
    has_api_key: bool = False
    models: list[ModelInfo] = Field(default_factory=list)

"""Provider and model-config domain models.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Models (bottom of the dependency graph: no imports from upper layers).
#
# A *provider* is a configured upstream model vendor: connection details,
# an optional API key and the ordered list of models it offers.  Model
# configs are embedded in their provider and persisted together, so a
# single store read returns everything needed to resolve a model.
#
# All models are frozen.  Snapshots handed out by the resolution cache
# can therefore be shared between requests without defensive copies.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Providers that run locally and need no API key to be usable.
KEYLESS_PROVIDERS = frozenset({"ollama"})

# Provider names form the first segment of "{provider}:{model}" cache keys,
# and model ids may themselves contain ":" (e.g. "llama3:8b").
PROVIDER_NAME_PATTERN = r"^[^:]+$"


class ModelCategory(str, Enum):
    """Usage type of a model.  Resolvers filter on exactly one category."""

    CHAT = "chat"
    VISION = "vision"
    EMBEDDING = "embedding"
    AUDIO = "audio"
    TRANSCRIPTION = "transcription"
    RERANK = "rerank"
    AGENT = "agent"


class ModelConfig(BaseModel):
    """Capability record of one model offered by a provider."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Model identifier, unique within its provider.")
    enabled: bool = Field(default=True, description="Disabled models never resolve.")
    category: ModelCategory = Field(default=ModelCategory.CHAT)
    supports_function_call: bool = Field(default=True)
    supports_image_input: bool = Field(default=True)
    context_limit: int = Field(default=0, ge=0, description="Context window in tokens; 0 = unknown.")
    description: str | None = None
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)


def _check_unique_model_ids(models: list[ModelConfig]) -> list[ModelConfig]:
    seen: set[str] = set()
    for model in models:
        if model.id in seen:
            msg = f"Duplicate model id: {model.id}"
            raise ValueError(msg)
        seen.add(model.id)
    return models


class Provider(BaseModel):
    """A persisted provider record with its embedded model configs."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = Field(
        min_length=1,
        pattern=PROVIDER_NAME_PATTERN,
        description="Unique provider name; first segment of cache keys.",
    )
    alias: str = ""
    base_url: str = ""
    api_key: str | None = None
    models: list[ModelConfig] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    @property
    def is_usable(self) -> bool:
        """True if the provider can serve requests (keyed, or a local provider)."""
        if self.name in KEYLESS_PROVIDERS:
            return True
        return bool(self.base_url) and self.has_api_key

    def find_model(self, model_id: str) -> ModelConfig | None:
        """Return the model config with *model_id*, or ``None``."""
        for model in self.models:
            if model.id == model_id:
                return model
        return None

    def enabled_models(self) -> list[ModelConfig]:
        return [m for m in self.models if m.enabled]


class ProviderUpsert(BaseModel):
    """Input for creating (``id`` absent) or updating (``id`` set) a provider."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    name: str = Field(min_length=1, pattern=PROVIDER_NAME_PATTERN)
    alias: str = ""
    base_url: str = ""
    api_key: str | None = None
    models: list[ModelConfig] = Field(default_factory=list)

    @field_validator("models")
    @classmethod
    def _unique_model_ids(cls, value: list[ModelConfig]) -> list[ModelConfig]:
        return _check_unique_model_ids(value)


class ModelListUpdate(BaseModel):
    """Replacement model list for a provider."""

    model_config = ConfigDict(frozen=True)

    models: list[ModelConfig]

    @field_validator("models")
    @classmethod
    def _unique_model_ids(cls, value: list[ModelConfig]) -> list[ModelConfig]:
        return _check_unique_model_ids(value)

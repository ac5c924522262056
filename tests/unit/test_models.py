"""Unit tests for provider and resolution domain models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.api.schemas import SaveProviderRequest
from src.models.provider import (
    ModelCategory,
    ModelConfig,
    ModelListUpdate,
    Provider,
    ProviderUpsert,
)
from src.models.resolution import NotFound, NotFoundReason, ResolvedModel


def _provider(**overrides) -> Provider:
    fields = {
        "id": 1,
        "name": "openai",
        "base_url": "https://api.openai.com/v1",
        "api_key": "sk-test",
        "models": [
            ModelConfig(id="gpt-4o"),
            ModelConfig(id="whisper-1", category=ModelCategory.AUDIO),
            ModelConfig(id="gpt-3.5", enabled=False),
        ],
    }
    fields.update(overrides)
    return Provider(**fields)


# ─── ModelConfig ──────────────────────────────────────────────────


class TestModelConfig:
    def test_defaults(self) -> None:
        model = ModelConfig(id="gpt-4o")
        assert model.enabled is True
        assert model.category == ModelCategory.CHAT
        assert model.supports_function_call is True
        assert model.context_limit == 0

    def test_empty_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ModelConfig(id="")

    def test_negative_context_limit_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ModelConfig(id="m", context_limit=-1)

    def test_temperature_range(self) -> None:
        with pytest.raises(ValidationError):
            ModelConfig(id="m", temperature=2.5)

    def test_frozen(self) -> None:
        model = ModelConfig(id="gpt-4o")
        with pytest.raises(ValidationError):
            model.enabled = False

    def test_category_from_string(self) -> None:
        assert ModelConfig(id="m", category="audio").category == ModelCategory.AUDIO


# ─── Provider ─────────────────────────────────────────────────────


class TestProvider:
    def test_find_model(self) -> None:
        provider = _provider()
        assert provider.find_model("whisper-1").category == ModelCategory.AUDIO
        assert provider.find_model("nope") is None

    def test_enabled_models_keeps_order(self) -> None:
        assert [m.id for m in _provider().enabled_models()] == ["gpt-4o", "whisper-1"]

    def test_has_api_key(self) -> None:
        assert _provider().has_api_key is True
        assert _provider(api_key=None).has_api_key is False
        assert _provider(api_key="").has_api_key is False

    def test_is_usable_requires_url_and_key(self) -> None:
        assert _provider().is_usable is True
        assert _provider(api_key=None).is_usable is False
        assert _provider(base_url="").is_usable is False

    def test_keyless_provider_is_usable(self) -> None:
        assert _provider(name="ollama", api_key=None).is_usable is True


# ─── Admin inputs ─────────────────────────────────────────────────


def test_upsert_rejects_duplicate_model_ids() -> None:
    with pytest.raises(ValidationError, match="Duplicate model id"):
        ProviderUpsert(name="openai", models=[ModelConfig(id="a"), ModelConfig(id="a")])


def test_model_list_update_rejects_duplicate_ids() -> None:
    with pytest.raises(ValidationError):
        ModelListUpdate(models=[ModelConfig(id="a"), ModelConfig(id="a")])


def test_upsert_requires_name() -> None:
    with pytest.raises(ValidationError):
        ProviderUpsert(name="")


# ─── Resolution variants ──────────────────────────────────────────


def test_resolved_model_is_tagged_found() -> None:
    provider = _provider()
    result = ResolvedModel(provider=provider, model=provider.models[0])
    assert result.found is True


@pytest.mark.parametrize(
    ("reason", "fragment"),
    [
        (NotFoundReason.PROVIDER_MISSING, "Provider 'acme' is not configured"),
        (NotFoundReason.MODEL_MISSING, "Model 'm1' is not configured for provider 'acme'"),
        (NotFoundReason.MODEL_DISABLED, "is disabled"),
        (NotFoundReason.CATEGORY_MISMATCH, "cannot be used as a audio model"),
        (NotFoundReason.CREDENTIAL_MISSING, "has no API key configured"),
    ],
)
def test_not_found_message_is_actionable(reason: NotFoundReason, fragment: str) -> None:
    result = NotFound(
        provider_name="acme",
        model_id="m1",
        category=ModelCategory.AUDIO,
        reason=reason,
    )
    assert result.found is False
    assert fragment in result.message


# ─── Provider names and cache keys ────────────────────────────────


@pytest.mark.parametrize("name", ["a:b", ":", "openai:"])
def test_provider_name_with_key_separator_rejected(name: str) -> None:
    with pytest.raises(ValidationError):
        ProviderUpsert(name=name)
    with pytest.raises(ValidationError):
        _provider(name=name)
    with pytest.raises(ValidationError):
        SaveProviderRequest(name=name)


def test_model_id_may_contain_colon() -> None:
    provider = _provider(name="ollama", models=[ModelConfig(id="llama3:8b")])
    assert provider.find_model("llama3:8b") is not None

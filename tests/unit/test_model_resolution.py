"""Unit tests for ModelResolutionCache and ModelResolver.

Each test observes store traffic through ``InMemoryProviderStore.find_calls``
and steps time with the fake clock behind the cache.
"""

from __future__ import annotations

import pytest

from src.models.provider import ModelCategory, ModelConfig, ProviderUpsert
from src.models.resolution import NotFound, NotFoundReason, ResolvedModel
from src.providers.cache.memory_cache import MemoryCacheProvider
from src.services.model_resolution import ModelResolutionCache, ModelResolver, cache_key
from src.utils.errors import ProviderStoreError

_TTL = 86400


def _upsert(name: str = "openai", api_key: str | None = "sk-test", **model_fields) -> ProviderUpsert:
    model = ModelConfig(id=model_fields.pop("model_id", "gpt-x"), **model_fields)
    return ProviderUpsert(
        name=name,
        base_url="https://api.example.com/v1",
        api_key=api_key,
        models=[model],
    )


@pytest.fixture
def resolution(store, memory_cache) -> ModelResolutionCache:
    return ModelResolutionCache(store=store, cache=memory_cache, category=ModelCategory.CHAT)


# ─── Resolution outcomes ──────────────────────────────────────────


async def test_resolves_enabled_chat_model(store, resolution) -> None:
    await store.save_provider(_upsert())

    result = await resolution.resolve("openai", "gpt-x")

    assert isinstance(result, ResolvedModel)
    assert result.found is True
    assert result.provider.name == "openai"
    assert result.provider.api_key == "sk-test"
    assert result.model.id == "gpt-x"


async def test_second_resolve_within_ttl_skips_store(store, resolution, clock) -> None:
    await store.save_provider(_upsert())

    first = await resolution.resolve("openai", "gpt-x")
    clock.advance(_TTL - 1)
    second = await resolution.resolve("openai", "gpt-x")

    assert store.find_calls == 1
    assert second == first


async def test_missing_provider_is_negatively_cached(store, resolution) -> None:
    first = await resolution.resolve("ghost", "m1")
    second = await resolution.resolve("ghost", "m1")

    assert isinstance(first, NotFound)
    assert first.reason == NotFoundReason.PROVIDER_MISSING
    assert second == first
    assert store.find_calls == 1


@pytest.mark.parametrize(
    ("upsert_kwargs", "model_id", "reason"),
    [
        ({}, "unknown-model", NotFoundReason.MODEL_MISSING),
        ({"enabled": False}, "gpt-x", NotFoundReason.MODEL_DISABLED),
        ({"category": ModelCategory.AUDIO}, "gpt-x", NotFoundReason.CATEGORY_MISMATCH),
        ({"api_key": None}, "gpt-x", NotFoundReason.CREDENTIAL_MISSING),
    ],
)
async def test_not_found_reasons(store, resolution, upsert_kwargs, model_id, reason) -> None:
    await store.save_provider(_upsert(**upsert_kwargs))

    result = await resolution.resolve("openai", model_id)

    assert isinstance(result, NotFound)
    assert result.reason == reason
    assert result.provider_name == "openai"
    assert result.model_id == model_id
    assert result.category == ModelCategory.CHAT


async def test_disabled_model_reported_before_missing_key(store, resolution) -> None:
    await store.save_provider(_upsert(api_key=None, enabled=False))
    result = await resolution.resolve("openai", "gpt-x")
    assert result.reason == NotFoundReason.MODEL_DISABLED


async def test_chat_model_requested_as_audio_is_category_mismatch(store, clock) -> None:
    await store.save_provider(_upsert())
    audio = ModelResolutionCache(
        store=store,
        cache=MemoryCacheProvider(ttl=_TTL, timer=clock),
        category=ModelCategory.AUDIO,
    )

    result = await audio.resolve("openai", "gpt-x")

    assert isinstance(result, NotFound)
    assert result.reason == NotFoundReason.CATEGORY_MISMATCH
    assert result.category == ModelCategory.AUDIO


# ─── Expiry ───────────────────────────────────────────────────────


async def test_entry_expires_at_ttl(store, resolution, clock) -> None:
    await store.save_provider(_upsert())

    await resolution.resolve("openai", "gpt-x")
    clock.advance(_TTL)
    result = await resolution.resolve("openai", "gpt-x")

    assert store.find_calls == 2
    assert isinstance(result, ResolvedModel)


async def test_negative_entry_expires_at_ttl(store, resolution, clock) -> None:
    await resolution.resolve("ghost", "m1")
    await store.save_provider(_upsert(name="ghost", model_id="m1"))

    clock.advance(_TTL)
    result = await resolution.resolve("ghost", "m1")

    assert store.find_calls == 2
    assert isinstance(result, ResolvedModel)


# ─── Invalidation ─────────────────────────────────────────────────


async def test_scoped_invalidate_forces_fresh_query(store, resolution) -> None:
    await store.save_provider(_upsert())
    await resolution.resolve("openai", "gpt-x")

    await resolution.invalidate("openai")
    await resolution.resolve("openai", "gpt-x")

    assert store.find_calls == 2


async def test_unscoped_invalidate_forces_fresh_query(store, resolution) -> None:
    await store.save_provider(_upsert())
    await resolution.resolve("openai", "gpt-x")
    await resolution.resolve("ghost", "m1")

    await resolution.invalidate()
    await resolution.resolve("openai", "gpt-x")
    await resolution.resolve("ghost", "m1")

    assert store.find_calls == 4


async def test_scoped_invalidate_leaves_other_providers_cached(store, resolution) -> None:
    await store.save_provider(_upsert(name="acme"))
    await store.save_provider(_upsert(name="other"))
    await resolution.resolve("acme", "gpt-x")
    await resolution.resolve("other", "gpt-x")
    assert store.find_calls == 2

    await resolution.invalidate("acme")
    await resolution.resolve("other", "gpt-x")
    assert store.find_calls == 2

    await resolution.resolve("acme", "gpt-x")
    assert store.find_calls == 3


async def test_scoped_invalidate_does_not_match_name_prefixes(store, resolution) -> None:
    await store.save_provider(_upsert(name="openai"))
    await store.save_provider(_upsert(name="openai-compat"))
    await resolution.resolve("openai", "gpt-x")
    await resolution.resolve("openai-compat", "gpt-x")

    await resolution.invalidate("openai")
    await resolution.resolve("openai-compat", "gpt-x")

    assert store.find_calls == 2


async def test_invalidate_unknown_provider_is_noop(resolution) -> None:
    await resolution.invalidate("never-cached")


# ─── Failures ─────────────────────────────────────────────────────


async def test_store_error_propagates_and_is_not_cached(store, resolution, memory_cache) -> None:
    await store.save_provider(_upsert())
    store.fail_with = ProviderStoreError("database is locked")

    with pytest.raises(ProviderStoreError):
        await resolution.resolve("openai", "gpt-x")
    assert await memory_cache.exists(cache_key("openai", "gpt-x")) is False

    store.fail_with = None
    result = await resolution.resolve("openai", "gpt-x")
    assert isinstance(result, ResolvedModel)
    assert store.find_calls == 2


@pytest.mark.parametrize(("provider_name", "model_id"), [("", "gpt-x"), ("openai", "")])
async def test_empty_arguments_rejected(store, resolution, provider_name, model_id) -> None:
    with pytest.raises(ValueError):
        await resolution.resolve(provider_name, model_id)
    assert store.find_calls == 0


async def test_provider_name_with_separator_rejected(store, resolution) -> None:
    with pytest.raises(ValueError, match="must not contain"):
        await resolution.resolve("a:b", "c")
    assert store.find_calls == 0


async def test_colon_in_model_id_does_not_cross_providers(store, resolution) -> None:
    await store.save_provider(_upsert(name="a", model_id="b:c", api_key="k-a"))
    await store.save_provider(_upsert(name="b", model_id="c", api_key="k-b"))

    first = await resolution.resolve("a", "b:c")
    second = await resolution.resolve("b", "c")

    assert first.provider.name == "a"
    assert first.provider.api_key == "k-a"
    assert second.provider.name == "b"
    assert store.find_calls == 2


async def test_cache_key_layout(mock_cache_provider, store) -> None:
    resolution = ModelResolutionCache(store=store, cache=mock_cache_provider)

    await resolution.resolve("openai", "gpt-x")
    await resolution.invalidate("openai")

    mock_cache_provider.get.assert_awaited_once_with("openai:gpt-x")
    mock_cache_provider.delete_prefix.assert_awaited_once_with("openai:")


# ─── ModelResolver ────────────────────────────────────────────────


@pytest.fixture
def resolver(store, clock) -> ModelResolver:
    return ModelResolver([
        ModelResolutionCache(store, MemoryCacheProvider(ttl=_TTL, timer=clock), ModelCategory.CHAT),
        ModelResolutionCache(store, MemoryCacheProvider(ttl=_TTL, timer=clock), ModelCategory.AUDIO),
    ])


async def test_resolver_routes_by_category(store, resolver) -> None:
    await store.save_provider(ProviderUpsert(
        name="openai",
        base_url="https://api.openai.com/v1",
        api_key="sk-test",
        models=[
            ModelConfig(id="gpt-x"),
            ModelConfig(id="whisper-1", category=ModelCategory.AUDIO),
        ],
    ))

    chat = await resolver.resolve("openai", "gpt-x")
    audio = await resolver.resolve("openai", "whisper-1", ModelCategory.AUDIO)

    assert isinstance(chat, ResolvedModel)
    assert isinstance(audio, ResolvedModel)
    assert audio.model.category == ModelCategory.AUDIO


async def test_resolver_invalidate_fans_out(store, resolver) -> None:
    await store.save_provider(_upsert())
    await resolver.resolve("openai", "gpt-x")
    await resolver.resolve("openai", "gpt-x", ModelCategory.AUDIO)
    assert store.find_calls == 2

    await resolver.invalidate("openai")
    await resolver.resolve("openai", "gpt-x")
    await resolver.resolve("openai", "gpt-x", ModelCategory.AUDIO)

    assert store.find_calls == 4


def test_resolver_rejects_duplicate_categories(store, memory_cache) -> None:
    with pytest.raises(ValueError, match="Duplicate"):
        ModelResolver([
            ModelResolutionCache(store, memory_cache, ModelCategory.CHAT),
            ModelResolutionCache(store, memory_cache, ModelCategory.CHAT),
        ])


def test_resolver_unknown_category_raises_key_error(resolver) -> None:
    assert resolver.categories == [ModelCategory.CHAT, ModelCategory.AUDIO]
    with pytest.raises(KeyError):
        resolver.for_category(ModelCategory.EMBEDDING)

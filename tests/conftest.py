"""Shared pytest fixtures for the modelResolver test suite."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from src.interfaces.cache_provider import ICacheProvider
from src.interfaces.provider_store import IProviderStore
from src.models.provider import ModelConfig, Provider, ProviderUpsert
from src.providers.cache.memory_cache import MemoryCacheProvider
from src.utils.errors import DuplicateProviderError, ProviderNotFoundError

# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryProviderStore(IProviderStore):
    """Dict-backed IProviderStore that counts lookups and can be made to fail.

    ``find_calls`` counts ``find_provider_by_name`` queries, which is how
    tests observe whether the resolution cache went to the store.  Set
    ``fail_with`` to an exception to make every call raise it.
    """

    def __init__(self) -> None:
        self._rows: dict[int, Provider] = {}
        self._next_id = 1
        self._tick = 0
        self.find_calls = 0
        self.fail_with: Exception | None = None

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def _stamp(self) -> datetime:
        self._tick += 1
        return datetime(2025, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=self._tick)

    def _require(self, provider_id: int) -> Provider:
        provider = self._rows.get(provider_id)
        if provider is None:
            raise ProviderNotFoundError(f"Provider id {provider_id} does not exist")
        return provider

    async def initialize(self) -> None:
        self._check()

    async def find_provider_by_name(self, name: str) -> Provider | None:
        self.find_calls += 1
        self._check()
        for provider in self._rows.values():
            if provider.name == name:
                return provider
        return None

    async def get_provider(self, provider_id: int) -> Provider | None:
        self._check()
        return self._rows.get(provider_id)

    async def list_providers(self) -> list[Provider]:
        self._check()
        return sorted(self._rows.values(), key=lambda p: (p.updated_at, p.id), reverse=True)

    async def save_provider(self, provider: ProviderUpsert) -> Provider:
        self._check()
        for existing in self._rows.values():
            if existing.name == provider.name and existing.id != provider.id:
                raise DuplicateProviderError(provider_name=provider.name)
        if provider.id is None:
            provider_id = self._next_id
            self._next_id += 1
        else:
            self._require(provider.id)
            provider_id = provider.id
        saved = Provider(
            id=provider_id,
            name=provider.name,
            alias=provider.alias,
            base_url=provider.base_url,
            api_key=provider.api_key,
            models=list(provider.models),
            updated_at=self._stamp(),
        )
        self._rows[provider_id] = saved
        return saved

    async def update_api_key(self, provider_id: int, api_key: str | None) -> Provider:
        self._check()
        updated = self._require(provider_id).model_copy(
            update={"api_key": api_key, "updated_at": self._stamp()}
        )
        self._rows[provider_id] = updated
        return updated

    async def update_models(self, provider_id: int, models: list[ModelConfig]) -> Provider:
        self._check()
        updated = self._require(provider_id).model_copy(
            update={"models": list(models), "updated_at": self._stamp()}
        )
        self._rows[provider_id] = updated
        return updated

    async def delete_provider(self, provider_id: int) -> Provider:
        self._check()
        return self._rows.pop(self._require(provider_id).id)

    async def exists_by_name(self, name: str) -> bool:
        self._check()
        return any(p.name == name for p in self._rows.values())

    def get_provider_name(self) -> str:
        return "in_memory_provider_store"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _silent_structlog():
    """Keep log calls exercised but silent, and never cache bound loggers.

    Cached loggers hold on to whatever stdout was active on first use,
    which breaks once a capsys-captured stream is closed.  Root logger
    handlers are restored afterwards, since configure_logging replaces them.
    """
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.KeyValueRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        logger_factory=structlog.ReturnLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryProviderStore:
    return InMemoryProviderStore()


@pytest.fixture
def memory_cache(clock: FakeClock) -> MemoryCacheProvider:
    """24 h TTL cache driven by the fake clock."""
    return MemoryCacheProvider(max_size=100, ttl=86400, timer=clock, name="test")


@pytest.fixture
def mock_cache_provider() -> ICacheProvider:
    """Mock ICacheProvider that always misses.

    Override ``get.return_value`` for hit scenarios.
    """
    mock = MagicMock(spec=ICacheProvider)
    mock.get = AsyncMock(return_value=None)
    mock.set = AsyncMock(return_value=None)
    mock.delete = AsyncMock(return_value=None)
    mock.delete_prefix = AsyncMock(return_value=0)
    mock.clear = AsyncMock(return_value=None)
    mock.exists = AsyncMock(return_value=False)
    return mock

"""SQLite-backed provider store.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Providers (concrete adapter implementing IProviderStore).
#
# Database: ``data/providers.db``, one row per provider.  The model list
# is embedded as a JSON array in the ``models`` column so that a single
# ``find_provider_by_name`` query returns everything the resolution cache
# needs.
#
# Every public method opens its own connection and commits before it
# returns, so callers may invalidate caches as soon as a mutation method
# has returned.  ``aiosqlite`` errors are wrapped in ProviderStoreError;
# unknown ids and duplicate names surface as their own domain errors.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite
import structlog
from pydantic import TypeAdapter, ValidationError

from src.interfaces.provider_store import IProviderStore
from src.models.provider import ModelConfig, Provider, ProviderUpsert
from src.utils.errors import DuplicateProviderError, ProviderNotFoundError, ProviderStoreError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/providers.db")
_STORE_NAME = "sqlite_provider_store"

_MODEL_LIST = TypeAdapter(list[ModelConfig])

# ── Schema DDL ────────────────────────────────────────────────────────

_CREATE_PROVIDERS_TABLE = """\
CREATE TABLE IF NOT EXISTS providers (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT    NOT NULL UNIQUE,
    alias       TEXT    NOT NULL DEFAULT '',
    base_url    TEXT    NOT NULL DEFAULT '',
    api_key     TEXT,
    models      TEXT    NOT NULL DEFAULT '[]',
    updated_at  TEXT    NOT NULL
);
"""

_CREATE_INDICES = [
    "CREATE INDEX IF NOT EXISTS idx_providers_updated ON providers(updated_at);",
]

# ── DML ───────────────────────────────────────────────────────────────

_SELECT_COLUMNS = "id, name, alias, base_url, api_key, models, updated_at"

_SELECT_BY_NAME = f"SELECT {_SELECT_COLUMNS} FROM providers WHERE name = ?;"
_SELECT_BY_ID = f"SELECT {_SELECT_COLUMNS} FROM providers WHERE id = ?;"
_SELECT_ALL = f"SELECT {_SELECT_COLUMNS} FROM providers ORDER BY updated_at DESC, id DESC;"

_INSERT_PROVIDER = """\
INSERT INTO providers (name, alias, base_url, api_key, models, updated_at)
VALUES (?, ?, ?, ?, ?, ?);
"""

_UPDATE_PROVIDER = """\
UPDATE providers
SET name = ?, alias = ?, base_url = ?, api_key = ?, models = ?, updated_at = ?
WHERE id = ?;
"""

_UPDATE_API_KEY = "UPDATE providers SET api_key = ?, updated_at = ? WHERE id = ?;"
_UPDATE_MODELS = "UPDATE providers SET models = ?, updated_at = ? WHERE id = ?;"
_DELETE_PROVIDER = "DELETE FROM providers WHERE id = ?;"
_EXISTS_BY_NAME = "SELECT 1 FROM providers WHERE name = ? LIMIT 1;"


def _now() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


def _dump_models(models: list[ModelConfig]) -> str:
    return _MODEL_LIST.dump_json(models).decode("utf-8")


def _row_to_provider(row: aiosqlite.Row) -> Provider:
    try:
        return Provider(
            id=row["id"],
            name=row["name"],
            alias=row["alias"],
            base_url=row["base_url"],
            api_key=row["api_key"],
            models=_MODEL_LIST.validate_json(row["models"] or "[]"),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
    except (ValidationError, ValueError) as exc:
        msg = f"Malformed provider record {row['name']!r}: {exc}"
        raise ProviderStoreError(msg, provider_name=_STORE_NAME) from exc


class SQLiteProviderStore(IProviderStore):
    """SQLite-backed provider persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                yield db
        except aiosqlite.Error as exc:
            logger.error("provider_store_error", path=str(self._db_path), error=str(exc))
            raise ProviderStoreError(str(exc), provider_name=_STORE_NAME) from exc

    async def initialize(self) -> None:
        """Create the providers table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with self._connect() as db:
            await db.execute("PRAGMA journal_mode=WAL;")
            await db.execute(_CREATE_PROVIDERS_TABLE)
            for idx_sql in _CREATE_INDICES:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("provider_db_initialized", path=str(self._db_path))

    def get_provider_name(self) -> str:
        return _STORE_NAME

    # ── Reads ──────────────────────────────────────────────────────────

    async def find_provider_by_name(self, name: str) -> Provider | None:
        async with self._connect() as db:
            cursor = await db.execute(_SELECT_BY_NAME, (name,))
            row = await cursor.fetchone()
        return _row_to_provider(row) if row is not None else None

    async def get_provider(self, provider_id: int) -> Provider | None:
        async with self._connect() as db:
            cursor = await db.execute(_SELECT_BY_ID, (provider_id,))
            row = await cursor.fetchone()
        return _row_to_provider(row) if row is not None else None

    async def list_providers(self) -> list[Provider]:
        async with self._connect() as db:
            cursor = await db.execute(_SELECT_ALL)
            rows = await cursor.fetchall()
        return [_row_to_provider(r) for r in rows]

    async def exists_by_name(self, name: str) -> bool:
        async with self._connect() as db:
            cursor = await db.execute(_EXISTS_BY_NAME, (name,))
            row = await cursor.fetchone()
        return row is not None

    # ── Writes ─────────────────────────────────────────────────────────

    async def save_provider(self, provider: ProviderUpsert) -> Provider:
        """Insert a new provider or overwrite every field of an existing one."""
        models_json = _dump_models(provider.models)
        async with self._connect() as db:
            try:
                if provider.id is None:
                    cursor = await db.execute(_INSERT_PROVIDER, (
                        provider.name,
                        provider.alias,
                        provider.base_url,
                        provider.api_key,
                        models_json,
                        _now(),
                    ))
                    provider_id = cursor.lastrowid
                else:
                    cursor = await db.execute(_UPDATE_PROVIDER, (
                        provider.name,
                        provider.alias,
                        provider.base_url,
                        provider.api_key,
                        models_json,
                        _now(),
                        provider.id,
                    ))
                    if cursor.rowcount == 0:
                        raise ProviderNotFoundError(
                            f"Provider id {provider.id} does not exist",
                            provider_name=provider.name,
                        )
                    provider_id = provider.id
            except aiosqlite.IntegrityError as exc:
                raise DuplicateProviderError(
                    f"Provider name {provider.name!r} is already in use",
                    provider_name=provider.name,
                ) from exc
            # Parse inside the transaction so a bad row is never committed.
            cursor = await db.execute(_SELECT_BY_ID, (provider_id,))
            saved = _row_to_provider(await cursor.fetchone())
            await db.commit()

        logger.info(
            "provider_row_saved",
            provider=saved.name,
            provider_id=saved.id,
            created=provider.id is None,
            models=len(saved.models),
        )
        return saved

    async def update_api_key(self, provider_id: int, api_key: str | None) -> Provider:
        return await self._update_column(_UPDATE_API_KEY, api_key, provider_id)

    async def update_models(self, provider_id: int, models: list[ModelConfig]) -> Provider:
        return await self._update_column(_UPDATE_MODELS, _dump_models(models), provider_id)

    async def delete_provider(self, provider_id: int) -> Provider:
        async with self._connect() as db:
            cursor = await db.execute(_SELECT_BY_ID, (provider_id,))
            row = await cursor.fetchone()
            if row is None:
                raise ProviderNotFoundError(f"Provider id {provider_id} does not exist")
            previous = _row_to_provider(row)
            await db.execute(_DELETE_PROVIDER, (provider_id,))
            await db.commit()
        return previous

    async def _update_column(self, sql: str, value: str | None, provider_id: int) -> Provider:
        async with self._connect() as db:
            cursor = await db.execute(sql, (value, _now(), provider_id))
            if cursor.rowcount == 0:
                raise ProviderNotFoundError(f"Provider id {provider_id} does not exist")
            cursor = await db.execute(_SELECT_BY_ID, (provider_id,))
            updated = _row_to_provider(await cursor.fetchone())
            await db.commit()
        return updated

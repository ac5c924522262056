"""Application settings loaded from environment variables via pydantic-settings.

Values come from two sources, in priority order:

  1. Environment variables, e.g. ``RESOLUTION_CACHE_TTL_SECONDS=3600``
  2. A ``.env`` file in the working directory (local development)

Field ``provider_db_path`` maps to env var ``PROVIDER_DB_PATH`` and so on.
Defaults below apply when neither source sets a value.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.models.provider import ModelCategory

# 24 hours, the lifetime of a resolved provider/model pair.
_DEFAULT_RESOLUTION_TTL = 24 * 60 * 60
# 5 minutes, the lifetime of the full catalog snapshot.
_DEFAULT_CATALOG_TTL = 5 * 60


class Settings(BaseSettings):
    """modelResolver application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === Provider store ===
    provider_db_path: str = "data/providers.db"

    # === Caches ===
    resolution_cache_ttl_seconds: int = _DEFAULT_RESOLUTION_TTL
    resolution_cache_max_size: int = 1024
    # Comma-separated list; one resolution cache is built per category.
    resolution_categories: str = "chat,audio"
    catalog_cache_ttl_seconds: int = _DEFAULT_CATALOG_TTL

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    @field_validator(
        "resolution_cache_ttl_seconds",
        "resolution_cache_max_size",
        "catalog_cache_ttl_seconds",
    )
    @classmethod
    def _must_be_positive(cls, value: int) -> int:
        if value <= 0:
            msg = f"must be a positive integer, got {value}"
            raise ValueError(msg)
        return value

    def get_resolution_categories(self) -> list[ModelCategory]:
        """Parse ``resolution_categories`` into enum members, preserving order.

        Unknown names raise ``ValueError`` so a typo fails at startup
        rather than silently skipping a resolver.
        """
        categories: list[ModelCategory] = []
        for raw in self.resolution_categories.split(","):
            name = raw.strip().lower()
            if not name:
                continue
            category = ModelCategory(name)
            if category not in categories:
                categories.append(category)
        return categories

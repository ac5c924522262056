"""YAML configuration loader with environment variable overrides.

Configuration is layered (later layers win):

  1. Field defaults on :class:`Settings`
  2. ``config/config.yaml``: checked-in deployment defaults
  3. ``.env`` file and environment variables

The YAML file groups fields into sections purely for readability::

    store:
      provider_db_path: data/providers.db
    cache:
      resolution_cache_ttl_seconds: 86400
      resolution_categories: [chat, audio]
    app:
      log_level: INFO

Section names are ignored; every leaf key must be a ``Settings`` field.
"""

from pathlib import Path
from typing import Any

import structlog
import yaml

from src.config.settings import Settings
from src.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)


def load_config(path: str | Path = "config/config.yaml") -> Settings:
    """Load YAML config and merge environment-based Settings on top.

    Args:
        path: Path to the YAML configuration file.  A missing file is fine.

    Returns:
        Fully resolved, validated settings.

    Raises:
        ConfigurationError: If the YAML is malformed, names an unknown
            field, or a merged value fails validation.
    """
    config_path = Path(path)
    yaml_values: dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path) as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc
        yaml_values = _flatten(raw, source=str(config_path))

    try:
        # Values set via env/.env end up in model_fields_set; defaults do not.
        env_settings = Settings()
        env_values = {name: getattr(env_settings, name) for name in env_settings.model_fields_set}
        settings = Settings(**{**yaml_values, **env_values})
    except ValueError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    logger.debug(
        "config_loaded",
        path=str(config_path),
        yaml_keys=sorted(yaml_values),
        env_keys=sorted(env_values),
    )
    return settings


def _flatten(raw: dict[str, Any], source: str) -> dict[str, Any]:
    """Collapse one level of sections into a flat ``{field: value}`` mapping."""
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Top level of {source} must be a mapping")

    known = set(Settings.model_fields)
    flat: dict[str, Any] = {}
    for key, value in raw.items():
        items = value.items() if isinstance(value, dict) else [(key, value)]
        for name, leaf in items:
            if name not in known:
                raise ConfigurationError(f"Unknown setting {name!r} in {source}")
            if isinstance(leaf, list):
                leaf = ",".join(str(item) for item in leaf)
            flat[name] = leaf
    return flat

"""Utility modules for modelResolver.

- **errors** -- Domain exception hierarchy rooted at ModelResolverError;
  store failures, unknown ids and duplicate names each raise their own
  subclass so the API layer can map them to status codes.
- **logging** -- structlog setup shared by the API server (console or JSON
  on stdout) and the admin CLI (plain warnings on stderr).
"""

# -- Domain exception hierarchy --------------------------------------------
from src.utils.errors import (
    ConfigurationError,
    DuplicateProviderError,
    ModelResolverError,
    NoModelsAvailableError,
    ProviderNotFoundError,
    ProviderStoreError,
)

# -- Structured logging setup ----------------------------------------------
from src.utils.logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "DuplicateProviderError",
    "ModelResolverError",
    "NoModelsAvailableError",
    "ProviderNotFoundError",
    "ProviderStoreError",
    "configure_logging",
    "get_logger",
]

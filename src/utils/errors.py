"""Custom exception hierarchy for modelResolver.

All application exceptions inherit from :class:`ModelResolverError`, which
carries an optional ``provider_name`` so error handlers can identify which
configured provider (e.g. "openai", "ollama") or backing service
(e.g. "sqlite_provider_store") the failure relates to.

    ModelResolverError  (base -- catch-all for any modelResolver error)
    +-- ProviderStoreError       (store query or write failed)
    +-- ProviderNotFoundError    (mutation targets an unknown provider id)
    +-- DuplicateProviderError   (provider name already taken)
    +-- NoModelsAvailableError   (catalog has no usable model)
    +-- ConfigurationError       (startup / invalid settings)

A model that cannot be resolved is *not* an error: the resolution cache
returns a ``NotFound`` value for it.  Only infrastructure failures and
invalid admin requests travel through this hierarchy.
"""


class ModelResolverError(Exception):
    """Base exception for all modelResolver errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name``.  The ``__str__`` method prefixes the provider name
    in brackets for structured log output, e.g. ``[openai] Provider not found``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Store errors
# ---------------------------------------------------------------------------

class ProviderStoreError(ModelResolverError):
    """Raised when the provider store cannot be queried or written.

    Never cached by the resolution cache: a recovering store must be
    observable on the very next read.
    """

    def __init__(
        self,
        message: str = "Provider store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderNotFoundError(ModelResolverError):
    """Raised when an admin mutation targets a provider id that does not exist."""

    def __init__(
        self,
        message: str = "Provider not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DuplicateProviderError(ModelResolverError):
    """Raised when saving a provider whose name belongs to another provider."""

    def __init__(
        self,
        message: str = "A provider with this name already exists",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Catalog / configuration errors
# ---------------------------------------------------------------------------

class NoModelsAvailableError(ModelResolverError):
    """Raised when no enabled model of a usable provider exists."""

    def __init__(
        self,
        message: str = "No models available",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(ModelResolverError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)

"""Exception types shared across Indigo.

``ConfigurationError`` is raised before any network call is attempted,
``ProviderError`` wraps remote model failures, ``NotFoundError`` signals a
garden with no stored record.
"""

from __future__ import annotations


class IndigoError(Exception):
    """Base exception for all Indigo errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(IndigoError):
    """Unknown provider or missing credential."""


class ProviderError(IndigoError):
    """A remote model call failed or returned an unusable payload."""

    def __init__(self, message: str, provider: str = "", details: dict | None = None) -> None:
        super().__init__(message, details)
        self.provider = provider


class NotFoundError(IndigoError):
    """The requested garden has no stored record."""


class ConflictError(IndigoError):
    """A garden with the requested name already exists."""


class StorageError(IndigoError):
    """Persisting a garden record failed."""

"""Exception hierarchy for TV Custom Sound."""

from __future__ import annotations


class SoundRouterError(Exception):
    """Base class for errors raised by this package."""


class UnknownCategoryError(SoundRouterError, ValueError):
    """Raised when an operation names a category that is not declared."""

    def __init__(self, category: str) -> None:
        super().__init__(f"Unknown category '{category}'")
        self.category = category


class StorageError(SoundRouterError):
    """Raised when the key-value store cannot persist (or validate) a value."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"Could not store '{key}': {message}")
        self.key = key


class AssetReadError(SoundRouterError):
    """Raised when an asset file cannot be turned into a playable payload."""

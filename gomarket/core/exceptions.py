"""Custom exceptions for the GoMarketplace cart."""
from __future__ import annotations


class GoMarketException(Exception):
    """Base exception for all cart errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class CartProviderMissingException(GoMarketException):
    """Cart contract used without an active cart manager."""

    def __init__(self, message: str = "use_cart must be used within a cart_provider") -> None:
        super().__init__(message)


class CartSnapshotException(GoMarketException):
    """Persisted cart snapshot could not be decoded."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Malformed cart snapshot under {key!r}: {reason}")
        self.key = key
        self.reason = reason


class StorageException(GoMarketException):
    """Persistent store I/O errors."""

    pass


class ConfigurationException(GoMarketException):
    """Configuration errors."""

    pass

"""
Key/Value Storage Adapter Interface.

Protocol-based interface for the two client-side storage scopes.
Implementations: in-memory (session scope, tests), SQLite (long-lived scope).

Key requirements:
- Values are strings; structured values are JSON encoded by the caller
- Each key is written independently and atomically
- No cross-key transactions, no cross-process locking
- Failures surface as StorageUnavailableError, never as adapter-specific errors
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol


class StorageScope(str, Enum):
    """Lifetime of a storage scope."""

    LONG_LIVED = "long_lived"  # Survives browser restarts
    SESSION = "session"  # Cleared when the tab closes


class StorageError(Exception):
    """Base exception for storage operations."""

    pass


class StorageUnavailableError(StorageError):
    """Storage backend cannot be read or written."""

    def __init__(self, operation: str, key: str, reason: str = "") -> None:
        self.operation = operation
        self.key = key
        self.reason = reason
        message = f"Storage unavailable during {operation} of '{key}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class StorageQuotaExceededError(StorageUnavailableError):
    """Write rejected because the scope is full."""

    def __init__(self, key: str, quota_bytes: int) -> None:
        self.quota_bytes = quota_bytes
        super().__init__("set", key, f"quota of {quota_bytes} bytes exceeded")


class KeyValueStorePort(Protocol):
    """
    Key/value storage port interface.

    Mirrors the browser storage surface: get/set/remove by string key.
    """

    @property
    def scope(self) -> StorageScope:
        """Lifetime of values written to this store."""
        ...

    def get(self, key: str) -> str | None:
        """
        Read a value.

        Returns:
            Stored string or None if the key is absent

        Raises:
            StorageUnavailableError: If the backend cannot be read
        """
        ...

    def set(self, key: str, value: str) -> None:
        """
        Write a value, replacing any previous one.

        Raises:
            StorageUnavailableError: If the backend cannot be written
            StorageQuotaExceededError: If the write would exceed the quota
        """
        ...

    def remove(self, key: str) -> None:
        """
        Remove a key. Removing an absent key is not an error.

        Raises:
            StorageUnavailableError: If the backend cannot be written
        """
        ...

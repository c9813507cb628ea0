"""
In-Memory Key/Value Store.

Implements KeyValueStorePort with a plain dict. Used for the session scope
(values vanish with the process, like sessionStorage with the tab) and for
tests.

Key behaviors:
- Optional byte quota to exercise quota-exceeded paths
- `available` toggle to simulate a storage backend that has gone away
"""

from __future__ import annotations

from attribution_engine.core.ports.storage import (
    StorageQuotaExceededError,
    StorageScope,
    StorageUnavailableError,
)


class InMemoryKeyValueStore:
    """In-memory key/value store for the session scope and tests."""

    def __init__(
        self,
        scope: StorageScope = StorageScope.SESSION,
        *,
        quota_bytes: int | None = None,
    ) -> None:
        self._scope = scope
        self._entries: dict[str, str] = {}
        self.quota_bytes = quota_bytes
        self.available = True

    @property
    def scope(self) -> StorageScope:
        return self._scope

    def _check_available(self, operation: str, key: str) -> None:
        if not self.available:
            raise StorageUnavailableError(operation, key, "store disabled")

    def _used_bytes(self, excluding: str | None = None) -> int:
        return sum(
            len(k.encode()) + len(v.encode())
            for k, v in self._entries.items()
            if k != excluding
        )

    def get(self, key: str) -> str | None:
        self._check_available("get", key)
        return self._entries.get(key)

    def set(self, key: str, value: str) -> None:
        self._check_available("set", key)
        if self.quota_bytes is not None:
            needed = self._used_bytes(excluding=key) + len(key.encode()) + len(value.encode())
            if needed > self.quota_bytes:
                raise StorageQuotaExceededError(key, self.quota_bytes)
        self._entries[key] = value

    def remove(self, key: str) -> None:
        self._check_available("remove", key)
        self._entries.pop(key, None)

    def keys(self) -> list[str]:
        """Stored keys (for inspection)."""
        return sorted(self._entries)

    def clear(self) -> None:
        """Clear all entries (for testing)."""
        self._entries.clear()

"""Key-value cache interface and in-memory implementation."""

from typing import Protocol

from ..config import CACHE_KEY_PREFIX


def cache_key(signature: str) -> str:
    """Cache key under which the document for `signature` is stored."""
    return f"{CACHE_KEY_PREFIX}{signature}"


class IKeyValueCache(Protocol):
    """Host-owned key-value store. The agent only writes the `apq:` namespace."""

    async def get(self, key: str) -> str | None:
        """Get a value, or None if the key is absent."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store a value."""
        ...

    async def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""
        ...


class InMemoryCache:
    """Dict-backed cache for single-process hosts and tests."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        """Get a value, or None if the key is absent."""
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        """Store a value."""
        self._data[key] = value

    async def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""
        self._data.pop(key, None)

    def keys(self) -> frozenset[str]:
        """Snapshot of stored keys."""
        return frozenset(self._data)

    def snapshot(self) -> dict[str, str]:
        """Copy of all stored entries."""
        return dict(self._data)

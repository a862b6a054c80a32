"""TTL cache used for USDA lookups."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Cache(Protocol):
    """Key-value cache with per-entry expiry."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a value for `ttl_seconds`."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class InMemoryCache(Cache):
    """Process-local cache; entries are dropped lazily on read."""

    clock: Callable[[], datetime] = _utcnow
    max_entries: int = 1024
    _entries: dict[str, tuple[object, datetime]] = field(default_factory=dict)

    def get(self, key: str) -> object | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self.clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        if key not in self._entries and len(self._entries) >= self.max_entries:
            # dicts keep insertion order, so this evicts the oldest key
            del self._entries[next(iter(self._entries))]
        self._entries[key] = (value, self.clock() + timedelta(seconds=ttl_seconds))

    def __len__(self) -> int:
        return len(self._entries)

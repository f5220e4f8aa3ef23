"""TTL cache used for food lookups."""

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol


class Cache(Protocol):
    """Key-value cache with per-entry expiry."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a value for ``ttl_seconds``."""


@dataclass
class InMemoryCache(Cache):
    """Bounded in-process cache; oldest entries are evicted first."""

    max_entries: int = 512
    clock: Callable[[], float] = time.monotonic
    _entries: OrderedDict[str, tuple[float, object]] = field(
        default_factory=OrderedDict
    )

    def get(self, key: str) -> object | None:
        """Return a value unless it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self.clock() >= expires_at:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return value

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a value, evicting the least recently used entry when full."""
        self._entries[key] = (self.clock() + ttl_seconds, value)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

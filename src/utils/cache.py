"""In-memory expiring cache for Google Books search results."""

from __future__ import annotations

import time
from collections import OrderedDict
from threading import RLock
from typing import Any, Callable, Hashable, Tuple

MISSING = object()


class TTLCache:
    """Thread-safe LRU cache whose entries expire ``ttl`` seconds after being stored.

    ``clock`` defaults to ``time.monotonic`` and can be swapped in tests.
    """

    def __init__(
        self,
        maxsize: int = 128,
        ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.maxsize = maxsize
        self.ttl = ttl
        self.hits = 0
        self.misses = 0
        self._clock = clock
        self._entries: "OrderedDict[Hashable, Tuple[float, Any]]" = OrderedDict()
        self._lock = RLock()

    def get(self, key: Hashable, default: Any = MISSING) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry[0] > self._clock():
                self._entries.move_to_end(key)
                self.hits += 1
                return entry[1]
            if entry is not None:
                del self._entries[key]
            self.misses += 1
            return default

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + self.ttl, value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.maxsize:
                self._entries.popitem(last=False)

    def get_or_load(self, key: Hashable, loader: Callable[[], Any]) -> Any:
        """Return the cached value or store and return ``loader()``.

        The loader runs outside the lock; exceptions propagate and nothing is cached.
        """
        value = self.get(key)
        if value is MISSING:
            value = loader()
            self.set(key, value)
        return value

    def purge_expired(self) -> int:
        with self._lock:
            now = self._clock()
            stale = [key for key, (expiry, _) in self._entries.items() if expiry <= now]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["TTLCache", "MISSING"]

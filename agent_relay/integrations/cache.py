"""
TTL cache for REST collaborator responses.

Each client owns its cache instance; entries live as long as the client (or
until their TTL runs out). Nothing here is module-level state.
"""

from __future__ import annotations

import time
from threading import Lock
from typing import Any, Callable, Hashable, Optional, Tuple


class TtlCache:
    """Thread-safe in-memory cache with a single TTL."""

    def __init__(self, ttl: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl
        self._clock = clock
        self._store: dict[Hashable, tuple[Any, float]] = {}
        self._lock = Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: Hashable) -> Optional[Tuple[Any, float]]:
        """Return ``(value, age_seconds)`` for a live entry, else None."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None
            value, stored_at = entry
            age = self._clock() - stored_at
            if age < self._ttl:
                self._hits += 1
                return value, age
            del self._store[key]
            self._misses += 1
            return None

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._store[key] = (value, self._clock())

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [k for k, (_, ts) in self._store.items() if now - ts >= self._ttl]
            for key in expired:
                del self._store[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._store)

    @property
    def stats(self) -> dict[str, Any]:
        total = self._hits + self._misses
        return {
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total, 4) if total else 0.0,
            "size": len(self._store),
        }

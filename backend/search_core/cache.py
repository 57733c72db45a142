"""
In-process TTL caches for upstream lookups (taxonomy catalog, geocoding).

Entries expire purely by age; there is no size-based eviction. Every cache
registers itself so `clear_all_caches` and `get_all_cache_stats` can reach it
without the caller holding a reference.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from threading import Lock
from typing import Any
from weakref import WeakSet

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

_registry: WeakSet[TTLCache] = WeakSet()
_registry_lock = Lock()


class CacheEntry:
    __slots__ = ("value", "stored_at", "expires_at", "hits")

    def __init__(self, value: Any, stored_at: float, expires_at: float) -> None:
        self.value = value
        self.stored_at = stored_at
        self.expires_at = expires_at
        self.hits = 0

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def increment_hits(self) -> None:
        self.hits += 1


class TTLCache:
    def __init__(
        self,
        name: str,
        default_ttl: float,
        clock: Clock | None = None,
        enabled: bool = True,
    ) -> None:
        self.name = name
        self.default_ttl = float(default_ttl)
        self.enabled = enabled
        self._clock: Clock = clock or time.monotonic
        self._entries: dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        with _registry_lock:
            _registry.add(self)

    def now(self) -> float:
        return self._clock()

    def get(self, key: str) -> Any | None:
        if not self.enabled:
            return None
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None
        if entry.is_expired(self._clock()):
            self._entries.pop(key, None)
            self._misses += 1
            logger.debug("cache %s expired key=%s", self.name, key)
            return None
        entry.increment_hits()
        self._hits += 1
        return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        if not self.enabled:
            return
        now = self._clock()
        lifetime = self.default_ttl if ttl is None else float(ttl)
        # Concurrent writers for the same key are tolerated: last write wins.
        self._entries[key] = CacheEntry(value, now, now + lifetime)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        # an empty cache is still a cache
        return True

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and not entry.is_expired(self._clock())

    def stats(self) -> dict[str, Any]:
        total = self._hits + self._misses
        return {
            "entries": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total else 0.0,
            "ttl_seconds": self.default_ttl,
        }


def clear_all_caches() -> None:
    """Purge all in-process caches."""
    with _registry_lock:
        caches = list(_registry)
    for cache in caches:
        cache.clear()
    logger.info("Cleared %d caches", len(caches))


def get_all_cache_stats() -> dict[str, dict]:
    """Return cache diagnostics keyed by cache name."""
    with _registry_lock:
        caches = list(_registry)
    return {cache.name: cache.stats() for cache in caches}


__all__ = ["CacheEntry", "TTLCache", "clear_all_caches", "get_all_cache_stats"]

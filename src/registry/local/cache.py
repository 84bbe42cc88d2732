"""Bounded TTL caches for parsed descriptor data."""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from registry.local.models import Coordinate

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """A single cache entry with TTL."""

    value: T
    expires_at: float
    created_at: float = field(default_factory=time.time)

    def is_expired(self, now: float) -> bool:
        """Check if this entry has expired."""
        return now > self.expires_at


class TTLCache(Generic[T]):
    """Size bounded LRU cache with per-entry expiry.

    Expiry is measured from the last write, or from the last access when
    ``expire_after_access`` is set. Every public method holds the cache
    lock, so a reader never sees a half-written entry.
    """

    def __init__(
        self,
        max_entries: int,
        ttl: float,
        expire_after_access: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the cache.

        Args:
            max_entries: Maximum live entries before the least recently used is evicted.
            ttl: Time-to-live in seconds.
            expire_after_access: Refresh the expiry on every hit.
            clock: Time source, injectable for tests.
        """
        self._max_entries = max(1, int(max_entries))
        self._ttl = float(ttl)
        self._expire_after_access = expire_after_access
        self._clock = clock
        self._cache: "OrderedDict[str, CacheEntry[T]]" = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: str) -> Optional[T]:
        """Return the cached value or None when missing or expired."""
        with self._lock:
            entry = self._cache.get(key)
            now = self._clock()
            if entry is None:
                self._misses += 1
                return None
            if entry.is_expired(now):
                del self._cache[key]
                self._evictions += 1
                self._misses += 1
                return None
            self._cache.move_to_end(key)
            if self._expire_after_access:
                entry.expires_at = now + self._ttl
            self._hits += 1
            return entry.value

    def put(self, key: str, value: T) -> None:
        """Store ``value`` under ``key``, evicting the least recently used entry if full."""
        with self._lock:
            now = self._clock()
            self._cache[key] = CacheEntry(value=value, expires_at=now + self._ttl, created_at=now)
            self._cache.move_to_end(key)
            while len(self._cache) > self._max_entries:
                self._cache.popitem(last=False)
                self._evictions += 1

    def invalidate(self, key: str) -> None:
        """Drop a single entry."""
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        """Clear all cached entries."""
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            lookups = self._hits + self._misses
            return {
                "entries": len(self._cache),
                "max_entries": self._max_entries,
                "ttl": self._ttl,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "hit_rate": (self._hits / lookups) if lookups else 0.0,
            }


class PomDataCache:
    """The four descriptor caches shared by every parser instance.

    Parsed coordinates expire after access; dependency-management lists,
    dependency lists and property tables expire after write.
    """

    def __init__(  # pylint: disable=too-many-arguments, too-many-positional-arguments
        self,
        ttl: Optional[float] = None,
        pom_entries: Optional[int] = None,
        dep_mgmt_entries: Optional[int] = None,
        dependency_entries: Optional[int] = None,
        property_entries: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        ttl = Constants.CACHE_TTL_SEC if ttl is None else ttl
        self._poms: TTLCache[Coordinate] = TTLCache(
            pom_entries or Constants.CACHE_POM_MAX_ENTRIES, ttl, expire_after_access=True, clock=clock
        )
        self._dep_mgmt: TTLCache[List[Coordinate]] = TTLCache(
            dep_mgmt_entries or Constants.CACHE_DEP_MGMT_MAX_ENTRIES, ttl, clock=clock
        )
        self._dependencies: TTLCache[List[Coordinate]] = TTLCache(
            dependency_entries or Constants.CACHE_DEPENDENCIES_MAX_ENTRIES, ttl, clock=clock
        )
        self._properties: TTLCache[Dict[str, str]] = TTLCache(
            property_entries or Constants.CACHE_PROPERTIES_MAX_ENTRIES, ttl, clock=clock
        )

    def get_pom(self, path: str) -> Optional[Coordinate]:
        """Cached coordinate for ``path``."""
        return self._poms.get(path)

    def put_pom(self, path: str, coordinate: Optional[Coordinate]) -> None:
        """Cache a parsed coordinate."""
        if coordinate is not None:
            self._poms.put(path, coordinate)

    def get_dependency_management(self, path: str) -> Optional[List[Coordinate]]:
        """Cached managed-dependency catalog for ``path``."""
        return self._dep_mgmt.get(path)

    def put_dependency_management(self, path: str, managed: List[Coordinate]) -> None:
        """Cache a managed-dependency catalog."""
        # Empty catalogs are intentionally not cached; they are re-parsed on every lookup.
        if managed:
            self._dep_mgmt.put(path, list(managed))

    def get_dependencies(self, path: str) -> Optional[List[Coordinate]]:
        """Cached dependency list for ``path``."""
        return self._dependencies.get(path)

    def put_dependencies(self, path: str, dependencies: List[Coordinate]) -> None:
        """Cache a dependency list."""
        # Empty lists are intentionally not cached; they are re-parsed on every lookup.
        if dependencies:
            self._dependencies.put(path, list(dependencies))

    def get_properties(self, path: str) -> Optional[Dict[str, str]]:
        """Cached property table for ``path``."""
        return self._properties.get(path)

    def put_properties(self, path: str, properties: Dict[str, str]) -> None:
        """Cache a property table."""
        # Empty tables are intentionally not cached; they are re-parsed on every lookup.
        if properties:
            self._properties.put(path, dict(properties))

    def clear(self) -> None:
        """Empty every cache."""
        for cache in (self._poms, self._dep_mgmt, self._dependencies, self._properties):
            cache.clear()

    def stats(self) -> Dict[str, Dict[str, Any]]:
        """Per-cache statistics keyed by cache name."""
        return {
            "pom": self._poms.stats(),
            "dependency_management": self._dep_mgmt.stats(),
            "dependencies": self._dependencies.stats(),
            "properties": self._properties.stats(),
        }

    def log_stats(self) -> None:
        """Emit cache statistics at DEBUG."""
        if not is_debug_enabled(logger):
            return
        for name, data in self.stats().items():
            logger.debug(
                "Descriptor cache %s: hits=%d misses=%d entries=%d",
                name, data["hits"], data["misses"], data["entries"],
                extra=extra_context(
                    event="cache_stats", component="cache", action="log_stats",
                    target=name, count=data["entries"],
                ),
            )

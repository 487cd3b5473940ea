"""Process-wide cache provider.

Entries are computed on miss and live until a mutation flushes them by
key prefix or the LRU bound evicts them. There is no TTL: the catalog
relies on every write removing the whole namespace it could have
affected.
"""

import threading
from collections.abc import Callable
from typing import Any, Protocol, TypeVar

import structlog
from cachetools import LRUCache

from sitecatalog.infrastructure.config import settings

logger = structlog.get_logger()

T = TypeVar("T")


class CacheManager(Protocol):
    """Cache provider consumed by the category service."""

    def get(self, key: str, acquire: Callable[[], T]) -> T:
        """Return the cached value for ``key`` or compute and store it."""
        ...

    def remove_by_prefix(self, prefix: str) -> int:
        """Evict every entry whose key starts with ``prefix``."""
        ...


class InMemoryCacheManager:
    """LRU cache shared by all requests of the process.

    Computing a missing value runs outside the lock. Every flush bumps a
    generation counter, and a value computed while a flush happened is
    returned to its caller but not stored, so the next read recomputes it.

    Example usage:
        cache = InMemoryCacheManager(maxsize=500)
        category = cache.get("catalog.category.id-5", lambda: repo.get_by_id(5))
        cache.remove_by_prefix("catalog.category.")
    """

    def __init__(self, maxsize: int | None = None) -> None:
        """Initialize an empty cache.

        Args:
            maxsize: Entry bound, defaults to ``settings.cache_max_entries``.
        """
        self._entries: LRUCache[str, Any] = LRUCache(
            maxsize=maxsize or settings.cache_max_entries
        )
        self._lock = threading.Lock()
        self._generation = 0
        self.hits = 0
        self.misses = 0

    @property
    def maxsize(self) -> int:
        """Maximum number of cached entries."""
        return int(self._entries.maxsize)

    def get(self, key: str, acquire: Callable[[], T]) -> T:
        """Get a cached value, computing it on miss.

        Args:
            key: Cache key.
            acquire: Function producing the value when absent.

        Returns:
            Cached or freshly computed value.
        """
        with self._lock:
            if key in self._entries:
                self.hits += 1
                return self._entries[key]
            self.misses += 1
            generation = self._generation

        value = acquire()
        with self._lock:
            if generation == self._generation:
                self._entries[key] = value
            else:
                logger.debug("Cache store skipped after concurrent flush", key=key)
        return value

    def contains(self, key: str) -> bool:
        """Check whether a key is currently cached."""
        with self._lock:
            return key in self._entries

    def remove_by_prefix(self, prefix: str) -> int:
        """Remove all entries under a key prefix.

        Args:
            prefix: Key prefix to flush.

        Returns:
            Number of removed entries.
        """
        with self._lock:
            self._generation += 1
            doomed = [key for key in self._entries if key.startswith(prefix)]
            for key in doomed:
                del self._entries[key]

        logger.debug("Cache entries removed", prefix=prefix, removed=len(doomed))
        return len(doomed)

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._generation += 1
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# Global cache instance
_cache_manager: InMemoryCacheManager | None = None


def get_cache_manager() -> InMemoryCacheManager:
    """Get the process-wide cache manager.

    Returns:
        InMemoryCacheManager singleton.
    """
    global _cache_manager
    if _cache_manager is None:
        _cache_manager = InMemoryCacheManager()
    return _cache_manager

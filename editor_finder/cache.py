"""
Disk cache for discovery output using diskcache.

Keys are namespaced (``pages:<hash>``, ``search:<hash>``) so each kind of
cached data can be counted and cleared on its own.
"""

import hashlib
import logging
from pathlib import Path
from typing import Any, Optional

import diskcache

from editor_finder.config import get_cache_dir

logger = logging.getLogger(__name__)

# Namespaces
PAGES_NAMESPACE = "pages"  # locator -> readable page text
SEARCH_NAMESPACE = "search"  # provider query -> serialized hits

DEFAULT_CACHE_SIZE_LIMIT = 1024 * 1024 * 1024  # 1 GB of page text is plenty

_cache: Optional["AppCache"] = None


def hashed_key(value: str) -> str:
    """Stable short key for long strings such as URLs and query text."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:32]


class AppCache:
    """Namespaced key/value cache on top of ``diskcache.Cache``."""

    def __init__(
        self,
        cache_dir: Path,
        timeout: float = 30.0,
        size_limit: int = DEFAULT_CACHE_SIZE_LIMIT,
    ):
        """
        Args:
            cache_dir: Directory for cache files
            timeout: Seconds to wait for the SQLite lock under concurrent workers
            size_limit: Max bytes on disk before least-recently-stored eviction
        """
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self._cache = diskcache.Cache(str(self.cache_dir), timeout=timeout, size_limit=size_limit)

    @staticmethod
    def _full_key(namespace: str, key: str) -> str:
        return f"{namespace}:{key}"

    def get(self, namespace: str, key: str) -> Any | None:
        return self._cache.get(self._full_key(namespace, key))

    def set(self, namespace: str, key: str, value: Any, ttl_days: int | None = None) -> None:
        """Store a value; ``ttl_days=None`` keeps it until evicted."""
        expire = ttl_days * 86400 if ttl_days else None
        self._cache.set(self._full_key(namespace, key), value, expire=expire)

    def delete(self, namespace: str, key: str) -> bool:
        return bool(self._cache.delete(self._full_key(namespace, key)))

    def _iter_namespace(self, namespace: str | None):
        prefix = f"{namespace}:" if namespace else ""
        for key in self._cache:
            if key.startswith(prefix):
                yield key

    def clear_namespace(self, namespace: str) -> int:
        """Remove every key in ``namespace``. Returns how many were removed."""
        doomed = list(self._iter_namespace(namespace))
        for key in doomed:
            self._cache.delete(key)
        logger.info(f"Cleared {len(doomed)} entries from cache namespace '{namespace}'")
        return len(doomed)

    def count(self, namespace: str | None = None) -> int:
        if namespace is None:
            return len(self._cache)
        return sum(1 for _ in self._iter_namespace(namespace))

    def stats(self) -> dict:
        """Entry counts per namespace and disk usage."""
        by_namespace: dict[str, int] = {}
        for key in self._cache:
            ns = key.split(":", 1)[0] if ":" in key else "unknown"
            by_namespace[ns] = by_namespace.get(ns, 0) + 1
        volume = self._cache.volume()
        return {
            "total": len(self._cache),
            "by_namespace": by_namespace,
            "size_mb": round(volume / (1024 * 1024), 2),
            "cache_dir": str(self.cache_dir),
        }

    def keys(self, namespace: str | None = None, limit: int = 100) -> list[str]:
        """List keys (without the namespace prefix when one is given)."""
        strip = len(namespace) + 1 if namespace else 0
        found = []
        for key in self._iter_namespace(namespace):
            found.append(key[strip:])
            if len(found) >= limit:
                break
        return found

    def close(self) -> None:
        self._cache.close()


def get_cache(cache_dir: Path | None = None) -> AppCache:
    """Get or create the process-wide cache (defaults to the configured directory)."""
    global _cache
    if _cache is None:
        _cache = AppCache(cache_dir or get_cache_dir())
    return _cache

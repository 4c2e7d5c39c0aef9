"""
Disk-based caching utilities with TTL support.

Provides a DiskCache class that stores values on disk using the diskcache
library, and PreferenceCache, a thin layer used to remember non-sensitive
UI preferences (status filter, search text) across page reloads.
"""

from pathlib import Path
from typing import Any, Mapping

import diskcache


class DiskCache:
    """
    Disk-based cache with TTL support.

    Thread-safe and process-safe, backed by ``diskcache.Cache``.

    Attributes:
        cache_dir: Path to the cache directory.
    """

    def __init__(self, cache_dir: str | Path) -> None:
        """
        Initialize the disk cache.

        Args:
            cache_dir: Directory path for storing cache files.
                       Created if it doesn't exist.
        """
        self.cache_dir = Path(cache_dir)
        self._cache = diskcache.Cache(str(self.cache_dir))

    def get(self, key: str) -> Any:
        """Return the cached value for key, or None when missing or expired."""
        return self._cache.get(key, default=None)

    def set(self, key: str, value: Any, expire: int | None = None) -> None:
        """Store a value, optionally expiring after ``expire`` seconds."""
        self._cache.set(key, value, expire=expire)


class PreferenceCache:
    """
    Remembers UI preferences under a single namespaced key.

    Only whitelisted keys are written so nothing sensitive (invoice data,
    user identity) ever lands on disk. Each browser session uses its own
    namespace.
    """

    ALLOWED_KEYS = frozenset({"filter_status", "search_query"})

    def __init__(self, cache: DiskCache, namespace: str = "ui-preferences") -> None:
        self._cache = cache
        self._key = namespace

    def load(self) -> dict[str, Any]:
        """Return the stored preferences, or an empty dict."""
        value = self._cache.get(self._key)
        if not isinstance(value, dict):
            return {}
        return {k: v for k, v in value.items() if k in self.ALLOWED_KEYS}

    def save(self, preferences: Mapping[str, Any]) -> None:
        """Merge the allowed subset of ``preferences`` into the stored value."""
        current = self.load()
        current.update(
            {k: v for k, v in preferences.items() if k in self.ALLOWED_KEYS}
        )
        self._cache.set(self._key, current)

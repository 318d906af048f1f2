"""Thread-safe TTL cache for provider search responses."""

import hashlib
import threading
from datetime import datetime, timedelta
from typing import Any

DEFAULT_MAX_ENTRIES = 1000


class SearchCache:
    """
    In-memory cache with TTL (Time To Live).

    Keys are the sha256 of the joined key parts (first 16 hex chars), so a
    (provider, query, site) triple maps to one entry. Expired entries are
    swept on every write, and the oldest entry is evicted once max_entries
    is reached.
    """

    def __init__(self, ttl_seconds: int, max_entries: int = DEFAULT_MAX_ENTRIES):
        """
        Args:
            ttl_seconds: Time to live in seconds for cached entries; 0 disables caching
            max_entries: Upper bound on live entries
        """
        self._cache: dict[str, tuple[Any, datetime]] = {}
        self._lock = threading.Lock()
        self._ttl = timedelta(seconds=ttl_seconds)
        self.max_entries = max(1, max_entries)
        self.enabled = ttl_seconds > 0

    @staticmethod
    def make_key(*parts: Any) -> str:
        raw = "\x1f".join("" if p is None else str(p).strip().lower() for p in parts)
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]

    def get(self, *parts: Any) -> Any | None:
        """
        Return the cached value for the key parts, or None if missing or expired.
        """
        if not self.enabled:
            return None
        key = self.make_key(*parts)
        with self._lock:
            if key in self._cache:
                value, expiry = self._cache[key]
                if datetime.utcnow() < expiry:
                    return value
                del self._cache[key]
            return None

    def set(self, value: Any, *parts: Any) -> None:
        if not self.enabled:
            return
        key = self.make_key(*parts)
        now = datetime.utcnow()
        with self._lock:
            for stale in [k for k, (_, expiry) in self._cache.items() if expiry <= now]:
                del self._cache[stale]
            # re-inserting moves the key to the end of the eviction order
            self._cache.pop(key, None)
            while len(self._cache) >= self.max_entries:
                del self._cache[next(iter(self._cache))]
            self._cache[key] = (value, now + self._ttl)

    def clear(self):
        with self._lock:
            self._cache.clear()

# backend/wealthtrack/services/cache/base.py
"""
Abstract interface for the price cache.

A key/value store with per-entry TTL. Values are opaque bytes (callers store
serialized JSON). Two realizations exist:

- MemoryCache: in-process, guarded by a read/write lock (default)
- RedisCache:  shared across instances

Both satisfy the same contract so the rest of the engine is agnostic to
which is active:

- get() raises CacheMiss for absent or expired keys. An empty value is a hit.
- set() with ttl <= 0 stores the entry for DEFAULT_CACHE_TTL_SECONDS (24h),
  never "forever".
- Safe for any number of concurrent readers and writers without caller locks.
"""

from abc import ABC, abstractmethod

from wealthtrack.services.constants import DEFAULT_CACHE_TTL_SECONDS


class CacheMiss(KeyError):
    """Raised by PriceCache.get() when the key is absent or expired."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(key)


def normalize_ttl(ttl_seconds: float) -> float:
    """Replace a non-positive TTL with the long default."""
    if ttl_seconds <= 0:
        return DEFAULT_CACHE_TTL_SECONDS
    return ttl_seconds


class PriceCache(ABC):
    """Key/value cache with per-entry TTL."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier used in logs ("memory", "redis")."""
        pass

    @abstractmethod
    def get(self, key: str) -> bytes:
        """
        Return the cached value.

        Raises:
            CacheMiss: Key absent or expired
        """
        pass

    @abstractmethod
    def set(self, key: str, value: bytes, ttl_seconds: float) -> None:
        """Store value under key for ttl_seconds (<= 0 means 24h)."""
        pass

    def get_or_none(self, key: str) -> bytes | None:
        """Return the cached value, or None on a miss."""
        try:
            return self.get(key)
        except CacheMiss:
            return None

    def close(self) -> None:
        """Release backend resources. Default: nothing to release."""
        return None

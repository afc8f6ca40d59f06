# backend/wealthtrack/services/cache/memory.py
"""
In-process price cache.

Used when no shared cache is configured (single instance deployments, tests).
Entries live in a private dict guarded by a read/write lock: lookups take the
shared side so concurrent readers never block each other, writes take the
exclusive side. Expired entries read as misses and are purged on writes.
"""

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator

from wealthtrack.services.cache.base import CacheMiss, PriceCache, normalize_ttl

logger = logging.getLogger(__name__)


class ReadWriteLock:
    """
    Many-readers / single-writer lock.

    Writers are preferred: once a writer is waiting, new readers queue behind
    it so a steady stream of lookups cannot starve a write.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


@dataclass(frozen=True)
class _Entry:
    value: bytes
    expires_at: float


class MemoryCache(PriceCache):
    """
    Thread-safe in-memory cache with per-entry TTL.

    Example:
        cache = MemoryCache()
        cache.set("crypto:BTC:USD", b'{"price": "67000"}', ttl_seconds=60)
        cache.get("crypto:BTC:USD")
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """
        Args:
            clock: Monotonic time source in seconds (injectable for tests)
        """
        self._clock = clock
        self._store: dict[str, _Entry] = {}
        self._lock = ReadWriteLock()

    @property
    def name(self) -> str:
        return "memory"

    def get(self, key: str) -> bytes:
        with self._lock.read():
            entry = self._store.get(key)
        if entry is None or self._clock() >= entry.expires_at:
            raise CacheMiss(key)
        return entry.value

    def set(self, key: str, value: bytes, ttl_seconds: float) -> None:
        expires_at = self._clock() + normalize_ttl(ttl_seconds)
        with self._lock.write():
            self._purge_expired()
            self._store[key] = _Entry(value=value, expires_at=expires_at)

    def delete(self, key: str) -> None:
        with self._lock.write():
            self._store.pop(key, None)

    def clear(self) -> None:
        with self._lock.write():
            self._store.clear()

    def __len__(self) -> int:
        """Number of live (unexpired) entries."""
        now = self._clock()
        with self._lock.read():
            return sum(1 for entry in self._store.values() if entry.expires_at > now)

    def _purge_expired(self) -> None:
        # Caller holds the write lock
        now = self._clock()
        expired = [key for key, entry in self._store.items() if entry.expires_at <= now]
        for key in expired:
            del self._store[key]
        if expired:
            logger.debug(f"Purged {len(expired)} expired cache entries")

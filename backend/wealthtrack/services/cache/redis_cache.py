# backend/wealthtrack/services/cache/redis_cache.py
"""
Shared price cache backed by Redis (or Valkey).

Used when the engine runs as several instances so they share quotes and
respect upstream rate limits together. The redis-py client is thread-safe
(it checks connections out of a pool per command).

A cache outage must not take valuations down with it: connection errors are
logged and surface as misses on read and skipped writes on write, so callers
fall through to the upstream provider.
"""

import logging
import math

import redis

from wealthtrack.services.cache.base import CacheMiss, PriceCache, normalize_ttl

logger = logging.getLogger(__name__)


class RedisCache(PriceCache):
    """
    Redis implementation of PriceCache.

    Example:
        cache = RedisCache.from_url("redis://localhost:6379/0")
        cache.set("stock:AAPL:USD", b"...", ttl_seconds=60)
    """

    def __init__(self, client: redis.Redis, key_prefix: str = "wealthtrack:") -> None:
        """
        Args:
            client: Configured redis-py client (bytes responses)
            key_prefix: Namespace prepended to every key
        """
        self._client = client
        self._prefix = key_prefix

    @classmethod
    def from_url(
            cls,
            url: str,
            key_prefix: str = "wealthtrack:",
            socket_timeout: float = 5.0,
    ) -> "RedisCache":
        """Create a cache with its own connection pool."""
        client = redis.Redis.from_url(
            url,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            health_check_interval=30,
        )
        logger.info("Redis price cache initialized", extra={"key_prefix": key_prefix})
        return cls(client, key_prefix=key_prefix)

    @property
    def name(self) -> str:
        return "redis"

    def get(self, key: str) -> bytes:
        full_key = self._prefix + key
        try:
            value = self._client.get(full_key)
        except redis.RedisError as e:
            logger.warning(f"Cache get failed for {full_key}: {e}")
            raise CacheMiss(key) from e

        if value is None:
            raise CacheMiss(key)
        if isinstance(value, str):
            return value.encode("utf-8")
        return value

    def set(self, key: str, value: bytes, ttl_seconds: float) -> None:
        full_key = self._prefix + key
        # Redis EX takes whole seconds; never round a short TTL down to zero
        ttl = max(1, math.ceil(normalize_ttl(ttl_seconds)))
        try:
            self._client.set(full_key, value, ex=ttl)
        except redis.RedisError as e:
            logger.warning(f"Cache set failed for {full_key}: {e}")

    def close(self) -> None:
        self._client.close()

# backend/wealthtrack/services/cache/__init__.py
"""
Price cache package.

Usage:
    from wealthtrack.services.cache import create_price_cache

    cache = create_price_cache(settings)   # RedisCache if REDIS_URL else MemoryCache

Architecture:
    cache/
    ├── base.py     # PriceCache contract, CacheMiss, TTL normalization
    ├── memory.py   # In-process store with read/write lock
    └── redis_cache.py  # Shared store
"""

import logging

from wealthtrack.config import Settings
from wealthtrack.services.cache.base import CacheMiss, PriceCache, normalize_ttl
from wealthtrack.services.cache.memory import MemoryCache
from wealthtrack.services.cache.redis_cache import RedisCache

logger = logging.getLogger(__name__)


def create_price_cache(config: Settings) -> PriceCache:
    """Pick the cache backend from configuration."""
    if config.uses_shared_cache:
        return RedisCache.from_url(config.redis_url)
    logger.info("Using in-process price cache (REDIS_URL not set)")
    return MemoryCache()


__all__ = [
    "PriceCache",
    "CacheMiss",
    "normalize_ttl",
    "MemoryCache",
    "RedisCache",
    "create_price_cache",
]

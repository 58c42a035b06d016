"""
Coverage Score Cache

Read-through cache of country and global coverage results (5 minute TTL):
- MemoryScoreCache: in process, injectable clock
- RedisScoreCache: shared between processes, degrades to a miss on errors
- CoverageCacheInvalidator: event-driven invalidation

Keys:
    {namespace}:country:{platform_id}:{country_id}
    {namespace}:global:{platform_id}

Usage:
    cache = get_score_cache()
    score = cache.get_or_compute(cache.country_key(1, 42), CacheTTL.COUNTRY_SCORE, compute)

    invalidator = CoverageCacheInvalidator(cache)
    invalidator.handle_event(CacheEvent.CONTENT_PUBLISHED, platform_id=1, country_id=42)
"""

from .config import CacheConfig, CacheTTL, get_cache_config
from .serialization import serialize_value, deserialize_value
from .base import CacheStats, ScoreCache
from .memory_cache import MemoryScoreCache
from .redis_cache import CircuitBreaker, RedisScoreCache
from .invalidation import (
    CacheEvent,
    CoverageCacheInvalidator,
    InvalidationResult,
)
from .factory import create_score_cache, get_score_cache, set_score_cache

__all__ = [
    "CacheConfig",
    "CacheTTL",
    "get_cache_config",
    "serialize_value",
    "deserialize_value",
    "CacheStats",
    "ScoreCache",
    "MemoryScoreCache",
    "CircuitBreaker",
    "RedisScoreCache",
    "CacheEvent",
    "CoverageCacheInvalidator",
    "InvalidationResult",
    "create_score_cache",
    "get_score_cache",
    "set_score_cache",
]

"""
Score cache singleton, built from CacheConfig.
"""

import logging
from typing import Optional

from .base import ScoreCache
from .config import CacheConfig, get_cache_config
from .memory_cache import MemoryScoreCache
from .redis_cache import RedisScoreCache

logger = logging.getLogger(__name__)

_score_cache: Optional[ScoreCache] = None


def create_score_cache(config: Optional[CacheConfig] = None) -> ScoreCache:
    """
    Create a score cache for the configured backend.

    Raises:
        ValueError: Unknown CACHE_BACKEND
    """
    config = config or get_cache_config()
    if config.backend == "redis":
        return RedisScoreCache(config)
    if config.backend == "memory":
        return MemoryScoreCache(config)
    raise ValueError(f"Unknown cache backend: {config.backend}")


def get_score_cache() -> ScoreCache:
    """Get singleton score cache instance."""
    global _score_cache

    if _score_cache is None:
        _score_cache = create_score_cache()
        logger.info(f"Score cache initialized: {_score_cache.backend_name}")
    return _score_cache


def set_score_cache(cache: Optional[ScoreCache]) -> None:
    """Replace the singleton (None resets it)."""
    global _score_cache
    _score_cache = cache

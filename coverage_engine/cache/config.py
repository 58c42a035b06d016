"""
Cache Configuration

Centralized configuration for the score cache.

Country and global coverage results are recomputed at most every
COVERAGE_CACHE_TTL_SECONDS (5 minutes by default) unless content or
taxonomy events invalidate them earlier.
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from functools import lru_cache


def _ttl_from_env() -> timedelta:
    return timedelta(seconds=int(os.getenv("COVERAGE_CACHE_TTL_SECONDS", "300")))


@dataclass(frozen=True)
class CacheTTL:
    """
    Cache TTL configuration by data type.

    Both entries share one TTL: a global result is only as fresh as the
    country results it was built from.
    """

    COUNTRY_SCORE: timedelta = timedelta(minutes=5)
    GLOBAL_COVERAGE: timedelta = timedelta(minutes=5)

    @classmethod
    def from_env(cls) -> "CacheTTL":
        ttl = _ttl_from_env()
        return cls(COUNTRY_SCORE=ttl, GLOBAL_COVERAGE=ttl)


@dataclass
class CacheConfig:
    """
    Main cache configuration.

    Settings can be overridden via environment variables:
    - CACHE_ENABLED: Enable/disable caching globally
    - CACHE_BACKEND: "memory" (in process) or "redis"
    - CACHE_NAMESPACE: Key prefix
    - REDIS_URL: Redis connection URL (redis backend only)
    - COVERAGE_CACHE_TTL_SECONDS: TTL of country and global results
    """

    # Cache namespace (for key prefixes)
    namespace: str = field(default_factory=lambda: os.getenv(
        "CACHE_NAMESPACE",
        "coverage"
    ))

    # Global cache toggle
    enabled: bool = field(default_factory=lambda: os.getenv(
        "CACHE_ENABLED",
        "true"
    ).lower() == "true")

    backend: str = field(default_factory=lambda: os.getenv(
        "CACHE_BACKEND",
        "memory"
    ).lower())

    # Redis settings
    redis_url: str = field(default_factory=lambda: os.getenv(
        "REDIS_URL",
        "redis://localhost:6379/0"
    ))
    redis_socket_timeout: float = 2.0
    redis_connect_timeout: float = 2.0

    # Circuit breaker (redis backend)
    circuit_breaker_enabled: bool = True
    circuit_breaker_threshold: int = 5
    circuit_breaker_timeout: int = 60

    ttl: CacheTTL = field(default_factory=CacheTTL.from_env)


@lru_cache(maxsize=1)
def get_cache_config() -> CacheConfig:
    """Get singleton cache configuration."""
    return CacheConfig()


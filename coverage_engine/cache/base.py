"""
Score Cache Capability

Read-through cache for computed coverage results:
- get_or_compute(key, ttl, fn) returns the cached value or computes,
  stores and returns it
- invalidate(key) / invalidate_many(keys) drop entries
- clear() drops everything in the namespace

Concurrent computations of the same key are not coordinated: both compute
the same value and the last write wins.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Dict, Iterable, Optional

from .config import CacheConfig, get_cache_config
from .serialization import deserialize_value, serialize_value

logger = logging.getLogger(__name__)


@dataclass
class CacheStats:
    """Cache operation statistics."""
    hits: int = 0
    misses: int = 0
    errors: int = 0
    invalidations: int = 0
    bytes_written: int = 0
    bytes_read: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


class ScoreCache(ABC):
    """
    Base class of score cache backends.

    Backends only move bytes; serialization, statistics and the
    read-through logic live here.
    """

    backend_name = "base"

    def __init__(self, config: Optional[CacheConfig] = None):
        self.config = config or get_cache_config()
        self._stats = CacheStats()

    # =========================================================================
    # Backend primitives
    # =========================================================================

    @abstractmethod
    def _read(self, key: str) -> Optional[bytes]:
        """Raw bytes of a live entry, or None."""

    @abstractmethod
    def _write(self, key: str, data: bytes, ttl: timedelta) -> None:
        """Store raw bytes with a TTL."""

    @abstractmethod
    def _delete(self, keys: Iterable[str]) -> int:
        """Delete keys. Returns the number of entries removed."""

    @abstractmethod
    def _clear(self) -> int:
        """Delete every entry of the namespace."""

    # =========================================================================
    # Keys
    # =========================================================================

    def make_key(self, *parts: Any) -> str:
        """Create namespaced cache key."""
        return f"{self.config.namespace}:{':'.join(str(p) for p in parts)}"

    def global_key(self, platform_id: int) -> str:
        return self.make_key("global", platform_id)

    def country_key(self, platform_id: int, country_id: int) -> str:
        return self.make_key("country", platform_id, country_id)

    # =========================================================================
    # Core Operations
    # =========================================================================

    def get(self, key: str) -> Optional[Any]:
        """Get a cached value, or None when absent, expired or disabled."""
        if not self.config.enabled:
            return None

        data = self._read(key)
        if data is None:
            self._stats.misses += 1
            logger.debug(f"Cache miss: {key}")
            return None

        self._stats.hits += 1
        self._stats.bytes_read += len(data)
        logger.debug(f"Cache hit: {key}")
        return deserialize_value(data)

    def set(self, key: str, value: Any, ttl: timedelta) -> bytes:
        """Store a value. Returns the serialized bytes."""
        data = serialize_value(value)
        if self.config.enabled:
            self._write(key, data, ttl)
            self._stats.bytes_written += len(data)
        return data

    def get_or_compute(self, key: str, ttl: timedelta, compute: Callable[[], Any]) -> Any:
        """
        Return the cached value of `key`, computing and storing it on a miss.

        The value returned on a miss goes through the same serialization as
        a hit, so both paths give identical structures.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        data = self.set(key, compute(), ttl)
        return deserialize_value(data)

    def invalidate(self, key: str) -> bool:
        """Drop one entry."""
        return self.invalidate_many([key]) > 0

    def invalidate_many(self, keys: Iterable[str]) -> int:
        """Drop several entries. Returns the number removed."""
        keys = list(keys)
        if not keys:
            return 0
        removed = self._delete(keys)
        self._stats.invalidations += removed
        return removed

    def clear(self) -> int:
        """Drop every entry of the namespace."""
        removed = self._clear()
        self._stats.invalidations += removed
        logger.info(f"Cleared {removed} cache entries in namespace {self.config.namespace}")
        return removed

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            "backend": self.backend_name,
            "enabled": self.config.enabled,
            "namespace": self.config.namespace,
            "hits": self._stats.hits,
            "misses": self._stats.misses,
            "errors": self._stats.errors,
            "invalidations": self._stats.invalidations,
            "hit_rate_percent": round(self._stats.hit_rate * 100, 2),
            "bytes_written": self._stats.bytes_written,
            "bytes_read": self._stats.bytes_read,
        }

    def health_check(self) -> Dict[str, Any]:
        """Backend health; in-process backends are always healthy."""
        status = self.backend_name if self.config.enabled else "disabled"
        return {"healthy": True, "status": status, "stats": self.get_stats()}

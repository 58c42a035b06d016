"""
Redis Score Cache

Score cache shared between processes, with:
- Namespace isolation
- Circuit breaker for resilience
- Graceful degradation: a Redis failure is a cache miss, never an error
"""

import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Iterable, Optional

from redis import Redis
from redis.exceptions import RedisError, ConnectionError as RedisConnectionError

from .base import ScoreCache
from .config import CacheConfig

logger = logging.getLogger(__name__)


@dataclass
class CircuitBreakerState:
    """Circuit breaker state tracking."""
    failures: int = 0
    last_failure: float = 0.0
    is_open: bool = False
    opened_at: float = 0.0


class CircuitBreaker:
    """
    Circuit breaker for the Redis connection.

    Fails fast after `threshold` consecutive failures, then lets one
    request through once `timeout` seconds have passed.
    """

    def __init__(self, threshold: int = 5, timeout: int = 60):
        self.threshold = threshold
        self.timeout = timeout
        self.state = CircuitBreakerState()

    def is_available(self) -> bool:
        """Check if circuit allows requests."""
        if not self.state.is_open:
            return True

        if time.time() - self.state.opened_at >= self.timeout:
            self.state.is_open = False
            self.state.failures = 0
            logger.info("Circuit breaker closed, allowing requests")
            return True

        return False

    def record_success(self):
        self.state.failures = 0
        self.state.is_open = False

    def record_failure(self):
        self.state.failures += 1
        self.state.last_failure = time.time()

        if self.state.failures >= self.threshold:
            self.state.is_open = True
            self.state.opened_at = time.time()
            logger.warning(
                f"Circuit breaker opened after {self.state.failures} failures. "
                f"Will retry in {self.timeout} seconds."
            )


class RedisScoreCache(ScoreCache):
    """
    Redis-backed score cache.

    Features:
    - Lazily created client (or an injected one)
    - Circuit breaker for resilience
    - Graceful degradation (returns None on errors)
    """

    backend_name = "redis"

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        client: Optional[Redis] = None,
    ):
        super().__init__(config)
        self._redis = client
        self._circuit_breaker = CircuitBreaker(
            threshold=self.config.circuit_breaker_threshold,
            timeout=self.config.circuit_breaker_timeout,
        ) if self.config.circuit_breaker_enabled else None

    @property
    def client(self) -> Redis:
        if self._redis is None:
            self._redis = Redis.from_url(
                self.config.redis_url,
                socket_timeout=self.config.redis_socket_timeout,
                socket_connect_timeout=self.config.redis_connect_timeout,
                decode_responses=False,  # We handle bytes directly
            )
            logger.info(f"Redis score cache connected: {self.config.redis_url}")
        return self._redis

    def _call(self, operation: str, default: Any, fn):
        """Run a Redis command; failures are counted, logged and turned into `default`."""
        if self._circuit_breaker and not self._circuit_breaker.is_available():
            self._stats.errors += 1
            return default

        try:
            result = fn(self.client)
        except RedisConnectionError:
            self._stats.errors += 1
            if self._circuit_breaker:
                self._circuit_breaker.record_failure()
            logger.warning(f"Redis unavailable, cache {operation} skipped")
            return default
        except RedisError as e:
            self._stats.errors += 1
            if self._circuit_breaker:
                self._circuit_breaker.record_failure()
            logger.error(f"Cache {operation} error: {e}")
            return default

        if self._circuit_breaker:
            self._circuit_breaker.record_success()
        return result

    def _read(self, key: str) -> Optional[bytes]:
        return self._call("get", None, lambda r: r.get(key))

    def _write(self, key: str, data: bytes, ttl: timedelta) -> None:
        seconds = max(1, int(ttl.total_seconds()))
        self._call("set", None, lambda r: r.setex(key, seconds, data))

    def _delete(self, keys: Iterable[str]) -> int:
        keys = list(keys)
        return int(self._call("delete", 0, lambda r: r.delete(*keys)) or 0)

    def _clear(self) -> int:
        pattern = f"{self.config.namespace}:*"

        def delete_pattern(r: Redis) -> int:
            keys = list(r.scan_iter(match=pattern, count=100))
            return r.delete(*keys) if keys else 0

        return int(self._call("clear", 0, delete_pattern) or 0)

    def get_stats(self) -> Dict[str, Any]:
        stats = super().get_stats()
        stats["circuit_breaker_open"] = (
            self._circuit_breaker.state.is_open if self._circuit_breaker else False
        )
        return stats

    def health_check(self) -> Dict[str, Any]:
        """Ping Redis."""
        if not self.config.enabled:
            return {"healthy": True, "status": "disabled"}

        start = time.time()
        ok = self._call("ping", False, lambda r: r.ping())
        if not ok:
            return {"healthy": False, "status": "error", "stats": self.get_stats()}
        return {
            "healthy": True,
            "status": "connected",
            "latency_ms": round((time.time() - start) * 1000, 2),
            "stats": self.get_stats(),
        }

"""
Tests for the score cache.

These tests verify:
- Serialization round trip (what a hit returns equals what a miss returns)
- Memory cache expiry with a controllable clock
- Redis cache operations against a mocked client
- Graceful degradation and the circuit breaker
- Event-driven invalidation
- Configuration from the environment
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError, RedisError

from coverage_engine.cache import (
    CacheConfig,
    CacheEvent,
    CacheTTL,
    CircuitBreaker,
    CoverageCacheInvalidator,
    MemoryScoreCache,
    RedisScoreCache,
    create_score_cache,
    deserialize_value,
    get_cache_config,
    get_score_cache,
    serialize_value,
    set_score_cache,
)


TTL = timedelta(minutes=5)


# =============================================================================
# SERIALIZATION TESTS
# =============================================================================

class TestSerialization:
    """Test serialization utilities."""

    def test_serialize_datetime(self):
        data = {"timestamp": datetime(2024, 1, 15, 10, 30, 0)}
        assert deserialize_value(serialize_value(data)) == {"timestamp": "2024-01-15T10:30:00"}

    def test_serialize_enum_and_to_dict(self):
        from coverage_engine.coverage import CompletionStatus
        from coverage_engine.scoring import QuotaProgress

        data = {"status": CompletionStatus.PUBLISHED, "quota": QuotaProgress(target=3, completed=1, total=1)}
        result = deserialize_value(serialize_value(data))

        assert result["status"] == "published"
        assert result["quota"]["target"] == 3

    def test_unicode_kept(self):
        assert deserialize_value(serialize_value({"name": "Démarches"})) == {"name": "Démarches"}

    def test_empty_bytes(self):
        assert deserialize_value(b"") is None


# =============================================================================
# MEMORY CACHE TESTS
# =============================================================================

class TestMemoryScoreCache:
    """Test in-process cache behaviour."""

    def test_get_or_compute_computes_once(self, memory_cache):
        compute = MagicMock(return_value={"score": 42.5})

        first = memory_cache.get_or_compute("test:a", TTL, compute)
        second = memory_cache.get_or_compute("test:a", TTL, compute)

        assert first == second == {"score": 42.5}
        assert compute.call_count == 1

    def test_miss_returns_round_tripped_value(self, memory_cache):
        """A tuple comes back as a list on a hit, so it does on a miss too."""
        first = memory_cache.get_or_compute("test:a", TTL, lambda: {"pair": (1, 2)})
        second = memory_cache.get_or_compute("test:a", TTL, lambda: {"pair": (1, 2)})

        assert first == second == {"pair": [1, 2]}

    def test_returned_values_are_independent_copies(self, memory_cache):
        memory_cache.set("test:a", {"items": [1]}, TTL)

        memory_cache.get("test:a")["items"].append(2)

        assert memory_cache.get("test:a") == {"items": [1]}

    def test_expiry(self, memory_cache, clock):
        memory_cache.set("test:a", 1, timedelta(seconds=10))

        clock.advance(9)
        assert memory_cache.get("test:a") == 1

        clock.advance(1)
        assert memory_cache.get("test:a") is None
        assert len(memory_cache) == 0

    def test_expired_entry_already_dropped_by_another_reader(self, cache_config):
        """The expired entry disappears between the lookup and the expiry check."""
        cache = MemoryScoreCache(cache_config, clock=lambda: 0.0)
        cache.set("test:a", {"score": 1}, timedelta(seconds=10))

        def racing_clock():
            cache._entries.pop("test:a", None)
            return 10.0

        cache._clock = racing_clock

        assert cache.get("test:a") is None
        assert cache.get_or_compute("test:a", TTL, lambda: {"score": 2}) == {"score": 2}

    def test_concurrent_access(self, memory_cache):
        def worker(i):
            key = f"test:{i % 5}"
            for _ in range(200):
                memory_cache.get_or_compute(key, TTL, lambda: {"i": i})
                memory_cache.set(f"test:extra:{i}", i, TTL)
                memory_cache.clear()
            return True

        with ThreadPoolExecutor(max_workers=8) as pool:
            assert all(pool.map(worker, range(16)))

    def test_invalidate(self, memory_cache):
        memory_cache.set("test:a", 1, TTL)
        memory_cache.set("test:b", 2, TTL)

        assert memory_cache.invalidate("test:a") is True
        assert memory_cache.invalidate("test:a") is False
        assert memory_cache.invalidate_many(["test:b", "test:c"]) == 1

    def test_clear_only_touches_namespace(self, memory_cache):
        memory_cache.set("test:a", 1, TTL)
        memory_cache.set("other:a", 1, TTL)

        assert memory_cache.clear() == 1
        assert len(memory_cache) == 1

    def test_disabled_cache_always_computes(self, clock):
        cache = MemoryScoreCache(CacheConfig(namespace="test", enabled=False), clock=clock)
        compute = MagicMock(return_value=1)

        cache.get_or_compute("test:a", TTL, compute)
        cache.get_or_compute("test:a", TTL, compute)

        assert compute.call_count == 2
        assert len(cache) == 0

    def test_keys(self, memory_cache):
        assert memory_cache.country_key(1, 42) == "test:country:1:42"
        assert memory_cache.global_key(2) == "test:global:2"

    def test_stats(self, memory_cache):
        memory_cache.set("test:a", 1, TTL)
        memory_cache.get("test:a")
        memory_cache.get("test:missing")

        stats = memory_cache.get_stats()
        assert stats["backend"] == "memory"
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate_percent"] == 50.0

    def test_health(self, memory_cache):
        assert memory_cache.health_check()["healthy"] is True


# =============================================================================
# REDIS CACHE TESTS (mocked client)
# =============================================================================

@pytest.fixture
def redis_client():
    client = MagicMock()
    client.get.return_value = None
    client.delete.return_value = 0
    return client


@pytest.fixture
def redis_cache(redis_client):
    config = CacheConfig(
        namespace="test",
        enabled=True,
        backend="redis",
        circuit_breaker_threshold=2,
        circuit_breaker_timeout=60,
    )
    return RedisScoreCache(config, client=redis_client)


class TestRedisScoreCache:
    """Test Redis backend against a mocked client."""

    def test_set_uses_setex(self, redis_cache, redis_client):
        data = redis_cache.set("test:a", {"score": 1}, TTL)

        redis_client.setex.assert_called_once_with("test:a", 300, data)

    def test_hit(self, redis_cache, redis_client):
        redis_client.get.return_value = serialize_value({"score": 1})

        assert redis_cache.get("test:a") == {"score": 1}
        assert redis_cache.get_stats()["hits"] == 1

    def test_error_is_a_miss(self, redis_cache, redis_client):
        redis_client.get.side_effect = RedisError("boom")

        value = redis_cache.get_or_compute("test:a", TTL, lambda: {"score": 3})

        assert value == {"score": 3}
        assert redis_cache.get_stats()["errors"] == 1

    def test_circuit_breaker_stops_calls(self, redis_cache, redis_client):
        redis_client.get.side_effect = RedisConnectionError("down")

        for _ in range(4):
            assert redis_cache.get("test:a") is None

        assert redis_client.get.call_count == 2
        assert redis_cache.get_stats()["circuit_breaker_open"] is True

    def test_delete_counts(self, redis_cache, redis_client):
        redis_client.delete.return_value = 2

        assert redis_cache.invalidate_many(["test:a", "test:b", "test:c"]) == 2
        redis_client.delete.assert_called_once_with("test:a", "test:b", "test:c")

    def test_clear_scans_namespace(self, redis_cache, redis_client):
        redis_client.scan_iter.return_value = iter([b"test:a", b"test:b"])
        redis_client.delete.return_value = 2

        assert redis_cache.clear() == 2
        redis_client.scan_iter.assert_called_once_with(match="test:*", count=100)

    def test_health_check(self, redis_cache, redis_client):
        redis_client.ping.return_value = True
        assert redis_cache.health_check()["status"] == "connected"

        redis_client.ping.side_effect = RedisError("boom")
        assert redis_cache.health_check()["healthy"] is False


class TestCircuitBreaker:
    """Test circuit breaker state machine."""

    def test_opens_after_threshold(self):
        breaker = CircuitBreaker(threshold=3, timeout=60)
        for _ in range(3):
            breaker.record_failure()

        assert breaker.is_available() is False

    def test_success_resets(self):
        breaker = CircuitBreaker(threshold=2, timeout=60)
        breaker.record_failure()
        breaker.record_success()
        breaker.record_failure()

        assert breaker.is_available() is True

    def test_half_open_after_timeout(self):
        breaker = CircuitBreaker(threshold=1, timeout=60)
        breaker.record_failure()

        with patch("coverage_engine.cache.redis_cache.time.time", return_value=breaker.state.opened_at + 61):
            assert breaker.is_available() is True


# =============================================================================
# INVALIDATION TESTS
# =============================================================================

class TestInvalidation:
    """Test event-driven invalidation."""

    @pytest.fixture
    def invalidator(self, memory_cache):
        return CoverageCacheInvalidator(memory_cache, list_country_ids=lambda: [1, 2], platform_ids=[1, 2])

    def fill(self, cache):
        for platform_id in (1, 2):
            cache.set(cache.global_key(platform_id), {}, TTL)
            for country_id in (1, 2):
                cache.set(cache.country_key(platform_id, country_id), {}, TTL)

    def test_content_event(self, invalidator, memory_cache):
        self.fill(memory_cache)

        result = invalidator.handle_event(CacheEvent.CONTENT_UPDATED, platform_id=1, country_id=2)

        assert result.keys_invalidated == 2
        assert result.keys == ["test:country:1:2", "test:global:1"]
        assert result.to_dict()["event"] == "content_updated"

    def test_founder_content_event_covers_every_founder_platform(self, invalidator, memory_cache):
        self.fill(memory_cache)

        result = invalidator.handle_event(
            CacheEvent.CONTENT_PUBLISHED, platform_id=2, country_id=1, is_founder=True,
        )

        assert result.keys_invalidated == 4
        assert "test:country:1:1" in result.keys

    def test_content_event_requires_platform(self, invalidator):
        with pytest.raises(ValueError):
            invalidator.handle_event(CacheEvent.CONTENT_DELETED, country_id=1)

    def test_manual_platform_only(self, invalidator, memory_cache):
        self.fill(memory_cache)

        result = invalidator.handle_event(CacheEvent.MANUAL_INVALIDATE, platform_id=1)

        assert result.keys == ["test:global:1"]
        assert len(memory_cache) == 5

    def test_invalidate_all(self, invalidator, memory_cache):
        self.fill(memory_cache)

        assert invalidator.handle_event(CacheEvent.MANUAL_INVALIDATE_ALL).keys_invalidated == 6
        assert len(memory_cache) == 0

    def test_invalidate_all_without_country_list_clears_namespace(self, memory_cache):
        self.fill(memory_cache)
        memory_cache.set("test:country:9:9", {}, TTL)

        assert CoverageCacheInvalidator(memory_cache).invalidate_all() == 7


# =============================================================================
# CONFIG AND FACTORY TESTS
# =============================================================================

class TestCacheConfig:
    """Test cache configuration."""

    def test_config_defaults(self):
        config = CacheConfig()
        assert config.backend in ("memory", "redis")
        assert config.circuit_breaker_threshold == 5
        assert CacheTTL().COUNTRY_SCORE == timedelta(minutes=5)
        assert CacheTTL().GLOBAL_COVERAGE == timedelta(minutes=5)

    @patch.dict('os.environ', {'CACHE_ENABLED': 'false', 'COVERAGE_CACHE_TTL_SECONDS': '60'})
    def test_config_from_env(self):
        get_cache_config.cache_clear()
        config = CacheConfig()
        assert config.enabled is False
        assert config.ttl.COUNTRY_SCORE == timedelta(seconds=60)
        get_cache_config.cache_clear()

    def test_factory_backends(self):
        assert isinstance(create_score_cache(CacheConfig(backend="memory")), MemoryScoreCache)
        assert isinstance(create_score_cache(CacheConfig(backend="redis")), RedisScoreCache)

        with pytest.raises(ValueError):
            create_score_cache(CacheConfig(backend="memcached"))

    def test_singleton_can_be_replaced(self, memory_cache):
        assert get_score_cache() is memory_cache

        set_score_cache(None)
        try:
            assert get_score_cache() is not memory_cache
        finally:
            set_score_cache(memory_cache)

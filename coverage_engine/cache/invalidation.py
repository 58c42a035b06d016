"""
Cache Invalidation Service

Event-driven invalidation of cached coverage results.
Principle: Invalidate as narrowly as possible.

Events trigger targeted invalidation:
- CONTENT_PUBLISHED / UPDATED / DELETED: the (platform, country) entry and
  the platform's global entry; founder content also touches every founder
  platform, since the founder dimension is cross-platform
- TAXONOMY_CHANGED: everything (targets changed for every country)
- MANUAL_INVALIDATE: one platform (and optionally one country)
- MANUAL_INVALIDATE_ALL: everything
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, List, Optional

from coverage_engine.coverage.platforms import FOUNDER_PLATFORM_IDS, PLATFORM_PROFILES

from .base import ScoreCache

logger = logging.getLogger(__name__)


class CacheEvent(Enum):
    """Events that trigger cache invalidation."""

    # Content lifecycle
    CONTENT_PUBLISHED = "content_published"
    CONTENT_UPDATED = "content_updated"
    CONTENT_DELETED = "content_deleted"

    # Reference data
    TAXONOMY_CHANGED = "taxonomy_changed"

    # Manual invalidation
    MANUAL_INVALIDATE = "manual_invalidate"
    MANUAL_INVALIDATE_ALL = "manual_invalidate_all"


CONTENT_EVENTS = (
    CacheEvent.CONTENT_PUBLISHED,
    CacheEvent.CONTENT_UPDATED,
    CacheEvent.CONTENT_DELETED,
)


@dataclass
class InvalidationResult:
    """Result of a cache invalidation operation."""
    event: CacheEvent
    keys_invalidated: int
    duration_ms: float
    keys: List[str] = field(default_factory=list)

    def to_dict(self):
        return {
            "event": self.event.value,
            "keys_invalidated": self.keys_invalidated,
            "duration_ms": self.duration_ms,
        }


class CoverageCacheInvalidator:
    """
    Handles cache invalidation based on events.

    Args:
        cache: Score cache to invalidate
        list_country_ids: Returns every reference country id; needed for
            full invalidation. When absent, full invalidation clears the
            namespace instead.
        platform_ids: Platforms whose entries a full invalidation drops
    """

    def __init__(
        self,
        cache: ScoreCache,
        list_country_ids: Optional[Callable[[], Iterable[int]]] = None,
        platform_ids: Iterable[int] = tuple(PLATFORM_PROFILES),
    ):
        self.cache = cache
        self._list_country_ids = list_country_ids
        self.platform_ids = tuple(platform_ids)

    def keys_for(self, platform_id: int, country_id: Optional[int] = None) -> List[str]:
        """Country entry (when given) plus the platform's global entry."""
        keys = []
        if country_id:
            keys.append(self.cache.country_key(platform_id, country_id))
        keys.append(self.cache.global_key(platform_id))
        return keys

    def invalidate(self, platform_id: int, country_id: Optional[int] = None) -> int:
        removed = self.cache.invalidate_many(self.keys_for(platform_id, country_id))
        logger.info(
            f"Invalidated {removed} coverage entries for platform {platform_id}"
            + (f", country {country_id}" if country_id else "")
        )
        return removed

    def invalidate_all(self) -> int:
        """Drop every platform × country entry and every global entry."""
        if self._list_country_ids is None:
            return self.cache.clear()

        country_ids = list(self._list_country_ids())
        keys = []
        for platform_id in self.platform_ids:
            keys.append(self.cache.global_key(platform_id))
            keys.extend(self.cache.country_key(platform_id, cid) for cid in country_ids)

        removed = self.cache.invalidate_many(keys)
        logger.info(
            f"Invalidated all coverage cache: {removed} entries "
            f"({len(self.platform_ids)} platforms × {len(country_ids)} countries)"
        )
        return removed

    def handle_event(
        self,
        event: CacheEvent,
        platform_id: Optional[int] = None,
        country_id: Optional[int] = None,
        is_founder: bool = False,
    ) -> InvalidationResult:
        """
        Handle cache invalidation for an event.

        Raises:
            ValueError: A content or manual event without a platform id
        """
        start = time.perf_counter()
        logger.info(
            f"Cache invalidation event: {event.value}, "
            f"platform={platform_id}, country={country_id}, founder={is_founder}"
        )

        keys: List[str] = []
        if event in CONTENT_EVENTS:
            if platform_id is None:
                raise ValueError(f"{event.value} requires a platform id")
            keys.extend(self.keys_for(platform_id, country_id))
            if is_founder:
                for founder_platform_id in FOUNDER_PLATFORM_IDS:
                    if founder_platform_id != platform_id:
                        keys.extend(self.keys_for(founder_platform_id, country_id))
            removed = self.cache.invalidate_many(keys)

        elif event == CacheEvent.MANUAL_INVALIDATE:
            if platform_id is None:
                raise ValueError(f"{event.value} requires a platform id")
            keys = self.keys_for(platform_id, country_id)
            removed = self.cache.invalidate_many(keys)

        else:
            removed = self.invalidate_all()

        return InvalidationResult(
            event=event,
            keys_invalidated=removed,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
            keys=keys,
        )

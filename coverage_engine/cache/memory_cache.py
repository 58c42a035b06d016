"""
In-Process Score Cache

Dictionary of serialized entries with expiry timestamps. The clock is
injectable so expiry can be tested without sleeping.

The cache is shared by the request threads of the HTTP server, so every
access to the entry dictionary holds one lock.
"""

import logging
import threading
import time
from datetime import timedelta
from typing import Callable, Dict, Iterable, Optional, Tuple

from .base import ScoreCache
from .config import CacheConfig

logger = logging.getLogger(__name__)


class MemoryScoreCache(ScoreCache):
    """Score cache kept in the memory of the current process."""

    backend_name = "memory"

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(config)
        self._clock = clock
        self._entries: Dict[str, Tuple[float, bytes]] = {}
        self._lock = threading.Lock()

    def _read(self, key: str) -> Optional[bytes]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, data = entry
            if self._clock() >= expires_at:
                # Another reader may already have dropped the expired entry
                self._entries.pop(key, None)
                return None
            return data

    def _write(self, key: str, data: bytes, ttl: timedelta) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + ttl.total_seconds(), data)

    def _delete(self, keys: Iterable[str]) -> int:
        with self._lock:
            return self._pop_all(keys)

    def _clear(self) -> int:
        prefix = f"{self.config.namespace}:"
        with self._lock:
            return self._pop_all([key for key in list(self._entries) if key.startswith(prefix)])

    def _pop_all(self, keys: Iterable[str]) -> int:
        removed = 0
        for key in keys:
            if self._entries.pop(key, None) is not None:
                removed += 1
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

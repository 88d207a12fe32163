# app/services/search/local_cache.py
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Optional, Tuple

from app.core.config import settings


class LocalCache:
    """
    In-process LRU cache with a per-entry TTL.

    The lock only protects the structure of the map. Two threads populating
    the same key concurrently is harmless: the last writer wins.
    """

    def __init__(
        self,
        max_size: int = settings.LOCAL_CACHE_MAX_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_size = max_size
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, Any]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return value

    def set(self, key: str, value: Any, ttl: float) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + ttl, value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

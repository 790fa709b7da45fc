"""Process-local forecast store, the default when Redis is not configured."""

import threading
from typing import Optional

from fogcast.cache_store.base import CacheEntry, ForecastStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache_store/in_memory_forecast_store")


class InMemoryForecastStore(ForecastStore):
    """Thread-safe dict of key -> CacheEntry.

    Expired entries are kept: the cache needs their ``last_modified`` to revalidate.
    """

    def __init__(self) -> None:
        logger.debug("Initializing InMemoryForecastStore")
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def put(self, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[entry.key] = entry

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

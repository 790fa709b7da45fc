"""Conditional forecast cache: TTL expiry locally, If-Modified-Since revalidation upstream."""
from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from pydantic import ValidationError

from fogcast.cache_store.base import CacheEntry, ForecastStore
from fogcast.data_sources.base import UpstreamResponse
from fogcast.domain import ForecastSnapshot
from fogcast.errors import CacheMiss, UpstreamError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="forecast_cache")

DEFAULT_TTL = timedelta(hours=1)
NOT_MODIFIED_TTL = timedelta(minutes=30)

Fetcher = Callable[[Optional[datetime]], UpstreamResponse]
Aggregator = Callable[[Mapping[str, Any]], ForecastSnapshot]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ForecastCache:
    """
    Serve forecasts from a ``ForecastStore`` and refresh them from upstream.

    ``get_or_refresh`` returns a fresh stored snapshot without touching
    upstream. Once an entry expires it is revalidated with its
    ``last_modified``; a not-modified answer only pushes ``expires_at`` out.
    New documents go through ``aggregate`` and replace the entry.

    Refreshes are single-flight per key: concurrent callers for the same key
    wait on one lock and then read what the first caller stored.

    A stored body that no longer validates as a ``ForecastSnapshot`` is deleted
    and treated as a plain miss, so the next fetch is unconditional.
    """

    def __init__(
        self,
        store: ForecastStore,
        aggregate: Aggregator,
        *,
        clock: Callable[[], datetime] = _utc_now,
        default_ttl: timedelta = DEFAULT_TTL,
        not_modified_ttl: timedelta = NOT_MODIFIED_TTL,
        serve_stale_on_error: bool = False,
    ) -> None:
        self.store = store
        self.aggregate = aggregate
        self.clock = clock
        self.default_ttl = default_ttl
        self.not_modified_ttl = not_modified_ttl
        self.serve_stale_on_error = serve_stale_on_error
        self._key_locks: Dict[str, threading.Lock] = {}
        self._key_locks_guard = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._key_locks_guard:
            return self._key_locks.setdefault(key, threading.Lock())

    def _lookup(self, key: str, now: datetime) -> CacheEntry:
        """Return a fresh entry or raise CacheMiss (carrying any stale entry)."""
        entry = self.store.get(key)
        if entry is None:
            raise CacheMiss(key)
        if not entry.is_fresh(now):
            raise CacheMiss(key, stale=entry)
        return entry

    def _decode(self, key: str, entry: CacheEntry) -> Optional[ForecastSnapshot]:
        """Decode a stored body; an unreadable one is evicted and counts as a full miss."""
        try:
            return ForecastSnapshot.model_validate_json(entry.body)
        except ValidationError as exc:
            logger.error(
                "Evicting unreadable cached forecast",
                extra={"key": key, "error": str(exc).splitlines()[0]},
            )
            self.store.delete(key)
            return None

    def get_or_refresh(self, key: str, fetcher: Fetcher) -> ForecastSnapshot:
        """Return the snapshot for ``key``, fetching or revalidating when needed."""
        try:
            entry = self._lookup(key, self.clock())
        except CacheMiss:
            pass
        else:
            snapshot = self._decode(key, entry)
            if snapshot is not None:
                logger.debug("Forecast cache hit", extra={"key": key, "expires_at": entry.expires_at.isoformat()})
                return snapshot

        with self._lock_for(key):
            # Another caller may have refreshed while we waited for the lock.
            try:
                entry = self._lookup(key, self.clock())
            except CacheMiss as miss:
                stale = miss.stale
            else:
                snapshot = self._decode(key, entry)
                if snapshot is not None:
                    logger.debug("Forecast refreshed by concurrent request", extra={"key": key})
                    return snapshot
                stale = None

            stale_snapshot = self._decode(key, stale) if stale is not None else None
            if stale_snapshot is None:
                stale = None
            return self._refresh(key, fetcher, stale=stale, stale_snapshot=stale_snapshot)

    def _refresh(
        self,
        key: str,
        fetcher: Fetcher,
        *,
        stale: Optional[CacheEntry],
        stale_snapshot: Optional[ForecastSnapshot],
    ) -> ForecastSnapshot:
        if stale is None:
            logger.info("Forecast cache miss; fetching", extra={"key": key})
        else:
            logger.info(
                "Forecast cache entry expired; revalidating",
                extra={"key": key, "last_modified": stale.last_modified.isoformat()},
            )

        try:
            response = fetcher(stale.last_modified if stale is not None else None)
        except UpstreamError as exc:
            if stale is not None and self.serve_stale_on_error:
                logger.warning(
                    "Upstream failed; serving stale forecast",
                    extra={"key": key, "error": exc.message, "expired_at": stale.expires_at.isoformat()},
                )
                return stale_snapshot
            logger.error("Upstream failed and no usable forecast is cached", extra={"key": key, "error": exc.message})
            raise

        now = self.clock()

        if response.not_modified:
            if stale is None:
                # 304 without a conditional request means the source is confused.
                raise UpstreamError("Upstream reported not-modified for an unconditional request")
            renewed = replace(
                stale,
                last_modified=response.last_modified or stale.last_modified,
                expires_at=response.expires or now + self.not_modified_ttl,
            )
            self.store.put(renewed)
            logger.info(
                "Upstream forecast unchanged; extended expiry",
                extra={"key": key, "expires_at": renewed.expires_at.isoformat()},
            )
            return stale_snapshot

        snapshot = self.aggregate(response.document)
        entry = CacheEntry(
            key=key,
            body=snapshot.model_dump_json(),
            last_modified=response.last_modified or now,
            expires_at=response.expires or now + self.default_ttl,
        )
        self.store.put(entry)
        logger.info(
            "Stored new forecast",
            extra={
                "key": key,
                "last_modified": entry.last_modified.isoformat(),
                "expires_at": entry.expires_at.isoformat(),
            },
        )
        return snapshot

"""Redis-backed forecast store so several workers share one upstream fetch cadence."""

import json
from datetime import datetime
from typing import Optional

import redis

from fogcast.cache_store.base import CacheEntry, ForecastStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache_store/redis_forecast_store")


class RedisForecastStore(ForecastStore):
    """Stores entries as JSON under ``prefix + key``.

    Redis' own TTL is the retention period, not the forecast expiry: an entry
    past ``expires_at`` must still be readable so it can be revalidated.
    Redis failures are logged and degrade to a miss (reads) or a skipped write,
    so an outage costs upstream fetches rather than requests.
    """

    def __init__(self, client, retention_seconds: int = 86400, prefix: str = "fogcast:") -> None:
        logger.debug("Initializing RedisForecastStore")
        self.client = client
        self.retention = retention_seconds
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    @staticmethod
    def _dump(entry: CacheEntry) -> bytes:
        return json.dumps(
            {
                "key": entry.key,
                "body": entry.body,
                "last_modified": entry.last_modified.isoformat(),
                "expires_at": entry.expires_at.isoformat(),
            }
        ).encode("utf-8")

    @staticmethod
    def _load(raw: bytes | str) -> Optional[CacheEntry]:
        """Decode a stored entry; corrupt payloads count as a miss."""
        try:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            data = json.loads(raw)
            return CacheEntry(
                key=data["key"],
                body=data["body"],
                last_modified=datetime.fromisoformat(data["last_modified"]),
                expires_at=datetime.fromisoformat(data["expires_at"]),
            )
        except (UnicodeDecodeError, ValueError, KeyError, TypeError) as exc:
            logger.error("Failed to deserialize cache entry: %s", exc)
            return None

    def get(self, key: str) -> Optional[CacheEntry]:
        try:
            raw = self.client.get(self._key(key))
        except redis.RedisError as exc:
            logger.error("Failed to read forecast from Redis: %s", exc)
            return None
        if not raw:
            return None
        return self._load(raw)

    def put(self, entry: CacheEntry) -> None:
        # Single SETEX: readers see either the old or the new entry.
        try:
            self.client.setex(self._key(entry.key), self.retention, self._dump(entry))
        except redis.RedisError as exc:
            logger.error("Failed to write forecast to Redis: %s", exc)

    def delete(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except redis.RedisError as exc:
            logger.error("Failed to delete forecast from Redis: %s", exc)

    def clear(self) -> None:
        """Best-effort delete of every key under the configured prefix."""
        try:
            for key in self.client.scan_iter(f"{self.prefix}*"):
                self.client.delete(key)
        except redis.RedisError as exc:
            logger.error("Failed to clear forecasts from Redis: %s", exc)

"""Shared protocol and entry type for forecast cache backends."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol


@dataclass(frozen=True)
class CacheEntry:
    """A cached forecast: snapshot JSON plus the upstream freshness instants."""
    key: str
    body: str
    last_modified: datetime
    expires_at: datetime

    def is_fresh(self, now: datetime) -> bool:
        return now < self.expires_at


class ForecastStore(Protocol):
    """Protocol for forecast cache backends. Writes replace whole entries."""

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for ``key`` (expired or not), or None."""

    def put(self, entry: CacheEntry) -> None:
        """Store ``entry``, replacing any previous entry under the same key."""

    def delete(self, key: str) -> None:
        """Remove an entry without raising if it is absent."""

    def clear(self) -> None:
        """Drop every entry."""

"""Error kinds surfaced by the forecast pipeline and cache."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional


class FogcastError(Exception):
    """Base error carrying a machine-readable kind, a message and when it happened."""
    kind: str = "internal"

    def __init__(self, message: str, *, timestamp: Optional[datetime] = None) -> None:
        super().__init__(message)
        self.message = message
        self.timestamp = timestamp or datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view used by the HTTP error responses."""
        return {
            "kind": self.kind,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }


class StructuralError(FogcastError):
    """The upstream document is missing a field the aggregation cannot do without."""
    kind = "structural"

    def __init__(self, message: str, *, field: Optional[str] = None, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.field = field


class UpstreamError(FogcastError):
    """Network failure, timeout or unexpected HTTP status from the provider."""
    kind = "upstream"

    def __init__(self, message: str, *, status_code: Optional[int] = None, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.status_code is not None:
            data["status_code"] = self.status_code
        return data


class CacheMiss(FogcastError):
    """Internal signal: no usable cache entry, a fetch is required.

    ``stale`` holds the expired entry when there is one, so the caller can
    revalidate instead of doing a full fetch.
    """
    kind = "cache_miss"

    def __init__(self, key: str, stale: Any = None) -> None:
        super().__init__(f"No fresh cache entry for '{key}'")
        self.key = key
        self.stale = stale

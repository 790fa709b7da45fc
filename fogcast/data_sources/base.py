"""Interfaces shared by the forecast data sources."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol


@dataclass(frozen=True)
class UpstreamResponse:
    """Result of one upstream call.

    ``document`` is None exactly when ``not_modified`` is True. The freshness
    instants are timezone-aware UTC, or None when the provider omitted them.
    """
    document: Optional[Dict[str, Any]]
    last_modified: Optional[dt.datetime] = None
    expires: Optional[dt.datetime] = None
    not_modified: bool = False


class ForecastDataSource(Protocol):
    """Anything that can return a locationforecast document for a point."""

    def fetch(
        self,
        latitude: float,
        longitude: float,
        *,
        if_modified_since: Optional[dt.datetime] = None,
    ) -> UpstreamResponse:
        """Fetch the document, or report that it is unchanged since ``if_modified_since``."""
        ...

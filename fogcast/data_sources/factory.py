"""Factory helpers for choosing the upstream forecast source at startup."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fogcast import config
from fogcast.data_sources import met_no_client
from fogcast.data_sources.base import ForecastDataSource, UpstreamResponse
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


DEFAULT_SOURCE_NAME = "met_no"


@dataclass
class MetNoDataSource(ForecastDataSource):
    """Binds URL, User-Agent and timeout to ``met_no_client.fetch_locationforecast``."""

    url: str = met_no_client.MET_NO_COMPLETE_URL
    user_agent: str = "fogcast/1.0"
    timeout: float = 10.0

    def fetch(
        self,
        latitude: float,
        longitude: float,
        *,
        if_modified_since: Optional[dt.datetime] = None,
    ) -> UpstreamResponse:
        return met_no_client.fetch_locationforecast(
            latitude,
            longitude,
            if_modified_since=if_modified_since,
            url=self.url,
            user_agent=self.user_agent,
            timeout=self.timeout,
        )


def build_data_source(settings: config.Settings | None = None) -> ForecastDataSource:
    """Instantiate the configured forecast data source."""
    settings = settings or config.settings
    source = (settings.forecast_source or DEFAULT_SOURCE_NAME).lower()

    if source == "met_no":
        logger.info("Using MET Norway locationforecast", extra={"url": settings.upstream_url})
        return MetNoDataSource(
            url=settings.upstream_url,
            user_agent=settings.user_agent,
            timeout=settings.request_timeout_seconds,
        )

    if source == "file":
        from .file_source import FileForecastDataSource

        path = settings.forecast_file_path
        if not path:
            raise ValueError("forecast_file_path must be set for the file data source")
        logger.info("Using file data source", extra={"path": path})
        return FileForecastDataSource(Path(path))

    raise ValueError(f"Unknown forecast source '{source}'")

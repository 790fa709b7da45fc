"""Serve a saved locationforecast document from disk (offline development)."""
from __future__ import annotations

import datetime as dt
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fogcast.data_sources.base import ForecastDataSource, UpstreamResponse
from fogcast.errors import StructuralError, UpstreamError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/file_source")


@dataclass
class FileForecastDataSource(ForecastDataSource):
    """Reads one JSON file; its mtime stands in for ``Last-Modified``.

    Coordinates are ignored because the file describes a single point.
    """

    path: Path

    def fetch(
        self,
        latitude: float,
        longitude: float,
        *,
        if_modified_since: Optional[dt.datetime] = None,
    ) -> UpstreamResponse:
        try:
            stat = self.path.stat()
        except OSError as exc:
            raise UpstreamError(f"Forecast file unavailable: {self.path}") from exc

        # HTTP dates carry whole seconds only.
        last_modified = dt.datetime.fromtimestamp(int(stat.st_mtime), tz=dt.timezone.utc)
        if if_modified_since is not None and last_modified <= if_modified_since:
            logger.debug("Forecast file unchanged", extra={"path": str(self.path)})
            return UpstreamResponse(document=None, last_modified=last_modified, not_modified=True)

        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise UpstreamError(f"Failed to read forecast file: {self.path}") from exc
        except ValueError as exc:
            raise StructuralError(f"Forecast file is not valid JSON: {self.path}", field="document") from exc

        logger.info("Loaded forecast file", extra={"path": str(self.path)})
        return UpstreamResponse(document=document, last_modified=last_modified)

"""Client and parser for the MET Norway locationforecast 2.0 API."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from email.utils import format_datetime, parsedate_to_datetime
from typing import Any, Dict, List, Mapping, Optional

import requests

from fogcast.data_sources.base import UpstreamResponse
from fogcast.errors import StructuralError, UpstreamError
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag='met_no_client')

# No requests_cache here: freshness and If-Modified-Since are handled by ForecastCache.
session = requests.Session()

MET_NO_COMPLETE_URL = "https://api.met.no/weatherapi/locationforecast/2.0/complete"

EXPECTED_UNITS = {
    "fog_area_fraction": "%",
    "relative_humidity": "%",
    "cloud_area_fraction": "%",
}

ALLOWED_UNIT_SYNONYMS = {
    "fog_area_fraction": {"%", "percent"},
    "relative_humidity": {"%", "percent"},
    "cloud_area_fraction": {"%", "percent"},
}

SUMMARY_WINDOWS = ("next_1_hours", "next_6_hours", "next_12_hours")


@dataclass(frozen=True)
class SymbolSummary:
    """Weather symbol for one lookahead window."""
    symbol_code: str
    symbol_confidence: Optional[str] = None


@dataclass(frozen=True)
class TimeseriesEntry:
    """One parsed entry of ``properties.timeseries``."""
    time: dt.datetime  # timezone-aware, UTC
    fog_area_fraction: Optional[float]
    relative_humidity: Optional[float]
    cloud_area_fraction: Optional[float]
    next_1_hours: Optional[SymbolSummary] = None
    next_6_hours: Optional[SymbolSummary] = None
    next_12_hours: Optional[SymbolSummary] = None


def _parse_time(value: Any, *, index: int) -> dt.datetime:
    """Parse an ISO-8601 ``time`` value (``Z`` suffix allowed) into aware UTC."""
    if not isinstance(value, str):
        raise StructuralError(f"timeseries[{index}].time is missing", field=f"timeseries[{index}].time")
    try:
        parsed = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise StructuralError(
            f"timeseries[{index}].time is not an ISO timestamp: {value!r}",
            field=f"timeseries[{index}].time",
        ) from exc
    if parsed.tzinfo is None:
        # The API always speaks UTC.
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed.astimezone(dt.timezone.utc)


def _as_float(value: Any) -> Optional[float]:
    """Return ``value`` as a float, or None when it is absent or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.debug("Ignoring non-numeric detail value", extra={"value": value})
        return None


def _parse_summary(block: Any) -> Optional[SymbolSummary]:
    """Pull ``summary.symbol_code`` out of a next_N_hours block."""
    if not isinstance(block, Mapping):
        return None
    summary = block.get("summary")
    if not isinstance(summary, Mapping):
        return None
    code = summary.get("symbol_code")
    if not code:
        return None
    return SymbolSummary(symbol_code=str(code), symbol_confidence=summary.get("symbol_confidence"))


def _warn_on_unexpected_units(units: Optional[Mapping[str, Any]]) -> None:
    """Log a warning if the API reports units other than percentages for the fields we read."""
    if not units:
        return
    for field, expected in EXPECTED_UNITS.items():
        actual = units.get(field)
        if actual and actual != expected and actual not in ALLOWED_UNIT_SYNONYMS.get(field, set()):
            logger.warning(
                "Unexpected locationforecast unit",
                extra={"field": field, "unit": actual, "expected": expected},
            )


def parse_timeseries(document: Any) -> List[TimeseriesEntry]:
    """Turn a raw locationforecast document into ``TimeseriesEntry`` objects.

    Raises ``StructuralError`` when ``properties.timeseries`` is missing, not a
    list, or empty. Missing details inside an entry become None.
    """
    if not isinstance(document, Mapping):
        raise StructuralError("Upstream document is not a JSON object", field="document")
    properties = document.get("properties")
    if not isinstance(properties, Mapping):
        raise StructuralError("Upstream document is missing 'properties'", field="properties")
    if "timeseries" not in properties:
        raise StructuralError("Upstream document is missing 'properties.timeseries'", field="properties.timeseries")
    timeseries = properties["timeseries"]
    if not isinstance(timeseries, list):
        raise StructuralError("'properties.timeseries' is not a list", field="properties.timeseries")
    if not timeseries:
        raise StructuralError("'properties.timeseries' is empty", field="properties.timeseries")

    meta = properties.get("meta")
    if isinstance(meta, Mapping):
        _warn_on_unexpected_units(meta.get("units"))

    out: List[TimeseriesEntry] = []
    for i, raw in enumerate(timeseries):
        if not isinstance(raw, Mapping):
            raise StructuralError(f"timeseries[{i}] is not an object", field=f"timeseries[{i}]")
        data = raw.get("data") if isinstance(raw.get("data"), Mapping) else {}
        instant = data.get("instant") if isinstance(data.get("instant"), Mapping) else {}
        details = instant.get("details") if isinstance(instant.get("details"), Mapping) else {}
        out.append(
            TimeseriesEntry(
                time=_parse_time(raw.get("time"), index=i),
                fog_area_fraction=_as_float(details.get("fog_area_fraction")),
                relative_humidity=_as_float(details.get("relative_humidity")),
                cloud_area_fraction=_as_float(details.get("cloud_area_fraction")),
                next_1_hours=_parse_summary(data.get("next_1_hours")),
                next_6_hours=_parse_summary(data.get("next_6_hours")),
                next_12_hours=_parse_summary(data.get("next_12_hours")),
            )
        )
    return out


def parse_http_date(value: Optional[str]) -> Optional[dt.datetime]:
    """Parse a ``Last-Modified``/``Expires`` header; None when absent or malformed."""
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring malformed HTTP date header", extra={"value": value})
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed.astimezone(dt.timezone.utc)


def format_http_date(value: dt.datetime) -> str:
    """Format an aware datetime as an RFC 7231 HTTP-date."""
    return format_datetime(value.astimezone(dt.timezone.utc), usegmt=True)


def fetch_locationforecast(
    latitude: float,
    longitude: float,
    *,
    if_modified_since: Optional[dt.datetime] = None,
    url: str = MET_NO_COMPLETE_URL,
    user_agent: str = "fogcast/1.0",
    timeout: float = 10.0,
) -> UpstreamResponse:
    """GET the locationforecast document, conditionally when ``if_modified_since`` is given."""
    params = {
        "lat": f"{latitude:.4f}",
        "lon": f"{longitude:.4f}",
    }
    headers: Dict[str, str] = {"User-Agent": user_agent}
    if if_modified_since is not None:
        headers["If-Modified-Since"] = format_http_date(if_modified_since)

    try:
        resp = session.get(url, params=params, headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        logger.warning("Locationforecast request failed", extra={"error": str(exc)})
        raise UpstreamError(f"Request to locationforecast failed: {exc}") from exc

    last_modified = parse_http_date(resp.headers.get("Last-Modified"))
    expires = parse_http_date(resp.headers.get("Expires"))

    if resp.status_code == 304:
        logger.debug("Locationforecast not modified", extra={"expires": expires})
        return UpstreamResponse(document=None, last_modified=last_modified, expires=expires, not_modified=True)

    try:
        resp.raise_for_status()
    except requests.HTTPError as exc:
        logger.warning("Locationforecast returned an error status", extra={"status_code": resp.status_code})
        raise UpstreamError(f"Yr.no API error: {resp.status_code}", status_code=resp.status_code) from exc

    try:
        document = resp.json()
    except ValueError as exc:
        raise StructuralError("Upstream body is not valid JSON", field="document") from exc

    logger.info(
        "Fetched locationforecast",
        extra={"status_code": resp.status_code, "last_modified": last_modified, "expires": expires},
    )
    return UpstreamResponse(document=document, last_modified=last_modified, expires=expires)

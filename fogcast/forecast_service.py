"""Turn a raw locationforecast document into a display-ready fog forecast."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

from fogcast.day_parts import bucket_day_part, is_extended_day
from fogcast.data_sources.met_no_client import TimeseriesEntry, parse_timeseries
from fogcast.domain import (
    Coordinates,
    DayBucket,
    DayPeriod,
    ForecastSnapshot,
    NormalizedHour,
    classify_fog_status,
)
from fogcast.symbols import resolve_symbol
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="forecast_service")

HOURLY_HOURS = 24


def clamp_fog_fraction(value: Optional[float]) -> float:
    """Absent means no fog; anything else is pinned into [0, 100]."""
    if value is None:
        return 0.0
    return min(100.0, max(0.0, value))


def normalize_hour(entry: TimeseriesEntry, hours_ahead: int) -> NormalizedHour:
    """Build the per-hour record for one upstream entry."""
    fog = clamp_fog_fraction(entry.fog_area_fraction)
    return NormalizedHour(
        time=entry.time,
        hours_ahead=hours_ahead,
        fog_area_fraction=fog,
        relative_humidity=entry.relative_humidity,
        cloud_area_fraction=entry.cloud_area_fraction,
        status=classify_fog_status(fog),
        symbol_code=resolve_symbol(entry),
    )


def build_day_buckets(
    entries: List[TimeseriesEntry],
    local_utc_offset_hours: int,
) -> Dict[int, DayBucket]:
    """
    Fill one normalized symbol per (day offset, period) over the whole series.

    The first entry (in series order) with a symbol claims a slot; later entries
    for the same slot are ignored. Days outside 1..8 are skipped.
    """
    if not entries:
        return {}
    reference_start = entries[0].time
    slots: Dict[int, Dict[DayPeriod, str]] = {}
    for entry in entries:
        day_offset, period = bucket_day_part(entry.time, reference_start, local_utc_offset_hours)
        if not is_extended_day(day_offset):
            continue
        day = slots.setdefault(day_offset, {})
        if period in day:
            continue
        symbol = resolve_symbol(entry, normalize=True)
        if symbol is not None:
            day[period] = symbol

    buckets = {
        day_offset: DayBucket(**{period.value: code for period, code in periods.items()})
        for day_offset, periods in sorted(slots.items())
    }
    return {day_offset: bucket for day_offset, bucket in buckets.items() if not bucket.is_empty()}


def build_fog_forecast(
    document: Mapping[str, Any],
    location: str,
    coordinates: Coordinates | Tuple[float, float],
    *,
    hourly_hours: int = HOURLY_HOURS,
    hourly_includes_current: bool = True,
    local_utc_offset_hours: int = -7,
) -> ForecastSnapshot:
    """
    Aggregate a locationforecast document into a ``ForecastSnapshot``.

    The first series entry is the current snapshot and its timestamp is
    ``updated_at``. The hourly list covers the first ``hourly_hours`` entries;
    when ``hourly_includes_current`` is False the current entry is left out and
    numbering starts at 1. Raises ``StructuralError`` for a missing or empty
    series.
    """
    entries = parse_timeseries(document)
    if not isinstance(coordinates, Coordinates):
        lat, lon = coordinates
        coordinates = Coordinates(lat=lat, lon=lon)

    current = normalize_hour(entries[0], hours_ahead=0)

    first_hourly = 0 if hourly_includes_current else 1
    hourly = [
        normalize_hour(entry, hours_ahead=i)
        for i, entry in enumerate(entries[:hourly_hours])
        if i >= first_hourly
    ]

    days = build_day_buckets(entries, local_utc_offset_hours)

    logger.info(
        "Aggregated fog forecast",
        extra={
            "entries": len(entries),
            "hourly_count": len(hourly),
            "day_count": len(days),
            "current_status": current.status.value,
        },
    )

    return ForecastSnapshot(
        location=location,
        coordinates=coordinates,
        updated_at=current.time,
        current=current,
        hourly=hourly,
        days=days,
    )

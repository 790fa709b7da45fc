"""Elapsed-day offsets and morning/afternoon/night buckets at a fixed UTC offset."""
from __future__ import annotations

import datetime as dt
from typing import NamedTuple

from fogcast.domain import DayPeriod

ONE_DAY = dt.timedelta(days=1)
FIRST_EXTENDED_DAY = 1
LAST_EXTENDED_DAY = 8


class DayPartSlot(NamedTuple):
    day_offset: int
    period: DayPeriod


def local_hour(timestamp: dt.datetime, local_utc_offset_hours: int) -> int:
    """Hour of day at the location's fixed offset (no DST lookup)."""
    local_tz = dt.timezone(dt.timedelta(hours=local_utc_offset_hours))
    return timestamp.astimezone(local_tz).hour


def period_for_hour(hour: int) -> DayPeriod:
    if 6 <= hour < 12:
        return DayPeriod.MORNING
    if 12 <= hour < 18:
        return DayPeriod.AFTERNOON
    return DayPeriod.NIGHT


def bucket_day_part(
    timestamp: dt.datetime,
    reference_start: dt.datetime,
    local_utc_offset_hours: int,
) -> DayPartSlot:
    """
    Place ``timestamp`` into (day offset, period).

    The day offset counts whole 24-hour spans elapsed since ``reference_start``
    (floored, so an entry 36h after the reference is day 1), not calendar days.
    The period comes from the local hour at ``local_utc_offset_hours``.
    """
    day_offset = (timestamp - reference_start) // ONE_DAY
    return DayPartSlot(day_offset, period_for_hour(local_hour(timestamp, local_utc_offset_hours)))


def is_extended_day(day_offset: int) -> bool:
    """Day 0 belongs to the hourly forecast; only days 1..8 get day buckets."""
    return FIRST_EXTENDED_DAY <= day_offset <= LAST_EXTENDED_DAY

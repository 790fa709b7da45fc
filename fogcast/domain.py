"""Domain vocabulary and frozen schemas for the fog forecast.

Enums for fog severity and day periods, the classification thresholds, and the
Pydantic models that make up a ``ForecastSnapshot``. Snapshots are built once
by the aggregator and never mutated afterwards; the cache stores their JSON.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _FrozenModel(BaseModel):
    """Base model: no unknown fields, no mutation after construction."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class FogStatus(str, Enum):
    """Fog severity label shown to visitors."""
    CLEAR = "Clear"
    PATCHES_OF_FOG = "Patches of fog"
    LIGHT_FOG = "Light fog"
    MODERATE_FOG = "Moderate fog"
    HEAVY_FOG = "Heavy fog"


class DayPeriod(str, Enum):
    """Coarse part of a day used by the extended forecast."""
    MORNING = "morning"
    AFTERNOON = "afternoon"
    NIGHT = "night"


# Inclusive lower bounds, checked top-down.
FOG_STATUS_THRESHOLDS = (
    (75.0, FogStatus.HEAVY_FOG),
    (50.0, FogStatus.MODERATE_FOG),
    (25.0, FogStatus.LIGHT_FOG),
)


def classify_fog_status(fog_area_fraction: float) -> FogStatus:
    """Map a fog coverage percentage to its severity label.

    Values are not range-checked here; callers clamp first.
    """
    for lower_bound, status in FOG_STATUS_THRESHOLDS:
        if fog_area_fraction >= lower_bound:
            return status
    if fog_area_fraction > 0:
        return FogStatus.PATCHES_OF_FOG
    return FogStatus.CLEAR


class Coordinates(_FrozenModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class NormalizedHour(_FrozenModel):
    """One hour of fog conditions, derived from a single upstream entry."""
    time: datetime
    hours_ahead: int = Field(..., ge=0)
    fog_area_fraction: float = Field(0.0, ge=0, le=100)
    relative_humidity: Optional[float] = None
    cloud_area_fraction: Optional[float] = None
    status: FogStatus
    symbol_code: Optional[str] = None


class DayBucket(_FrozenModel):
    """Representative symbol per period; field order fixes the serialized order."""
    morning: Optional[str] = None
    afternoon: Optional[str] = None
    night: Optional[str] = None

    def is_empty(self) -> bool:
        return self.morning is None and self.afternoon is None and self.night is None


class ForecastSnapshot(_FrozenModel):
    """Display-ready fog forecast for one point."""
    location: str
    coordinates: Coordinates
    updated_at: datetime
    current: NormalizedHour
    hourly: List[NormalizedHour] = Field(default_factory=list, max_length=24)
    days: Dict[int, DayBucket] = Field(default_factory=dict)

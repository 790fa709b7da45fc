"""HTTP API for the fog forecast."""

from typing import Dict

from fastapi import APIRouter, Request

from .cache_manager import get_fog_forecast
from .domain import ForecastSnapshot
from .symbols import format_weather_symbol
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="fogcast/api")

router = APIRouter()


class ForecastResponse(ForecastSnapshot):
    """Snapshot plus display labels for every symbol used in ``days``."""
    symbol_labels: Dict[str, str] = {}


def wants_json(request: Request) -> bool:
    """JSON for /api, for ``Accept: application/json`` and for ``?format=json``."""
    if request.url.path.startswith("/api"):
        return True
    if "application/json" in request.headers.get("accept", ""):
        return True
    return request.query_params.get("format") == "json"


def build_forecast_response(snapshot: ForecastSnapshot) -> ForecastResponse:
    """Attach symbol labels to a snapshot for serialization."""
    labels: Dict[str, str] = {}
    for bucket in snapshot.days.values():
        for code in (bucket.morning, bucket.afternoon, bucket.night):
            if code and code not in labels:
                labels[code] = format_weather_symbol(code)
    return ForecastResponse(**dict(snapshot), symbol_labels=labels)


@router.get("/api", response_model=ForecastResponse, response_model_exclude_none=True)
def get_forecast():
    """Return the current fog forecast as JSON."""
    snapshot = get_fog_forecast()
    logger.debug("Serving forecast", extra={"updated_at": snapshot.updated_at.isoformat()})
    return build_forecast_response(snapshot)


@router.get("/healthz")
def healthz():
    """Liveness check; never touches upstream."""
    return {"status": "ok"}

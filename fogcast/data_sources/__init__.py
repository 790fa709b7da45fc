"""Upstream forecast sources and the locationforecast parser."""

from .base import ForecastDataSource, UpstreamResponse
from .factory import MetNoDataSource, build_data_source
from .file_source import FileForecastDataSource
from .met_no_client import (
    SymbolSummary,
    TimeseriesEntry,
    fetch_locationforecast,
    parse_timeseries,
)

__all__ = [
    "build_data_source",
    "ForecastDataSource",
    "UpstreamResponse",
    "MetNoDataSource",
    "FileForecastDataSource",
    "SymbolSummary",
    "TimeseriesEntry",
    "fetch_locationforecast",
    "parse_timeseries",
]

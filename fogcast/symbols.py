"""Weather-symbol selection and display labels."""
from __future__ import annotations

import re
from typing import Dict, Optional

from fogcast.data_sources.met_no_client import SUMMARY_WINDOWS, TimeseriesEntry

_VARIANT_SUFFIX = re.compile(r"_(day|night|polartwilight)$")
_CAMEL_BOUNDARY = re.compile(r"([A-Z])")

SYMBOL_LABELS: Dict[str, str] = {
    "clearsky": "☀️ Clear sky",
    "fair": "🌤️ Fair",
    "partlycloudy": "⛅ Partly cloudy",
    "cloudy": "☁️ Cloudy",
    "rainshowers": "🌦️ Rain showers",
    "rainshowersandthunder": "⛈️ Rain showers and thunder",
    "sleetshowers": "🌨️ Sleet showers",
    "snowshowers": "🌨️ Snow showers",
    "rain": "🌧️ Rain",
    "heavyrain": "🌧️ Heavy rain",
    "heavyrainandthunder": "⛈️ Heavy rain and thunder",
    "sleet": "🌨️ Sleet",
    "snow": "❄️ Snow",
    "snowandthunder": "⛈️ Snow and thunder",
    "fog": "🌫️ Fog",
    "sleetshowersandthunder": "⛈️ Sleet showers and thunder",
    "snowshowersandthunder": "⛈️ Snow showers and thunder",
    "rainandthunder": "⛈️ Rain and thunder",
    "sleetandthunder": "⛈️ Sleet and thunder",
    "lightrainshowers": "🌦️ Light rain showers",
    "heavyrainshowers": "🌧️ Heavy rain showers",
    "lightsleetshowers": "🌨️ Light sleet showers",
    "heavysleetshowers": "🌨️ Heavy sleet showers",
    "lightsnowshowers": "🌨️ Light snow showers",
    "heavysnowshowers": "🌨️ Heavy snow showers",
    "lightrain": "🌦️ Light rain",
    "lightsleet": "🌨️ Light sleet",
    "heavysleet": "🌨️ Heavy sleet",
    "lightsnow": "❄️ Light snow",
    "heavysnow": "❄️ Heavy snow",
}


def normalize_symbol(symbol_code: str) -> str:
    """Drop the trailing day/night/polartwilight variant: ``clearsky_night`` -> ``clearsky``."""
    return _VARIANT_SUFFIX.sub("", symbol_code)


def resolve_symbol(entry: TimeseriesEntry, *, normalize: bool = False) -> Optional[str]:
    """Return the symbol of the shortest lookahead window present (1h, then 6h, then 12h)."""
    for window in SUMMARY_WINDOWS:
        summary = getattr(entry, window)
        if summary is not None and summary.symbol_code:
            return normalize_symbol(summary.symbol_code) if normalize else summary.symbol_code
    return None


def format_weather_symbol(symbol_code: str) -> str:
    """Human label for a (normalized) symbol code."""
    label = SYMBOL_LABELS.get(symbol_code)
    if label:
        return label
    return _CAMEL_BOUNDARY.sub(r" \1", symbol_code).lower()

"""Forecast cache storage backends."""

from .base import CacheEntry, ForecastStore
from .memory import InMemoryForecastStore
from .redis import RedisForecastStore

__all__ = [
    "CacheEntry",
    "ForecastStore",
    "InMemoryForecastStore",
    "RedisForecastStore",
]

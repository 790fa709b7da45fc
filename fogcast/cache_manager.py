"""Process-wide forecast cache facade over pluggable stores."""
from datetime import timedelta
from functools import partial
from typing import Optional

from fogcast.cache_store import ForecastStore, InMemoryForecastStore, RedisForecastStore
from fogcast.config import Settings, settings
from fogcast.data_sources import ForecastDataSource, build_data_source
from fogcast.domain import Coordinates, ForecastSnapshot
from fogcast.forecast_cache import ForecastCache
from fogcast.forecast_service import build_fog_forecast
from utils.logging_utils import get_tagged_logger, mask_url_credentials

logger = get_tagged_logger(__name__, tag="cache_manager")


def _init_store(cfg: Settings) -> ForecastStore:
    """Pick Redis when configured and reachable, otherwise the in-memory store."""
    if cfg.cache_redis_url:
        import redis

        masked = mask_url_credentials(cfg.cache_redis_url)
        try:
            client = redis.Redis.from_url(cfg.cache_redis_url)
            client.ping()
        except redis.RedisError as exc:
            logger.warning("Falling back to InMemoryForecastStore (Redis unavailable)",
                           extra={"redis_url": masked, "error": str(exc)})
        else:
            logger.info("Using RedisForecastStore", extra={"redis_url": masked})
            return RedisForecastStore(client, retention_seconds=cfg.cache_retention_seconds,
                                      prefix=cfg.cache_redis_prefix)
    return InMemoryForecastStore()


def build_cache(cfg: Settings, store: Optional[ForecastStore] = None) -> ForecastCache:
    """Wire a ForecastCache whose aggregator is bound to the configured location."""
    aggregate = partial(
        build_fog_forecast,
        location=cfg.location_name,
        coordinates=Coordinates(lat=cfg.latitude, lon=cfg.longitude),
        hourly_hours=cfg.hourly_hours,
        hourly_includes_current=cfg.hourly_includes_current,
        local_utc_offset_hours=cfg.local_utc_offset_hours,
    )
    return ForecastCache(
        store if store is not None else _init_store(cfg),
        aggregate,
        default_ttl=timedelta(seconds=cfg.default_ttl_seconds),
        not_modified_ttl=timedelta(seconds=cfg.not_modified_ttl_seconds),
        serve_stale_on_error=cfg.serve_stale_on_error,
    )


_settings: Settings = settings
_cache: ForecastCache = build_cache(settings)
_data_source: ForecastDataSource = build_data_source(settings)


def use_in_memory_cache_for_tests(
    data_source: Optional[ForecastDataSource] = None,
    cfg: Optional[Settings] = None,
) -> ForecastCache:
    """Swap in an isolated in-memory cache (and optionally a fake source) for tests.

    When ``cfg`` is given it also becomes the point ``get_fog_forecast`` requests.
    """
    global _cache, _data_source, _settings
    _settings = cfg or settings
    _cache = build_cache(_settings, store=InMemoryForecastStore())
    if data_source is not None:
        _data_source = data_source
    return _cache


def get_fog_forecast() -> ForecastSnapshot:
    """Return the configured location's forecast, refreshing through the cache."""
    latitude, longitude = _settings.latitude, _settings.longitude

    def fetch(if_modified_since):
        return _data_source.fetch(latitude, longitude, if_modified_since=if_modified_since)

    return _cache.get_or_refresh(_settings.location_key, fetch)


def clear_cache() -> None:
    """Drop every cached forecast (dev/testing)."""
    _cache.store.clear()

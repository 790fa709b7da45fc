"""Service configuration pulled from FOGCAST_* environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")

MET_NO_COMPLETE_URL = "https://api.met.no/weatherapi/locationforecast/2.0/complete"


class Settings(BaseSettings):
    """Environment-driven configuration for the fog forecast service."""
    model_config = SettingsConfigDict(env_prefix="FOGCAST_", extra="ignore")

    location_name: str = "Golden Gate Bridge Vista Point South, San Francisco"
    latitude: float = 37.80734
    longitude: float = -122.47477
    # Fixed civil-time offset of the location; -7 is PDT.
    local_utc_offset_hours: int = -7
    hourly_hours: int = 24
    hourly_includes_current: bool = True

    forecast_source: str = "met_no"  # options: met_no, file
    forecast_file_path: str | None = None
    upstream_url: str = MET_NO_COMPLETE_URL
    user_agent: str = "fogcast/1.0 (https://github.com/gain9999/fogcast)"
    request_timeout_seconds: float = 10.0

    default_ttl_seconds: int = 3600
    not_modified_ttl_seconds: int = 1800
    serve_stale_on_error: bool = False
    cache_redis_url: str | None = None
    cache_redis_prefix: str = "fogcast:"
    cache_retention_seconds: int = 86400

    log_level: str = "INFO"

    @field_validator("upstream_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the upstream URL so query strings attach cleanly."""
        return str(v).rstrip("/")

    @field_validator("local_utc_offset_hours", mode="after")
    @classmethod
    def check_utc_offset(cls, v: int) -> int:
        """Reject offsets no civil time zone uses."""
        if not -12 <= v <= 14:
            raise ValueError(f"local_utc_offset_hours must be within [-12, 14], got {v}")
        return v

    @field_validator("hourly_hours", mode="after")
    @classmethod
    def check_hourly_hours(cls, v: int) -> int:
        """The hourly window holds between 1 and 24 entries."""
        if not 1 <= v <= 24:
            raise ValueError(f"hourly_hours must be within [1, 24], got {v}")
        return v

    @property
    def location_key(self) -> str:
        """Cache key for the configured point."""
        return f"{self.latitude:.4f},{self.longitude:.4f}"


settings = Settings()


if __name__ == "__main__":
    logger.logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")

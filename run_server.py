import os

import uvicorn

from fogcast.config import settings
from utils.logging_utils import get_tagged_logger, mask_url_credentials, setup_logging

logger = get_tagged_logger(__name__, tag="server")


def log_startup_config() -> None:
    """Record which point, upstream and cache backend this process serves."""
    logger.info(
        "FogCast configuration",
        extra={
            "location": settings.location_name,
            "location_key": settings.location_key,
            "forecast_source": settings.forecast_source,
            "upstream_url": mask_url_credentials(settings.upstream_url),
            "cache_redis_url": mask_url_credentials(settings.cache_redis_url) if settings.cache_redis_url else None,
            "serve_stale_on_error": settings.serve_stale_on_error,
        },
    )


if __name__ == "__main__":
    setup_logging(level=settings.log_level, job_name="fogcast")
    log_startup_config()

    uvicorn.run(
        "fogcast.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )

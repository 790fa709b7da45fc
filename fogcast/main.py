"""FastAPI application setup: JSON API, static page and error translation."""

import html
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse, Response
from fastapi.staticfiles import StaticFiles

from .api import build_forecast_response, router as api_router, wants_json
from .cache_manager import get_fog_forecast
from .errors import FogcastError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="fogcast/main")

app = FastAPI(title="FogCast")

_STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.mount("/static", StaticFiles(directory=_STATIC_DIR), name="static")


@app.exception_handler(FogcastError)
async def handle_fogcast_error(request: Request, exc: FogcastError):
    """Upstream and document failures become a 502, as JSON or as the error page."""
    logger.error("Failed to build fog forecast", extra={"kind": exc.kind, "error": exc.message})
    if wants_json(request):
        return JSONResponse(
            status_code=502,
            content={"error": "Failed to fetch fog forecast", **exc.to_dict()},
        )
    return render_error_page(exc.message)


def render_error_page(message: str, status_code: int = 502) -> HTMLResponse:
    """Fill the failure message into static/error.html."""
    template = (_STATIC_DIR / "error.html").read_text(encoding="utf-8")
    body = template.replace("{{ error_message }}", html.escape(message))
    return HTMLResponse(body, status_code=status_code)


@app.get("/")
def serve_index(request: Request):
    """JSON forecast for API clients, otherwise the single-page view.

    The page is only served once a forecast is available, so the /api call it
    makes is answered from the warm cache and failures land on error.html.
    """
    snapshot = get_fog_forecast()
    if wants_json(request):
        return build_forecast_response(snapshot).model_dump(mode="json", exclude_none=True)
    return FileResponse(_STATIC_DIR / "index.html")


def cors_options() -> Response:
    """Bare OPTIONS (no preflight headers) still gets the CORS headers."""
    return Response(status_code=200, headers=CORS_HEADERS)


app.include_router(api_router)

for _path in ("/", "/api", "/healthz"):
    app.add_api_route(_path, cors_options, methods=["OPTIONS"], include_in_schema=False)

"""
FastAPI application factory for the read-only snapshot API.

The API never fetches upstream feeds; it only serves what the last
`hotboard fetch` / `hotboard watch` cycle wrote to the snapshot directory.
"""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hotboard import __version__
from hotboard.api.routes import health, snapshots
from hotboard.config.settings import Settings, get_settings
from hotboard.observability.logging import bind_context, clear_context, get_logger

logger = get_logger(__name__)

OPENAPI_TAGS = [
    {"name": "health", "description": "Snapshot coverage check"},
    {"name": "snapshots", "description": "Configured sources and their latest snapshots"},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info(
        "Snapshot API starting",
        snapshot_dir=str(settings.snapshot_dir),
        sources_file=str(settings.sources_file),
    )
    yield
    logger.info("Snapshot API stopped")


async def _correlate_request(request: Request, call_next):
    """Tag logs and the response with a request id, and log the request."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    bind_context(request_id=request_id)
    started = time.perf_counter()
    try:
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "HTTP request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return response
    finally:
        clear_context()


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception", path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error_type": "internal"},
    )


def _cors_origins(settings: Settings) -> list[str]:
    return [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]


def create_app() -> FastAPI:
    """
    Build the snapshot API.

    Returns:
        FastAPI application with CORS, request logging and both routers
    """
    settings = get_settings()

    app = FastAPI(
        title="Hotboard Snapshot API",
        description="Read-only access to the latest per-source feed snapshots.",
        version=__version__,
        lifespan=lifespan,
        openapi_tags=OPENAPI_TAGS,
    )

    # Snapshots are public dashboard data: GET only, no credentials
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(settings),
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )
    app.middleware("http")(_correlate_request)
    app.add_exception_handler(Exception, _unhandled_error)

    app.include_router(health.router, tags=["health"])
    app.include_router(snapshots.router, tags=["snapshots"])
    return app

"""Main FastAPI application."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from src.api import api_router
from src.config import get_settings
from src.constants import SHUTDOWN_TIMEOUT
from src.services.quiz.registry import game_registry
from src.utils.http_client import close_all_clients
from src.utils.logging import get_logger, setup_logging

settings = get_settings()
setup_logging()
logger = get_logger(__name__)

VERSION = "0.1.0"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "no-referrer"
        # Snapshots are per-player and change on every answer
        response.headers["Cache-Control"] = "no-store"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    logger.info(f"{settings.app_name} starting (env={settings.app_env})")

    yield

    logger.info("Shutting down games...")
    try:
        await asyncio.wait_for(game_registry.close_all(), timeout=SHUTDOWN_TIMEOUT)
    except TimeoutError:
        logger.warning("Games did not stop in time")

    await close_all_clients()
    logger.info("HTTP clients closed")
    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.app_name,
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(SecurityHeadersMiddleware)

if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(api_router)

_app_start_time = datetime.now(UTC)


@app.get("/health", include_in_schema=True, tags=["monitoring"])
async def health_check() -> JSONResponse:
    """Health check endpoint for monitoring and load balancers."""
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "uptime_seconds": (datetime.now(UTC) - _app_start_time).total_seconds(),
        "version": VERSION,
        "checks": {
            "games": {"status": "healthy", "active": len(game_registry)},
        },
    }
    return JSONResponse(content=health_status, status_code=200)

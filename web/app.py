"""FastAPI application for the salon booking engine."""

import asyncio
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from salon_booking import __version__
from salon_booking.core.config.settings import BookingSettings, get_settings
from salon_booking.engine import BookingEngine
from web.api_versioning import setup_versioned_routes
from web.exception_handlers import register_exception_handlers
from web.middleware import CorrelationMiddleware
from web.routes import health_router


def validate_cors_origins(origins_str: str, env: str) -> List[str]:
    """
    Parse comma-separated CORS origins.

    Raises:
        ValueError: If a wildcard is used in production
    """
    origins = [origin.strip() for origin in origins_str.split(",") if origin.strip()]
    if env == "production" and "*" in origins:
        raise ValueError("Wildcard CORS origin ('*') not allowed in production")
    return origins


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Start the booking engine on startup and stop it on shutdown.

    An engine placed on ``app.state.engine`` before startup (tests) is used
    as is; otherwise one is built from settings.
    """
    logger.info("FastAPI application starting up...")
    engine: Optional[BookingEngine] = getattr(app.state, "engine", None)
    if engine is None:
        engine = BookingEngine.from_settings(app.state.settings)
        app.state.engine = engine
    await engine.start()

    yield

    logger.info("FastAPI application shutting down...")
    try:
        await asyncio.wait_for(engine.stop(), timeout=10)
    except asyncio.TimeoutError:
        logger.error("Booking engine stop timed out after 10s")


def create_app(
    engine: Optional[BookingEngine] = None,
    settings: Optional[BookingSettings] = None,
) -> FastAPI:
    """
    Factory function to create FastAPI application instance.

    Args:
        engine: Pre-built engine (built from settings at startup when omitted)
        settings: Settings (defaults to the engine's, then the global singleton)

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or (engine.settings if engine else get_settings())
    is_dev = not settings.is_production()

    app = FastAPI(
        title="Salon Booking API",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if is_dev else None,
        redoc_url="/redoc" if is_dev else None,
        openapi_url="/openapi.json" if is_dev else None,
        description="Slot availability and verified, race-safe appointment booking.",
        openapi_tags=[
            {"name": "availability", "description": "Free slot queries"},
            {"name": "booking", "description": "Drafts, verification codes and promotion"},
            {"name": "health", "description": "Service health"},
        ],
    )
    app.state.settings = settings
    if engine is not None:
        app.state.engine = engine

    register_exception_handlers(app)

    app.add_middleware(CorrelationMiddleware)
    allowed_origins = validate_cors_origins(settings.cors_allowed_origins, settings.env)
    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
            allow_headers=["Accept", "Content-Type", "Authorization", "X-Request-ID"],
            expose_headers=["X-Request-ID"],
            max_age=3600,
        )

    app.include_router(health_router)
    setup_versioned_routes(app)
    return app

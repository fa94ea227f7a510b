"""API versioning support for the booking web API."""

from fastapi import APIRouter, FastAPI


def setup_versioned_routes(app: FastAPI) -> None:
    """
    Mount the engine routers under ``/api/v1``.

    Health checks stay unversioned for orchestrators.

    Args:
        app: FastAPI application instance
    """
    from web.routes import availability_router, booking_router

    api_v1_router = APIRouter(prefix="/api/v1")
    api_v1_router.include_router(availability_router)
    api_v1_router.include_router(booking_router)
    app.include_router(api_v1_router)

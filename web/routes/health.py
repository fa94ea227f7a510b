"""Health check routes for the booking web API."""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request, Response
from loguru import logger

router = APIRouter(tags=["health"])


def get_version() -> str:
    from salon_booking import __version__

    return __version__


@router.get("/health")
async def health_check(request: Request, response: Response) -> Dict[str, Any]:
    """
    Health check endpoint for monitoring and container orchestration.

    Returns 503 when the engine is not started or its durable store is unreachable.
    """
    engine = getattr(request.app.state, "engine", None)
    checks: Dict[str, Any] = {"engine": engine is not None}

    if engine is not None:
        try:
            checks["store"] = await engine.store.health_check()
        except Exception as e:
            logger.error(f"Store health check failed: {e}")
            checks["store"] = False
        checks["ephemeral_store"] = "redis" if engine.backend.is_distributed else "memory"
        checks["notification_channels"] = engine.notifications.enabled_channels

    healthy = checks["engine"] and checks.get("store", False)
    if not healthy:
        response.status_code = 503
    return {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": get_version(),
        "checks": checks,
    }

"""Request correlation ID middleware for tracking requests across logs."""

import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from salon_booking.core.logger import correlation_id_ctx


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Reads or generates ``X-Request-ID`` and exposes it to log records."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token = correlation_id_ctx.set(request_id)
        try:
            response = await call_next(request)
        finally:
            correlation_id_ctx.reset(token)
        response.headers["X-Request-ID"] = request_id
        return response

"""RFC 7807 Problem Details exception handlers for FastAPI."""

from typing import Dict, Type

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException

from salon_booking.core.exceptions import (
    BookingEngineError,
    CodeMismatchError,
    DatabaseError,
    DraftNotFoundError,
    InvalidInputError,
    NotVerifiedError,
    RegistrationExpiredError,
    ResourceClosedError,
    ServiceUnavailableError,
    SlotTakenError,
)

_ERROR_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    409: "Conflict",
    410: "Gone",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    503: "Service Unavailable",
}

_STATUS_BY_ERROR: Dict[Type[BookingEngineError], int] = {
    InvalidInputError: 400,
    ResourceClosedError: 400,
    ServiceUnavailableError: 404,
    DraftNotFoundError: 404,
    SlotTakenError: 409,
    RegistrationExpiredError: 410,
    CodeMismatchError: 422,
    NotVerifiedError: 422,
}


def status_for(error: BookingEngineError) -> int:
    """HTTP status for an engine error; unknown subclasses map to 500."""
    for error_type in type(error).__mro__:
        if error_type in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[error_type]
    return 500


def _problem(status_code: int, request: Request, **fields) -> JSONResponse:
    content = {
        "type": f"urn:salon-booking:error:{fields.pop('slug', status_code)}",
        "title": _ERROR_TITLES.get(status_code, "Error"),
        "status": status_code,
        "instance": request.url.path,
    }
    content.update(fields)
    return JSONResponse(
        status_code=status_code, content=content, media_type="application/problem+json"
    )


async def booking_error_handler(request: Request, exc: BookingEngineError) -> JSONResponse:
    """Convert engine errors to Problem Details carrying the error's ``to_dict()`` fields."""
    status_code = status_for(exc)
    if status_code >= 500 or isinstance(exc, DatabaseError):
        logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.code} on {request.url.path}: {exc.message}")

    body = exc.to_dict()
    if status_code >= 500:
        # Backend failures stay opaque to callers
        body["message"] = "Internal server error"
        body["details"] = {}
    slug = body["code"].lower().replace("_", "-")
    return _problem(status_code, request, slug=slug, detail=body["message"], **body)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Convert FastAPI HTTPException to RFC 7807 Problem Details format."""
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    response = _problem(exc.status_code, request, detail=detail)
    for name, value in (getattr(exc, "headers", None) or {}).items():
        response.headers[name] = value
    return response


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Convert Pydantic validation errors to RFC 7807 format."""
    errors = {}
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        errors[field] = error["msg"]
    return _problem(
        422, request, slug="validation", detail="Request validation failed", errors=errors
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookingEngineError, booking_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

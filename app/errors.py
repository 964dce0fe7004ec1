"""Map service errors onto HTTP responses with a stable error envelope."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.schemas import ErrorResponse
from services.errors import (
    NotFoundError,
    StorageFailureError,
    StorageUnavailableError,
    TelemetryError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    ValidationError.kind: status.HTTP_400_BAD_REQUEST,
    NotFoundError.kind: status.HTTP_404_NOT_FOUND,
    StorageUnavailableError.kind: status.HTTP_503_SERVICE_UNAVAILABLE,
    StorageFailureError.kind: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _error_response(status_code: int, error: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error.model_dump())


async def telemetry_error_handler(_request: Request, exc: TelemetryError) -> JSONResponse:
    status_code = _STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return _error_response(
        status_code,
        ErrorResponse(kind=exc.kind, message=exc.message, retryable=exc.retryable),
    )


async def request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = []
    for error in exc.errors():
        field = str(error["loc"][-1]) if error.get("loc") else "body"
        if error.get("type") in {"missing", "string_too_short"}:
            messages.append(f"{field} is required")
        else:
            messages.append(f"{field}: {error.get('msg')}")
    message = "; ".join(messages) or "Invalid request."
    logger.info("Rejected invalid request", extra={"kind": ValidationError.kind, "reason": message})
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        ErrorResponse(kind=ValidationError.kind, message=message),
    )


async def unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception", extra={"reason": str(exc)})
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(kind="internal_error", message="An unexpected error occurred."),
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TelemetryError, telemetry_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

"""
Error taxonomy for the booking core and its HTTP mapping.

Services raise these; routes stay thin and the handlers registered in
main.py render every one as {"error": message} with its status code.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


class BookingError(Exception):
    """Base class; status_code maps the error onto HTTP."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(BookingError):
    status_code = 400


class AuthError(BookingError):
    """401 for a missing/invalid credential, 403 for an insufficient role."""

    status_code = 401


class NotFound(BookingError):
    status_code = 404


class SlotUnavailable(BookingError):
    status_code = 409


class NoRewardAvailable(BookingError):
    status_code = 409


class AccountExists(BookingError):
    """Signup with an email the identity provider already knows."""

    status_code = 409


class BookingFailed(BookingError):
    status_code = 500


class UpstreamFailure(BookingError):
    """Store or identity-provider call failed or timed out."""

    status_code = 502


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(exc.status_code, exc.message)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", "invalid"))
    return error_response(400, "; ".join(parts) or "Invalid request")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(500, "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookingError, booking_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

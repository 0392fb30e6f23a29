from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .logging import get_logger

logger = get_logger(__name__)


class ServiceError(Exception):
    """Base class for domain errors mapped to HTTP responses.

    Each subclass carries an HTTP ``status_code`` and a stable ``error_code``
    that clients can branch on.
    """

    status_code: int = 400
    error_code: str = "validation_error"

    def __init__(self, message: str, *, detail: Optional[dict] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or {}


class AlreadyExistsError(ServiceError):
    """Duplicate email or username at registration (409)."""
    status_code = 409
    error_code = "conflict"


class UnauthorizedError(ServiceError):
    """No authenticated identity on the request (401)."""
    status_code = 401
    error_code = "unauthorized"


class InvalidCredentialsError(UnauthorizedError):
    """Username/password pair rejected (401)."""
    pass


class InvalidTokenError(UnauthorizedError):
    """Token signature, shape or expiry check failed (401)."""
    error_code = "invalid_token"


class ForbiddenError(ServiceError):
    """Permission or ownership check failed (403)."""
    status_code = 403
    error_code = "forbidden"


class NotFoundError(ServiceError):
    """Requested user or task does not exist (404)."""
    status_code = 404
    error_code = "not_found"


class AssigneeNotFoundError(NotFoundError):
    pass


class InvalidTransitionError(ServiceError):
    """Illegal task status change (400)."""
    status_code = 400
    error_code = "invalid_transition"


def _error_response(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": message, "code": code})


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers that turn domain errors into JSON error bodies."""

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        log_fn = logger.error if exc.status_code >= 500 else logger.warning
        log_fn(
            "service_error",
            path=request.url.path,
            method=request.method,
            status_code=exc.status_code,
            error_code=exc.error_code,
            message=exc.message,
        )
        response = _error_response(exc.status_code, exc.message, exc.error_code)
        if exc.status_code == 401:
            response.headers["WWW-Authenticate"] = "Bearer"
        return response

    @app.exception_handler(Exception)
    async def handle_uncaught(request: Request, exc: Exception):
        logger.exception(
            "unhandled_exception",
            exc_info=exc,
            path=request.url.path,
            method=request.method,
            error_type=type(exc).__name__,
        )
        return _error_response(500, "internal server error", "server_error")


__all__ = [
    "ServiceError",
    "AlreadyExistsError",
    "UnauthorizedError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "ForbiddenError",
    "NotFoundError",
    "AssigneeNotFoundError",
    "InvalidTransitionError",
    "register_exception_handlers",
]

"""Custom exceptions and centralized exception handlers."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class AppException(Exception):
    """Base application exception with structured error response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"
    message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.status_code = status_code or self.status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to RFC 7807 problem+json style response."""
        return {
            "error": self.error_code,
            "message": self.message,
            "status": self.status_code,
            **({"details": self.details} if self.details else {}),
        }


class NotFoundError(AppException):
    """Resource not found."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"
    message = "Resource not found"


class BadRequestError(AppException):
    """Bad request."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "BAD_REQUEST"
    message = "Bad request"


class InvalidDomainError(BadRequestError):
    """Domain code is not one of the known domains."""

    error_code = "INVALID_DOMAIN"
    message = "Unknown domain code"


class ExternalServiceError(AppException):
    """External service error."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "EXTERNAL_SERVICE_ERROR"
    message = "External service temporarily unavailable"


class UpstreamFailureError(ExternalServiceError):
    """Assistant run ended in a non-success state or produced no answer."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "UPSTREAM_FAILURE"
    message = "Assistant run failed"


class UpstreamTimeoutError(ExternalServiceError):
    """Assistant run did not complete within the polling ceiling."""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    error_code = "UPSTREAM_TIMEOUT"
    message = "Assistant run timed out"


class MalformedResponseError(ExternalServiceError):
    """Assistant answer could not be turned into a domain analysis."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "MALFORMED_RESPONSE"
    message = "Assistant returned a malformed response"


class StorageUnavailableError(AppException):
    """Backing store is not configured or not reachable."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "STORAGE_UNAVAILABLE"
    message = "Database not available"


class StorageFailureError(AppException):
    """A configured store raised an error on read or write."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "STORAGE_FAILURE"
    message = "Database operation failed"


def _error_response(request: Request, status_code: int, content: dict[str, Any]) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=content,
        headers={"X-Request-ID": getattr(request.state, "request_id", "unknown")},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers that render every error as {error, message, status, details?}."""
    logger = logging.getLogger("cyclescope.error")

    @app.exception_handler(AppException)
    async def app_exception_handler(
        request: Request, exc: AppException
    ) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning(
                f"{request.method} {request.url.path} failed: {exc.error_code} {exc.message}",
                extra={"error_code": exc.error_code, "path": request.url.path},
            )
        return _error_response(request, exc.status_code, exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error_response(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            {
                "error": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "status": status.HTTP_422_UNPROCESSABLE_ENTITY,
                "details": {"errors": jsonable_encoder(exc.errors())},
            },
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception(
            "Unhandled exception",
            extra={"path": request.url.path, "method": request.method},
        )

        # Internal details only in debug mode
        from .config import settings

        message = str(exc) if settings.debug else "An unexpected error occurred"
        return _error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            {"error": "INTERNAL_ERROR", "message": message, "status": 500},
        )

"""Core infrastructure: settings, logging, exceptions."""

from .config import get_settings, settings
from .exceptions import (
    AppException,
    BadRequestError,
    ExternalServiceError,
    InvalidDomainError,
    MalformedResponseError,
    NotFoundError,
    StorageFailureError,
    StorageUnavailableError,
    UpstreamFailureError,
    UpstreamTimeoutError,
)


__all__ = [
    "AppException",
    "BadRequestError",
    "ExternalServiceError",
    "InvalidDomainError",
    "MalformedResponseError",
    "NotFoundError",
    "StorageFailureError",
    "StorageUnavailableError",
    "UpstreamFailureError",
    "UpstreamTimeoutError",
    "get_settings",
    "settings",
]

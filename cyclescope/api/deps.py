"""API dependencies for service access and path validation."""

from __future__ import annotations

from fastapi import Path, Request

from cyclescope.core.exceptions import ExternalServiceError
from cyclescope.domain.catalog import require_domain
from cyclescope.services.domain_analysis import DomainAnalysisService


def get_service(request: Request) -> DomainAnalysisService:
    """The service built (or injected) at application startup."""
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise ExternalServiceError("Service not initialized")
    return service


def valid_domain_code(
    code: str = Path(..., description="Domain code, e.g. 'macro'"),
) -> str:
    """Lower-cased domain code; unknown codes are rejected with INVALID_DOMAIN."""
    return require_domain(code).code

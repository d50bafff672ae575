"""Pydantic schemas for API requests and responses."""

from cyclescope.schemas.common import ErrorResponse, HealthResponse
from cyclescope.schemas.domains import (
    AnalyzeRequest,
    AnalyzeResponse,
    BatchResultResponse,
    CatalogResponse,
    CleanupResponse,
    DomainAnalysisResponse,
    DomainOutcomeResponse,
    DomainSummaryResponse,
)


__all__ = [
    "AnalyzeRequest",
    "AnalyzeResponse",
    "BatchResultResponse",
    "CatalogResponse",
    "CleanupResponse",
    "DomainAnalysisResponse",
    "DomainOutcomeResponse",
    "DomainSummaryResponse",
    "ErrorResponse",
    "HealthResponse",
]

"""Domain analysis routes.

Trigger assistant analyses (one domain or all six), read back stored
analyses, and run the retention sweep.
"""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Query

from cyclescope.api.deps import get_service, valid_domain_code
from cyclescope.core.logging import get_logger
from cyclescope.domain.catalog import domain_stats, get_all_domain_configs
from cyclescope.schemas.domains import (
    AnalyzeRequest,
    AnalyzeResponse,
    BatchResultResponse,
    CatalogResponse,
    CleanupResponse,
    DomainAnalysisResponse,
    DomainOutcomeResponse,
    DomainSchema,
    DomainSummaryResponse,
)
from cyclescope.services.batch import BatchResult
from cyclescope.services.domain_analysis import DomainAnalysisService


logger = get_logger("api.routes.domains")

router = APIRouter(prefix="/domains", tags=["Domains"])


def _batch_response(result: BatchResult) -> BatchResultResponse:
    return BatchResultResponse(
        as_of_date=result.as_of_date,
        success=result.success,
        total=result.total,
        success_count=result.success_count,
        failure_count=result.failure_count,
        results=[
            DomainOutcomeResponse(
                domain_code=outcome.domain_code,
                success=outcome.success,
                error_message=outcome.error_message,
                record=(
                    DomainSummaryResponse.model_validate(outcome.record)
                    if outcome.record is not None
                    else None
                ),
            )
            for outcome in result.results
        ],
    )


# =============================================================================
# CATALOG
# =============================================================================


@router.get("/catalog", response_model=CatalogResponse)
async def get_catalog():
    """The six domains with their indicators and chart URLs."""
    return CatalogResponse(
        domains=[DomainSchema.model_validate(d) for d in get_all_domain_configs()],
        stats=domain_stats(),
    )


# =============================================================================
# ANALYSIS
# =============================================================================


@router.post("/analyze-all", response_model=BatchResultResponse)
async def analyze_all_domains(
    body: AnalyzeRequest | None = Body(default=None),
    service: DomainAnalysisService = Depends(get_service),
):
    """
    Analyze all six domains sequentially.

    Per-domain failures are reported in the results; the call succeeds when
    at least one domain was analyzed.
    """
    result = await service.analyze_all(body.date if body else None)
    return _batch_response(result)


@router.post("/{code}/analyze", response_model=AnalyzeResponse)
async def analyze_domain(
    code: str = Depends(valid_domain_code),
    body: AnalyzeRequest | None = Body(default=None),
    service: DomainAnalysisService = Depends(get_service),
):
    """Analyze one domain and store the result."""
    result = await service.analyze(code, body.date if body else None)
    return AnalyzeResponse(
        domain_code=result.domain_code,
        as_of_date=result.as_of_date,
        stored=result.record is not None,
        analysis=result.analysis,
        record=(
            DomainAnalysisResponse.model_validate(result.record)
            if result.record is not None
            else None
        ),
    )


# =============================================================================
# STORED ANALYSES
# =============================================================================


@router.get("", response_model=list[DomainSummaryResponse])
async def list_latest_analyses(
    service: DomainAnalysisService = Depends(get_service),
):
    """Latest analysis of each domain, without the full assistant answer."""
    return await service.all_latest()


@router.get("/{code}/latest", response_model=DomainAnalysisResponse)
async def get_latest_analysis(
    code: str = Depends(valid_domain_code),
    service: DomainAnalysisService = Depends(get_service),
):
    """Most recent stored analysis of a domain, or 404."""
    return await service.latest(code)


@router.get("/{code}/history", response_model=list[DomainSummaryResponse])
async def get_analysis_history(
    code: str = Depends(valid_domain_code),
    limit: int = Query(5, ge=1, le=30, description="Number of analyses to return"),
    service: DomainAnalysisService = Depends(get_service),
):
    """Recent analyses of a domain, newest first."""
    return await service.history(code, limit)


# =============================================================================
# MAINTENANCE
# =============================================================================


@router.post("/cleanup", response_model=CleanupResponse)
async def cleanup_old_analyses(
    service: DomainAnalysisService = Depends(get_service),
):
    """Delete analyses older than the retention window."""
    deleted = await service.cleanup()
    logger.info(f"Manual cleanup removed {deleted} analyses")
    return CleanupResponse(deleted=deleted, retention_days=service.retention_days)

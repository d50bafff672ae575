"""Health check endpoints."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends

from cyclescope.api.deps import get_service
from cyclescope.core.config import settings
from cyclescope.core.logging import get_logger
from cyclescope.schemas.common import HealthResponse
from cyclescope.services.domain_analysis import DomainAnalysisService


router = APIRouter(prefix="/health")

logger = get_logger("health")


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Check the health status of the API and its dependencies.",
)
async def health_check(
    service: DomainAnalysisService = Depends(get_service),
) -> HealthResponse:
    """
    Report database connectivity and whether OpenAI is configured.

    The API stays up without either; status is "degraded" in that case.
    """
    db_ok = await service.database_connected()
    openai_ok = service.openai_configured

    return HealthResponse(
        status="healthy" if db_ok and openai_ok else "degraded",
        service=settings.app_name,
        version=settings.app_version,
        timestamp=datetime.now(UTC),
        database="connected" if db_ok else "not connected",
        openai="configured" if openai_ok else "not configured",
    )


@router.get(
    "/live",
    summary="Liveness check",
    description="Check if the API process is alive.",
)
async def liveness_check() -> dict:
    """
    Kubernetes-style liveness probe.

    Simple check that the process is running.
    """
    return {"status": "alive"}

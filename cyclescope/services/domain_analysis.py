"""
Domain analysis service.

Composition root for the API and scheduled jobs: owns the OpenAI client, the
database handle, the orchestrator and the repository, and exposes the
operations the routes and jobs call.

Usage:
    service = DomainAnalysisService.from_settings()
    result = await service.analyze("macro")
    await service.close()
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

from openai import AsyncOpenAI

from cyclescope.core.config import Settings, settings as default_settings
from cyclescope.core.dates import utc_today
from cyclescope.core.exceptions import (
    ExternalServiceError,
    NotFoundError,
    StorageUnavailableError,
)
from cyclescope.core.logging import get_logger
from cyclescope.database.connection import Database, create_database
from cyclescope.database.orm import DomainAnalysis
from cyclescope.domain.catalog import require_domain
from cyclescope.repositories.domain_analyses_orm import (
    DomainAnalysisRepository,
    normalize,
)
from cyclescope.services.batch import BatchCoordinator, BatchResult
from cyclescope.services.openai.assistant import AssistantOrchestrator
from cyclescope.services.openai.client import create_openai_client
from cyclescope.services.openai.config import OpenAISettings, get_settings as get_openai_settings


logger = get_logger("services.domain_analysis")


@dataclass
class AnalyzeResult:
    """One domain analysis and the row it was stored as (None if not stored)."""

    domain_code: str
    as_of_date: date
    analysis: dict[str, Any]
    record: DomainAnalysis | None


class DomainAnalysisService:
    def __init__(
        self,
        orchestrator: AssistantOrchestrator | None,
        repository: DomainAnalysisRepository,
        database: Database | None = None,
        *,
        retention_days: int = 5,
    ):
        self.orchestrator = orchestrator
        self.repository = repository
        self.database = database
        self.retention_days = retention_days

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        openai_settings: OpenAISettings | None = None,
    ) -> "DomainAnalysisService":
        """Build the OpenAI client, engine and session factory from configuration."""
        settings = settings or default_settings
        openai_settings = openai_settings or get_openai_settings()

        orchestrator = None
        client = create_openai_client(openai_settings)
        if client is not None and openai_settings.assistant_id:
            orchestrator = AssistantOrchestrator(
                client, openai_settings.assistant_id, settings=openai_settings
            )
        elif client is not None:
            logger.warning("OPENAI_ASSISTANT_ID not set, analysis disabled")

        database = create_database(settings.database_url, settings)
        repository = DomainAnalysisRepository(
            database.session_factory if database is not None else None
        )
        return cls(
            orchestrator,
            repository,
            database,
            retention_days=settings.retention_days,
        )

    @property
    def openai_configured(self) -> bool:
        return self.orchestrator is not None

    def _require_orchestrator(self) -> AssistantOrchestrator:
        if self.orchestrator is None:
            raise ExternalServiceError("OpenAI not configured")
        return self.orchestrator

    def _require_store(self) -> DomainAnalysisRepository:
        if not self.repository.is_available:
            raise StorageUnavailableError()
        return self.repository

    # -------------------------------------------------------------------------
    # Analysis
    # -------------------------------------------------------------------------

    async def analyze(self, domain_code: str, as_of_date: date | None = None) -> AnalyzeResult:
        """Analyze one domain and store the result. Errors propagate."""
        domain = require_domain(domain_code)
        orchestrator = self._require_orchestrator()
        as_of_date = as_of_date or utc_today()

        analysis = await orchestrator.request_analysis(domain.code, as_of_date)
        record = await self.repository.upsert(normalize(analysis, as_of_date, domain.code))
        return AnalyzeResult(
            domain_code=domain.code,
            as_of_date=as_of_date,
            analysis=analysis,
            record=record,
        )

    async def analyze_all(self, as_of_date: date | None = None) -> BatchResult:
        """Analyze every domain sequentially; per-domain failures are captured."""
        coordinator = BatchCoordinator(self._require_orchestrator(), self.repository)
        return await coordinator.run_all(as_of_date or utc_today())

    # -------------------------------------------------------------------------
    # Reads and maintenance
    # -------------------------------------------------------------------------

    async def latest(self, domain_code: str) -> DomainAnalysis:
        domain = require_domain(domain_code)
        row = await self._require_store().get_latest(domain.code)
        if row is None:
            raise NotFoundError(f"No analysis found for domain '{domain.code}'")
        return row

    async def all_latest(self) -> list[DomainAnalysis]:
        return await self._require_store().get_all_latest()

    async def history(self, domain_code: str, limit: int = 5) -> list[DomainAnalysis]:
        domain = require_domain(domain_code)
        return await self._require_store().get_history(domain.code, limit)

    async def cleanup(self, today: date | None = None) -> int:
        return await self.repository.cleanup(today=today, retention_days=self.retention_days)

    async def database_connected(self) -> bool:
        if self.database is None:
            return False
        return await self.database.healthcheck()

    async def close(self) -> None:
        """Dispose the engine and the OpenAI HTTP client."""
        if self.database is not None:
            await self.database.close()
        if self.orchestrator is not None:
            client: AsyncOpenAI = self.orchestrator.client
            await client.close()

"""
Sequential analysis of every domain for one date.

Each domain is requested, normalized and stored in turn. A failure in one
domain is recorded in its outcome and does not stop the others.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from cyclescope.core.logging import get_logger
from cyclescope.database.orm import DomainAnalysis
from cyclescope.domain.catalog import DOMAIN_CODES
from cyclescope.repositories.domain_analyses_orm import (
    DomainAnalysisRepository,
    normalize,
)
from cyclescope.services.openai.assistant import AssistantOrchestrator


logger = get_logger("services.batch")


@dataclass
class DomainOutcome:
    """Result of analyzing one domain inside a batch."""

    domain_code: str
    success: bool
    error_message: str | None = None
    record: DomainAnalysis | None = None
    analysis: dict[str, Any] | None = None


@dataclass
class BatchResult:
    """Summary of a batch run, results in domain order."""

    as_of_date: date
    results: list[DomainOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failure_count(self) -> int:
        return self.total - self.success_count

    @property
    def success(self) -> bool:
        """True if at least one domain succeeded."""
        return self.success_count > 0


class BatchCoordinator:
    """Runs the orchestrator and repository over a fixed list of domains."""

    def __init__(
        self,
        orchestrator: AssistantOrchestrator,
        repository: DomainAnalysisRepository,
        domain_codes: Sequence[str] = DOMAIN_CODES,
    ):
        self.orchestrator = orchestrator
        self.repository = repository
        self.domain_codes = tuple(domain_codes)

    async def run_one(self, domain_code: str, as_of_date: date) -> DomainOutcome:
        """Analyze and store one domain, capturing any error as a failed outcome."""
        try:
            analysis = await self.orchestrator.request_analysis(domain_code, as_of_date)
            record = await self.repository.upsert(normalize(analysis, as_of_date, domain_code))
        except Exception as e:
            logger.error(f"[{domain_code}] Analysis failed: {e}")
            return DomainOutcome(domain_code=domain_code, success=False, error_message=str(e))

        if record is None:
            logger.warning(f"[{domain_code}] Analysis not stored (database unavailable)")
        else:
            logger.info(f"[{domain_code}] Stored analysis id={record.id}")
        return DomainOutcome(
            domain_code=domain_code, success=True, record=record, analysis=analysis
        )

    async def run_all(self, as_of_date: date) -> BatchResult:
        """Analyze every domain in order. Never raises for per-domain failures."""
        logger.info(
            f"Starting batch analysis of {len(self.domain_codes)} domains "
            f"for {as_of_date.isoformat()}"
        )

        result = BatchResult(as_of_date=as_of_date)
        for code in self.domain_codes:
            result.results.append(await self.run_one(code, as_of_date))

        logger.info(
            f"Batch analysis complete: {result.success_count}/{result.total} succeeded, "
            f"{result.failure_count} failed"
        )
        return result

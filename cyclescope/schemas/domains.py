"""Request and response schemas for the domain analysis routes."""

from __future__ import annotations

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Requests
# =============================================================================


class AnalyzeRequest(BaseModel):
    """Body of the analyze endpoints; the date defaults to today (UTC)."""

    date: dt.date | None = Field(default=None, description="Target date, YYYY-MM-DD")


# =============================================================================
# Catalog
# =============================================================================


class IndicatorSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    symbol: str
    role: str
    long_term_chart_url: str | None = None
    short_term_chart_url: str


class DomainSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    name: str
    description: str
    indicators: list[IndicatorSchema]


class CatalogResponse(BaseModel):
    domains: list[DomainSchema]
    stats: dict[str, Any]


# =============================================================================
# Stored analyses
# =============================================================================


class DomainSummaryResponse(BaseModel):
    """Stored analysis without the full assistant answer."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    date: dt.date
    dimension_code: str
    dimension_name: str
    as_of_date: dt.date
    indicator_count: int | None = None
    integrated_read_bullets: list[str] | None = None
    overall_conclusion_summary: str | None = None
    tone_headline: str | None = None
    tone_bullets: list[str] | None = None
    created_at: dt.datetime
    updated_at: dt.datetime


class DomainAnalysisResponse(DomainSummaryResponse):
    """Stored analysis including the verbatim assistant answer."""

    full_analysis: dict[str, Any]


class AnalyzeResponse(BaseModel):
    domain_code: str
    as_of_date: dt.date
    stored: bool = Field(..., description="False when no database is available")
    analysis: dict[str, Any] = Field(..., description="Recovered assistant answer, verbatim")
    record: DomainAnalysisResponse | None = None


class DomainOutcomeResponse(BaseModel):
    domain_code: str
    success: bool
    error_message: str | None = None
    record: DomainSummaryResponse | None = None


class BatchResultResponse(BaseModel):
    as_of_date: dt.date
    success: bool
    total: int
    success_count: int
    failure_count: int
    results: list[DomainOutcomeResponse]


class CleanupResponse(BaseModel):
    deleted: int
    retention_days: int

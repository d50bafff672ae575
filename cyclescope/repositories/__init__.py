"""Repositories for database access."""

from cyclescope.repositories.domain_analyses_orm import (
    DomainAnalysisRepository,
    NormalizedAnalysis,
    normalize,
)


__all__ = [
    "DomainAnalysisRepository",
    "NormalizedAnalysis",
    "normalize",
]

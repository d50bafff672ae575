"""SQLAlchemy ORM models for CycleScope.

Uses SQLAlchemy 2.0 declarative style. JSON columns are JSONB on PostgreSQL
and plain JSON elsewhere (SQLite in tests and local runs).
"""

from __future__ import annotations

import datetime as dt
from typing import Any

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# Naming convention for constraints and indexes (deterministic names for Alembic)
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all ORM models with naming convention."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# =============================================================================
# DOMAIN ANALYSES
# =============================================================================


class DomainAnalysis(Base):
    """Assistant analysis of one domain for one day.

    One row per (date, dimension_code). The complete assistant answer lives in
    full_analysis; the remaining summary columns are copies of parts of it so
    list views do not have to load the JSON.
    """
    __tablename__ = "domain_analyses"

    id: Mapped[int] = mapped_column(primary_key=True)

    # Identity
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    dimension_code: Mapped[str] = mapped_column(String(20), nullable=False)

    # Metadata
    dimension_name: Mapped[str] = mapped_column(String(100), nullable=False)
    as_of_date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    # Full assistant answer, stored verbatim (5-10 KB per domain)
    full_analysis: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)

    # Summary columns
    indicator_count: Mapped[int | None] = mapped_column(Integer)
    integrated_read_bullets: Mapped[list[str] | None] = mapped_column(JSONType)
    overall_conclusion_summary: Mapped[str | None] = mapped_column(Text)
    tone_headline: Mapped[str | None] = mapped_column(Text)
    tone_bullets: Mapped[list[str] | None] = mapped_column(JSONType)

    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("date", "dimension_code", name="uq_domain_analyses_date_dimension_code"),
        Index("idx_domain_analyses_dimension_code", "dimension_code"),
        Index("idx_domain_analyses_date", "date"),
    )

    def __repr__(self) -> str:
        return f"<DomainAnalysis {self.dimension_code} {self.date}>"

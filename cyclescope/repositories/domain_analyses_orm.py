"""Domain analysis repository using SQLAlchemy ORM.

One row per (date, dimension_code) with the full assistant answer plus the
summary columns used by list views.

Usage:
    from cyclescope.repositories.domain_analyses_orm import (
        DomainAnalysisRepository,
        normalize,
    )

    repo = DomainAnalysisRepository(database.session_factory)
    await repo.upsert(normalize(analysis, date.today(), "macro"))
    latest = await repo.get_latest("macro")

A repository built without a session factory treats the store as
unavailable: writes and reads become logged no-ops.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import asdict, dataclass, field
from datetime import UTC, date, datetime
from typing import Any, TypeVar

from sqlalchemy import and_, delete, func, select, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import DBAPIError, InterfaceError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cyclescope.core.dates import parse_iso_date, retention_cutoff, utc_today
from cyclescope.core.exceptions import StorageFailureError
from cyclescope.core.logging import get_logger
from cyclescope.database.orm import DomainAnalysis
from cyclescope.domain.catalog import DOMAIN_CODES


logger = get_logger("repositories.domain_analyses_orm")

T = TypeVar("T")

DEFAULT_RETENTION_DAYS = 5
IDENTITY_COLUMNS = ("date", "dimension_code")


# =============================================================================
# NORMALIZATION
# =============================================================================


@dataclass
class NormalizedAnalysis:
    """Column values for one domain_analyses row."""

    date: date
    dimension_code: str
    dimension_name: str
    as_of_date: date
    full_analysis: dict[str, Any]
    indicator_count: int = 0
    integrated_read_bullets: list[str] = field(default_factory=list)
    overall_conclusion_summary: str = ""
    tone_headline: str = ""
    tone_bullets: list[str] = field(default_factory=list)

    def to_values(self) -> dict[str, Any]:
        return asdict(self)


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key)
    return value if isinstance(value, dict) else {}


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]


def normalize(
    raw: dict[str, Any],
    target_date: date,
    domain_code: str | None = None,
) -> NormalizedAnalysis:
    """
    Project an assistant answer onto the stored row for `target_date`.

    When `domain_code` is given the row is keyed by it, whatever
    `dimension_code` the answer carries. Never fails: missing sections
    become empty strings and lists.
    """
    indicators = raw.get("indicators")
    integrated = _section(raw, "integrated_dimension_read")
    conclusion = _section(raw, "overall_conclusion")
    tone = _section(raw, "dimension_tone")

    return NormalizedAnalysis(
        date=target_date,
        dimension_code=(domain_code or str(raw.get("dimension_code") or "")).strip().lower(),
        dimension_name=str(raw.get("dimension_name") or ""),
        as_of_date=parse_iso_date(raw.get("as_of_date")) or target_date,
        full_analysis=raw,
        indicator_count=len(indicators) if isinstance(indicators, list) else 0,
        integrated_read_bullets=_string_list(integrated.get("bullets")),
        overall_conclusion_summary=str(conclusion.get("summary") or ""),
        tone_headline=str(tone.get("tone_headline") or ""),
        tone_bullets=_string_list(tone.get("tone_bullets")),
    )


# =============================================================================
# REPOSITORY
# =============================================================================


def _is_unavailable(exc: BaseException) -> bool:
    """Errors that mean the store cannot be reached, as opposed to a bad statement."""
    if isinstance(exc, (OSError, TimeoutError, InterfaceError)):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


def _insert_for(dialect_name: str):
    if dialect_name == "sqlite":
        return sqlite_insert
    return pg_insert


class DomainAnalysisRepository:
    """Persistence for domain analyses over an injected session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None):
        self._session_factory = session_factory

    @property
    def is_available(self) -> bool:
        return self._session_factory is not None

    async def _run(
        self,
        operation: str,
        work: Callable[[AsyncSession], Awaitable[T]],
        default: T,
    ) -> T:
        """Run `work` in a session, mapping store errors onto the error taxonomy."""
        if self._session_factory is None:
            logger.warning(f"Database not available, skipping {operation}")
            return default

        try:
            async with self._session_factory() as session:
                try:
                    return await work(session)
                except Exception:
                    await session.rollback()
                    raise
        except (OSError, TimeoutError, SQLAlchemyError) as e:
            if _is_unavailable(e):
                logger.warning(f"Database unreachable during {operation}: {e}")
                return default
            logger.error(f"Database error during {operation}: {e}")
            raise StorageFailureError(
                f"Database error during {operation}: {e}",
                details={"operation": operation},
            ) from e

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def upsert(self, record: NormalizedAnalysis) -> DomainAnalysis | None:
        """Create or replace the row for (record.date, record.dimension_code).

        The insert-or-update is a single statement, so concurrent writers
        cannot produce two rows for the same key. created_at is only set on
        insert; updated_at is refreshed on every write.

        Returns:
            The stored row, or None when the store is unavailable
        """
        values = record.to_values()

        async def work(session: AsyncSession) -> DomainAnalysis:
            now = datetime.now(UTC)
            insert = _insert_for(session.bind.dialect.name)
            stmt = insert(DomainAnalysis).values(**values, created_at=now, updated_at=now)
            stmt = stmt.on_conflict_do_update(
                index_elements=list(IDENTITY_COLUMNS),
                set_={
                    **{
                        key: stmt.excluded[key]
                        for key in values
                        if key not in IDENTITY_COLUMNS
                    },
                    "updated_at": now,
                },
            ).returning(DomainAnalysis)

            result = await session.execute(
                stmt, execution_options={"populate_existing": True}
            )
            row = result.scalar_one()
            await session.commit()
            logger.info(f"Upserted {record.dimension_code} analysis for {record.date}")
            return row

        return await self._run("upsert", work, None)

    async def cleanup(
        self,
        today: date | None = None,
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ) -> int:
        """Delete analyses dated before today - retention_days.

        Returns:
            Number of deleted rows
        """
        cutoff = retention_cutoff(today or utc_today(), retention_days)

        async def work(session: AsyncSession) -> int:
            result = await session.execute(
                delete(DomainAnalysis).where(DomainAnalysis.date < cutoff)
            )
            await session.commit()
            deleted = result.rowcount or 0
            logger.info(f"Deleted {deleted} domain analyses older than {cutoff}")
            return deleted

        return await self._run("cleanup", work, 0)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_latest(self, dimension_code: str) -> DomainAnalysis | None:
        """Most recent analysis for a domain."""

        async def work(session: AsyncSession) -> DomainAnalysis | None:
            result = await session.execute(
                select(DomainAnalysis)
                .where(DomainAnalysis.dimension_code == dimension_code.lower())
                .order_by(DomainAnalysis.date.desc())
                .limit(1)
            )
            return result.scalar_one_or_none()

        return await self._run("get_latest", work, None)

    async def get_by_date(self, dimension_code: str, on: date) -> DomainAnalysis | None:
        """Analysis for a domain on a specific date."""

        async def work(session: AsyncSession) -> DomainAnalysis | None:
            result = await session.execute(
                select(DomainAnalysis).where(
                    DomainAnalysis.dimension_code == dimension_code.lower(),
                    DomainAnalysis.date == on,
                )
            )
            return result.scalar_one_or_none()

        return await self._run("get_by_date", work, None)

    async def get_all_latest(self) -> list[DomainAnalysis]:
        """Latest analysis of every domain present in the store.

        One grouped query: the max date per dimension_code joined back to the
        table. Rows come back in catalog order.
        """

        async def work(session: AsyncSession) -> list[DomainAnalysis]:
            latest = (
                select(
                    DomainAnalysis.dimension_code.label("dimension_code"),
                    func.max(DomainAnalysis.date).label("max_date"),
                )
                .group_by(DomainAnalysis.dimension_code)
                .subquery()
            )
            result = await session.execute(
                select(DomainAnalysis).join(
                    latest,
                    and_(
                        DomainAnalysis.dimension_code == latest.c.dimension_code,
                        DomainAnalysis.date == latest.c.max_date,
                    ),
                )
            )
            return _in_catalog_order(result.scalars().all())

        return await self._run("get_all_latest", work, [])

    async def get_history(self, dimension_code: str, limit: int = 5) -> list[DomainAnalysis]:
        """Up to `limit` analyses for a domain, most recent first."""

        async def work(session: AsyncSession) -> list[DomainAnalysis]:
            result = await session.execute(
                select(DomainAnalysis)
                .where(DomainAnalysis.dimension_code == dimension_code.lower())
                .order_by(DomainAnalysis.date.desc())
                .limit(limit)
            )
            return list(result.scalars().all())

        return await self._run("get_history", work, [])

    async def healthcheck(self) -> bool:
        """True when a trivial query succeeds."""

        async def work(session: AsyncSession) -> bool:
            await session.execute(text("SELECT 1"))
            return True

        return await self._run("healthcheck", work, False)


def _in_catalog_order(rows: Sequence[DomainAnalysis]) -> list[DomainAnalysis]:
    position = {code: index for index, code in enumerate(DOMAIN_CODES)}
    return sorted(rows, key=lambda row: position.get(row.dimension_code, len(position)))

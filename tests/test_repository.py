"""Tests for the domain analysis repository (SQLite-backed)."""

from datetime import date, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select

from cyclescope.core.exceptions import StorageFailureError
from cyclescope.database.connection import create_database
from cyclescope.database.orm import DomainAnalysis
from cyclescope.repositories.domain_analyses_orm import (
    DomainAnalysisRepository,
    normalize,
)


TODAY = date(2025, 1, 20)


async def _count(database) -> int:
    async with database.session_factory() as session:
        result = await session.execute(select(func.count()).select_from(DomainAnalysis))
        return result.scalar_one()


class TestNormalize:
    """Projection of an assistant answer onto the stored row."""

    def test_full_payload(self, sample_analysis):
        record = normalize(sample_analysis, TODAY)

        assert record.date == TODAY
        assert record.dimension_code == "macro"
        assert record.dimension_name == "Macro"
        assert record.as_of_date == date(2025, 1, 19)
        assert record.indicator_count == 4
        assert record.integrated_read_bullets[0] == "S&P 500: constructive"
        assert record.overall_conclusion_summary == "Macro conditions are supportive."
        assert record.tone_headline == "Constructive"
        assert record.tone_bullets == ["Trend intact", "Momentum fading"]
        assert record.full_analysis is sample_analysis

    def test_missing_sections_default_to_empty(self):
        record = normalize(
            {"dimension_code": "MACRO", "dimension_name": "Macro", "indicators": []},
            TODAY,
        )

        assert record.dimension_code == "macro"
        assert record.indicator_count == 0
        assert record.integrated_read_bullets == []
        assert record.overall_conclusion_summary == ""
        assert record.tone_headline == ""
        assert record.tone_bullets == []

    def test_wrong_types_do_not_fail(self):
        record = normalize(
            {
                "dimension_code": "breadth",
                "indicators": "none",
                "integrated_dimension_read": ["not", "a", "dict"],
                "dimension_tone": {"tone_headline": None, "tone_bullets": "x"},
            },
            TODAY,
        )

        assert record.indicator_count == 0
        assert record.integrated_read_bullets == []
        assert record.tone_headline == ""
        assert record.tone_bullets == []

    @pytest.mark.parametrize("as_of", [None, "", "yesterday", "2025-13-45"])
    def test_invalid_as_of_date_falls_back_to_target(self, sample_analysis, as_of):
        record = normalize({**sample_analysis, "as_of_date": as_of}, TODAY)
        assert record.as_of_date == TODAY

    def test_requested_code_keys_the_row(self, analysis_factory):
        record = normalize(analysis_factory("breadth"), TODAY, "MACRO")

        assert record.dimension_code == "macro"
        assert record.dimension_name == "Breadth"
        assert record.full_analysis["dimension_code"] == "breadth"


class TestUpsert:
    """Create-or-replace on (date, dimension_code)."""

    async def test_insert(self, repository, database, sample_analysis):
        row = await repository.upsert(normalize(sample_analysis, TODAY))

        assert row is not None
        assert row.id is not None
        assert row.dimension_code == "macro"
        assert row.full_analysis == sample_analysis
        assert await _count(database) == 1

    async def test_second_write_replaces_first(
        self, repository, database, analysis_factory
    ):
        first = await repository.upsert(normalize(analysis_factory("macro"), TODAY))
        updated_payload = analysis_factory(
            "macro",
            overall_conclusion={"summary": "Macro conditions have deteriorated."},
            dimension_tone={"tone_headline": "Cautious", "tone_bullets": []},
        )
        second = await repository.upsert(normalize(updated_payload, TODAY))

        assert await _count(database) == 1
        assert second.id == first.id
        assert second.overall_conclusion_summary == "Macro conditions have deteriorated."
        assert second.tone_headline == "Cautious"
        assert second.tone_bullets == []
        assert second.full_analysis == updated_payload
        assert second.created_at == first.created_at
        assert second.updated_at >= first.updated_at

    async def test_same_domain_different_dates(self, repository, database, sample_analysis):
        await repository.upsert(normalize(sample_analysis, TODAY))
        await repository.upsert(normalize(sample_analysis, TODAY - timedelta(days=1)))

        assert await _count(database) == 2

    async def test_unconfigured_store_is_noop(self, sample_analysis):
        repository = DomainAnalysisRepository(None)

        assert not repository.is_available
        assert await repository.upsert(normalize(sample_analysis, TODAY)) is None

    async def test_unreachable_store_is_noop(self, sample_analysis):
        session_factory = MagicMock(side_effect=ConnectionRefusedError("connection refused"))
        repository = DomainAnalysisRepository(session_factory)

        assert await repository.upsert(normalize(sample_analysis, TODAY)) is None

    async def test_statement_error_raises_storage_failure(self, tmp_path, sample_analysis):
        # Schema never created: the insert hits "no such table"
        database = create_database(f"sqlite+aiosqlite:///{tmp_path}/empty.db")
        repository = DomainAnalysisRepository(database.session_factory)
        try:
            with pytest.raises(StorageFailureError) as exc_info:
                await repository.upsert(normalize(sample_analysis, TODAY))
        finally:
            await database.close()

        assert exc_info.value.status_code == 500


class TestReads:
    """Latest, all-latest, history and by-date queries."""

    async def _seed(self, repository, analysis_factory):
        for offset in range(3):
            day = TODAY - timedelta(days=offset)
            for code in ("sentiment", "macro"):
                payload = analysis_factory(code, as_of_date=day.isoformat())
                await repository.upsert(normalize(payload, day))

    async def test_get_latest(self, repository, analysis_factory):
        await self._seed(repository, analysis_factory)

        row = await repository.get_latest("macro")

        assert row.date == TODAY
        assert row.dimension_code == "macro"
        assert (await repository.get_latest("MACRO")).id == row.id

    async def test_get_latest_missing(self, repository):
        assert await repository.get_latest("breadth") is None

    async def test_get_all_latest_one_per_domain_in_catalog_order(
        self, repository, analysis_factory
    ):
        await self._seed(repository, analysis_factory)

        rows = await repository.get_all_latest()

        assert [r.dimension_code for r in rows] == ["macro", "sentiment"]
        assert all(r.date == TODAY for r in rows)

    async def test_get_history_newest_first(self, repository, analysis_factory):
        await self._seed(repository, analysis_factory)

        rows = await repository.get_history("macro", limit=2)

        assert [r.date for r in rows] == [TODAY, TODAY - timedelta(days=1)]

    async def test_get_by_date(self, repository, analysis_factory):
        await self._seed(repository, analysis_factory)

        row = await repository.get_by_date("sentiment", TODAY - timedelta(days=2))

        assert row.as_of_date == TODAY - timedelta(days=2)
        assert await repository.get_by_date("sentiment", TODAY + timedelta(days=1)) is None

    async def test_reads_on_unconfigured_store(self):
        repository = DomainAnalysisRepository(None)

        assert await repository.get_latest("macro") is None
        assert await repository.get_all_latest() == []
        assert await repository.get_history("macro") == []
        assert await repository.healthcheck() is False

    async def test_healthcheck(self, repository):
        assert await repository.healthcheck() is True


class TestCleanup:
    """Retention sweep."""

    async def test_only_rows_older_than_window_deleted(
        self, repository, database, sample_analysis
    ):
        for offset in (0, 4, 5, 6):
            await repository.upsert(normalize(sample_analysis, TODAY - timedelta(days=offset)))

        deleted = await repository.cleanup(today=TODAY)

        assert deleted == 1
        assert await _count(database) == 3
        assert await repository.get_by_date("macro", TODAY - timedelta(days=6)) is None
        assert await repository.get_by_date("macro", TODAY - timedelta(days=5)) is not None

    async def test_idempotent(self, repository, sample_analysis):
        await repository.upsert(normalize(sample_analysis, TODAY - timedelta(days=10)))

        assert await repository.cleanup(today=TODAY) == 1
        assert await repository.cleanup(today=TODAY) == 0

    async def test_custom_retention(self, repository, sample_analysis):
        await repository.upsert(normalize(sample_analysis, TODAY - timedelta(days=2)))

        assert await repository.cleanup(today=TODAY, retention_days=1) == 1

    async def test_unconfigured_store(self):
        assert await DomainAnalysisRepository(None).cleanup(today=TODAY) == 0

"""Tests for the HTTP API."""

import json
from unittest.mock import AsyncMock

import pytest

from cyclescope.domain.catalog import DOMAIN_CODES


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "CycleScope Domain API"
        assert data["database"] == "connected"
        assert data["openai"] == "configured"
        assert "timestamp" in data

    async def test_health_degraded_without_openai(self, client, service):
        service.orchestrator = None

        data = (await client.get("/health")).json()

        assert data["status"] == "degraded"
        assert data["openai"] == "not configured"

    async def test_liveness(self, client):
        response = await client.get("/health/live")
        assert response.json() == {"status": "alive"}

    async def test_request_id_echoed(self, client):
        response = await client.get("/health/live", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"


class TestCatalog:
    async def test_catalog(self, client):
        response = await client.get("/domains/catalog")

        assert response.status_code == 200
        data = response.json()
        assert [d["code"] for d in data["domains"]] == list(DOMAIN_CODES)
        assert data["stats"]["total_indicators"] == 19


class TestDomainCodeValidation:
    @pytest.mark.parametrize(
        "method,path",
        [
            ("get", "/domains/crypto/latest"),
            ("get", "/domains/crypto/history"),
            ("post", "/domains/crypto/analyze"),
        ],
    )
    async def test_unknown_code_rejected(self, client, method, path):
        response = await getattr(client, method)(path)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "INVALID_DOMAIN"
        assert data["status"] == 400
        assert data["details"]["valid_codes"] == list(DOMAIN_CODES)

    @pytest.mark.parametrize("limit", [0, 31, -1])
    async def test_history_limit_bounds(self, client, limit):
        response = await client.get(f"/domains/macro/history?limit={limit}")
        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"

    async def test_latest_not_found(self, client):
        response = await client.get("/domains/macro/latest")

        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"


class TestAnalyze:
    async def test_analyze_and_read_back(self, client, sample_analysis):
        response = await client.post("/domains/MACRO/analyze", json={"date": "2025-01-20"})

        assert response.status_code == 200
        data = response.json()
        assert data["domain_code"] == "macro"
        assert data["as_of_date"] == "2025-01-20"
        assert data["stored"] is True
        assert data["analysis"]["dimension_code"] == "macro"
        assert data["record"]["full_analysis"] == sample_analysis

        latest = (await client.get("/domains/macro/latest")).json()
        assert latest["date"] == "2025-01-20"
        assert latest["indicator_count"] == 4
        assert latest["full_analysis"] == sample_analysis

        history = (await client.get("/domains/macro/history?limit=1")).json()
        assert len(history) == 1
        assert "full_analysis" not in history[0]

    async def test_analyze_loosely_shaped_answer(
        self, client, openai_client, page_factory, analysis_factory
    ):
        """Only the identity keys are checked; other sections are served as given."""
        answer = analysis_factory(
            "macro",
            as_of_date=None,
            overall_conclusion="Macro is supportive.",
            dimension_tone=["Constructive"],
        )
        answer["indicators"][0]["long_term"] = "Uptrend intact."
        openai_client.beta.threads.messages.list.return_value = page_factory(json.dumps(answer))

        response = await client.post("/domains/macro/analyze", json={"date": "2025-01-20"})

        assert response.status_code == 200
        data = response.json()
        assert data["analysis"] == answer
        assert data["record"]["as_of_date"] == "2025-01-20"
        assert data["record"]["overall_conclusion_summary"] == ""
        assert data["record"]["tone_headline"] == ""
        assert data["record"]["full_analysis"] == answer

    async def test_analyze_stores_under_requested_code(
        self, client, openai_client, page_factory, analysis_factory
    ):
        openai_client.beta.threads.messages.list.return_value = page_factory(
            json.dumps(analysis_factory("breadth"))
        )

        response = await client.post("/domains/macro/analyze", json={"date": "2025-01-20"})

        assert response.status_code == 200
        assert response.json()["record"]["dimension_code"] == "macro"
        assert (await client.get("/domains/macro/latest")).status_code == 200
        assert (await client.get("/domains/breadth/latest")).status_code == 404

    async def test_analyze_without_body_uses_today(self, client):
        response = await client.post("/domains/macro/analyze")
        assert response.status_code == 200

    async def test_analyze_upstream_timeout(self, client, openai_client, status_factory):
        openai_client.beta.threads.runs.retrieve.return_value = status_factory("in_progress")

        response = await client.post("/domains/macro/analyze")

        assert response.status_code == 504
        assert response.json()["error"] == "UPSTREAM_TIMEOUT"

    async def test_analyze_without_openai(self, client, service):
        service.orchestrator = None

        response = await client.post("/domains/macro/analyze")

        assert response.status_code == 503
        assert response.json()["message"] == "OpenAI not configured"

    async def test_analyze_all_and_list(self, client, service, analysis_factory):
        service.orchestrator.request_analysis = AsyncMock(
            side_effect=lambda code, as_of_date: analysis_factory(code)
        )

        response = await client.post("/domains/analyze-all", json={"date": "2025-01-20"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["total"] == 6
        assert data["success_count"] == 6
        assert [r["domain_code"] for r in data["results"]] == list(DOMAIN_CODES)

        summaries = (await client.get("/domains")).json()
        assert [s["dimension_code"] for s in summaries] == list(DOMAIN_CODES)
        assert all("full_analysis" not in s for s in summaries)


class TestCleanup:
    async def test_cleanup(self, client):
        response = await client.post("/domains/cleanup")

        assert response.status_code == 200
        assert response.json() == {"deleted": 0, "retention_days": 5}

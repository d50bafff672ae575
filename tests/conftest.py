"""Pytest configuration and fixtures."""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any, AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from cyclescope.api.app import create_api_app
from cyclescope.database.connection import Database, create_database
from cyclescope.domain.catalog import get_domain_config
from cyclescope.repositories.domain_analyses_orm import DomainAnalysisRepository
from cyclescope.services.domain_analysis import DomainAnalysisService
from cyclescope.services.openai.assistant import AssistantOrchestrator
from cyclescope.services.openai.config import OpenAISettings


# =============================================================================
# Sample data
# =============================================================================


def make_analysis(code: str = "macro", as_of_date: str = "2025-01-19", **overrides: Any) -> dict[str, Any]:
    """A complete assistant answer for one domain."""
    domain = get_domain_config(code)
    data: dict[str, Any] = {
        "as_of_date": as_of_date,
        "dimension_name": domain.name,
        "dimension_code": domain.code,
        "indicators": [
            {
                "indicator_id": indicator.id,
                "indicator_name": indicator.name,
                "symbol": indicator.symbol,
                "role": indicator.role,
                "long_term": {
                    "timeframe": "Monthly / 15-yr",
                    "analysis": f"{indicator.name} remains in a secular uptrend.",
                    "takeaway": "Trend intact.",
                },
                "short_term": {
                    "timeframe": "Daily / 6-mo",
                    "analysis": f"{indicator.name} is consolidating near highs.",
                    "takeaway": "Momentum fading.",
                },
            }
            for indicator in domain.indicators
        ],
        "integrated_dimension_read": {
            "bullets": [f"{i.name}: constructive" for i in domain.indicators],
        },
        "overall_conclusion": {"summary": f"{domain.name} conditions are supportive."},
        "dimension_tone": {
            "tone_headline": "Constructive",
            "tone_bullets": ["Trend intact", "Momentum fading"],
        },
    }
    data.update(overrides)
    return data


@pytest.fixture
def analysis_factory():
    return make_analysis


@pytest.fixture
def sample_analysis() -> dict[str, Any]:
    return make_analysis("macro")


# =============================================================================
# Fake OpenAI client
# =============================================================================


def assistant_page(text: str | None, role: str = "assistant") -> SimpleNamespace:
    """A messages.list page with one message holding `text`."""
    content = []
    if text is not None:
        content.append(SimpleNamespace(type="text", text=SimpleNamespace(value=text)))
    return SimpleNamespace(data=[SimpleNamespace(role=role, content=content)])


def run_status(status: str, error: str | None = None) -> SimpleNamespace:
    last_error = SimpleNamespace(code="server_error", message=error) if error else None
    return SimpleNamespace(id="run_1", status=status, last_error=last_error)


def make_openai_client(answer: str | None = None) -> MagicMock:
    """MagicMock shaped like AsyncOpenAI's Assistants surface."""
    client = MagicMock()
    client.beta.threads.create = AsyncMock(return_value=SimpleNamespace(id="thread_1"))
    client.beta.threads.messages.create = AsyncMock(return_value=SimpleNamespace(id="msg_1"))
    client.beta.threads.runs.create = AsyncMock(return_value=SimpleNamespace(id="run_1"))
    client.beta.threads.runs.retrieve = AsyncMock(return_value=run_status("completed"))
    client.beta.threads.messages.list = AsyncMock(
        return_value=assistant_page(answer if answer is not None else json.dumps(make_analysis()))
    )
    client.close = AsyncMock()
    return client


@pytest.fixture
def page_factory():
    return assistant_page


@pytest.fixture
def status_factory():
    return run_status


@pytest.fixture
def openai_settings() -> OpenAISettings:
    return OpenAISettings(
        api_key="sk-test",
        assistant_id="asst_test",
        poll_interval=5.0,
        max_poll_attempts=60,
        max_retries=3,
        retry_delay=0.01,
        retry_max_delay=0.05,
    )


@pytest.fixture
def fake_sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def openai_client() -> MagicMock:
    return make_openai_client()


@pytest.fixture
def orchestrator(openai_client, fake_sleep, openai_settings) -> AssistantOrchestrator:
    return AssistantOrchestrator(
        openai_client,
        "asst_test",
        sleep=fake_sleep,
        settings=openai_settings,
    )


# =============================================================================
# Database
# =============================================================================


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    """File-backed SQLite store with the schema created."""
    db = create_database(f"sqlite+aiosqlite:///{tmp_path}/test.db")
    await db.create_tables()
    yield db
    await db.close()


@pytest.fixture
def repository(database: Database) -> DomainAnalysisRepository:
    return DomainAnalysisRepository(database.session_factory)


# =============================================================================
# API
# =============================================================================


@pytest.fixture
def service(orchestrator, repository, database) -> DomainAnalysisService:
    return DomainAnalysisService(orchestrator, repository, database)


@pytest_asyncio.fixture
async def client(service) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client over the app with an injected service."""
    app = create_api_app(service=service)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

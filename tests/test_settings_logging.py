"""Tests for settings parsing and log formatting."""

import json
import logging

import pytest
from pydantic import ValidationError

from cyclescope.core.config import Settings
from cyclescope.core.logging import SensitiveDataFilter, StructuredFormatter, request_id_var
from cyclescope.database.connection import get_async_database_url


class TestSettings:
    def test_cors_origins_from_comma_list(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")
        assert Settings().cors_origins == ["https://a.example", "https://b.example"]

    def test_defaults(self):
        settings = Settings(database_url="")
        assert not settings.has_database
        assert settings.retention_days == 5
        assert settings.analysis_cron == "0 22 * * 1-5"
        assert not settings.scheduler_enabled

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("postgresql://u:p@db/x", "postgresql+asyncpg://u:p@db/x"),
            ("postgres://u:p@db/x", "postgresql+asyncpg://u:p@db/x"),
            ("sqlite:///./local.db", "sqlite+aiosqlite:///./local.db"),
            ("postgresql+asyncpg://u:p@db/x", "postgresql+asyncpg://u:p@db/x"),
        ],
    )
    def test_async_database_url(self, url, expected):
        assert get_async_database_url(url) == expected


def _record(msg: str, *args, **extra) -> logging.LogRecord:
    record = logging.LogRecord("cyclescope.test", logging.INFO, __file__, 1, msg, args, None)
    record.__dict__.update(extra)
    return record


class TestSensitiveDataFilter:
    def test_openai_key_redacted(self):
        record = _record("Using key %s", "sk-proj-abcdef1234567890")
        SensitiveDataFilter().filter(record)
        assert record.getMessage() == "Using key sk-[REDACTED]"

    def test_database_password_redacted(self):
        record = _record("Connecting to postgresql://app:hunter2@db:5432/cyclescope")
        SensitiveDataFilter().filter(record)
        assert record.getMessage() == "Connecting to postgresql://app:[REDACTED]@db:5432/cyclescope"

    def test_key_value_redacted(self):
        record = _record("config api_key=abc123 retries=3")
        SensitiveDataFilter().filter(record)
        assert record.getMessage() == "config api_key=[REDACTED] retries=3"

    def test_plain_message_untouched(self):
        record = _record("[%s] Analysis complete", "macro")
        assert SensitiveDataFilter().filter(record)
        assert record.getMessage() == "[macro] Analysis complete"


class TestStructuredFormatter:
    def test_extra_fields_and_request_id(self):
        token = request_id_var.set("req-42")
        try:
            output = StructuredFormatter().format(
                _record("GET /health -> 200", status_code=200, path="/health")
            )
        finally:
            request_id_var.reset(token)

        data = json.loads(output)
        assert data["message"] == "GET /health -> 200"
        assert data["request_id"] == "req-42"
        assert data["status_code"] == 200
        assert data["path"] == "/health"
        assert data["level"] == "INFO"

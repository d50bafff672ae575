"""API application factory."""

from __future__ import annotations

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from cyclescope.core.config import settings
from cyclescope.core.exceptions import register_exception_handlers
from cyclescope.core.logging import get_logger, request_id_var
from cyclescope.schemas.common import ErrorResponse
from cyclescope.scheduler import start_scheduler, stop_scheduler
from cyclescope.services.domain_analysis import DomainAnalysisService
from cyclescope.services.openai.client import check_assistant

from .routes import domains, health


logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the service unless one was injected, start the scheduler, clean up on exit."""
    owns_service = app.state.service is None
    if owns_service:
        app.state.service = DomainAnalysisService.from_settings(settings)

    service: DomainAnalysisService = app.state.service

    # SQLite has no migrations step; create the table directly
    if service.database is not None and settings.database_url.startswith("sqlite"):
        await service.database.create_tables()

    if service.orchestrator is None:
        logger.warning("OpenAI not configured, analyze endpoints will return 503")
    elif owns_service:
        ok, error = await check_assistant(
            service.orchestrator.client, service.orchestrator.assistant_id
        )
        if not ok:
            logger.warning(f"Assistant check failed, analyses will likely fail: {error}")

    start_scheduler(app, service, settings)

    yield

    await stop_scheduler(app)
    if owns_service:
        try:
            await service.close()
        except Exception as e:
            logger.warning(f"Resource cleanup failed: {e}")
        app.state.service = None


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add request ID to all requests for tracing."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        request_id_var.set(request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all requests with method, path, status and duration."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.monotonic()

        response = await call_next(request)

        duration = time.monotonic() - start_time

        # Log path only (not query params)
        path = request.url.path

        logger.info(
            f"{request.method} {path} -> {response.status_code} ({duration:.3f}s)",
            extra={
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": int(duration * 1000),
            },
        )

        return response


def create_api_app(service: DomainAnalysisService | None = None) -> FastAPI:
    """Create and configure the API application.

    Args:
        service: Pre-built service (tests). When omitted, the lifespan builds
            one from settings and closes it on shutdown.
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Daily AI analysis of six market domains",
        root_path=settings.root_path,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        responses={
            400: {"model": ErrorResponse, "description": "Bad Request"},
            404: {"model": ErrorResponse, "description": "Not Found"},
            500: {"model": ErrorResponse, "description": "Internal Server Error"},
            502: {"model": ErrorResponse, "description": "Upstream Failure"},
            503: {"model": ErrorResponse, "description": "Service Unavailable"},
            504: {"model": ErrorResponse, "description": "Upstream Timeout"},
        },
    )
    app.state.service = service

    # Middlewares: the last one added is the outermost
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
        max_age=600,
    )

    # Register exception handlers
    register_exception_handlers(app)

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(domains.router)

    return app

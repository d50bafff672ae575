"""Minute-aligned cron scheduler running as an asyncio task.

Each minute (UTC) the configured cron expressions are matched with croniter
and the due jobs run one after another against the shared service.
"""

from __future__ import annotations

import asyncio
import datetime as dt
from typing import TYPE_CHECKING

from croniter import CroniterBadCronError, croniter

from cyclescope.core.config import Settings, settings as default_settings
from cyclescope.core.logging import get_logger
from cyclescope.jobs import get_job


if TYPE_CHECKING:
    from fastapi import FastAPI

    from cyclescope.services.domain_analysis import DomainAnalysisService

logger = get_logger("scheduler")


def job_schedule(settings: Settings | None = None) -> dict[str, str]:
    """Job name -> cron expression."""
    settings = settings or default_settings
    return {
        "domain_analysis_daily": settings.analysis_cron,
        "domain_cleanup_daily": settings.cleanup_cron,
    }


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


async def _sleep_until_next_minute() -> None:
    now = _utcnow()
    nxt = (now + dt.timedelta(minutes=1)).replace(second=0, microsecond=0)
    await asyncio.sleep(max(0.0, (nxt - _utcnow()).total_seconds()))


def is_due(cron_expr: str, now: dt.datetime) -> bool:
    try:
        return croniter.match(cron_expr, now)
    except CroniterBadCronError:
        logger.error(f"Invalid cron expression: {cron_expr}")
        return False


async def run_due_jobs(
    service: "DomainAnalysisService",
    now: dt.datetime,
    schedule: dict[str, str],
) -> list[str]:
    """Run every job whose cron matches `now`. Returns the names that ran."""
    ran: list[str] = []
    for name, cron_expr in schedule.items():
        if not is_due(cron_expr, now):
            continue
        job = get_job(name)
        if job is None:
            logger.error(f"Scheduled job {name} is not registered")
            continue
        try:
            message = await job(service)
            logger.info(f"Ran job {name}: {message}")
        except Exception:
            logger.exception(f"Job {name} failed")
        ran.append(name)
    return ran


async def scheduler_loop(service: "DomainAnalysisService", schedule: dict[str, str]) -> None:
    # Align to minute boundary, then check every minute (UTC).
    await _sleep_until_next_minute()
    while True:
        now = _utcnow().replace(second=0, microsecond=0)
        await run_due_jobs(service, now, schedule)
        await _sleep_until_next_minute()


def start_scheduler(
    app: "FastAPI",
    service: "DomainAnalysisService",
    settings: Settings | None = None,
) -> asyncio.Task | None:
    settings = settings or default_settings
    if not settings.scheduler_enabled:
        logger.info("Scheduler disabled via SCHEDULER_ENABLED")
        return None

    schedule = job_schedule(settings)
    task = asyncio.create_task(scheduler_loop(service, schedule), name="scheduler")
    app.state.scheduler_task = task
    logger.info(f"Scheduler started: {schedule}")
    return task


async def stop_scheduler(app: "FastAPI") -> None:
    task: asyncio.Task | None = getattr(app.state, "scheduler_task", None)
    if task is None:
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    app.state.scheduler_task = None
    logger.info("Scheduler stopped")

"""Built-in job definitions for scheduled tasks.

Jobs:
- domain_analysis_daily: Analyze all six domains for today (Mon-Fri 10 PM UTC)
- domain_cleanup_daily: Remove analyses past the retention window (00:30 UTC)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cyclescope.core.dates import utc_today
from cyclescope.core.logging import get_logger

from .registry import register_job


if TYPE_CHECKING:
    from cyclescope.services.domain_analysis import DomainAnalysisService

logger = get_logger("jobs.definitions")


# =============================================================================
# DOMAIN ANALYSIS - all domains, after US market close
# =============================================================================


@register_job("domain_analysis_daily")
async def domain_analysis_daily_job(service: "DomainAnalysisService") -> str:
    """
    Run the batch analysis of every domain for today.

    Schedule: Mon-Fri 10 PM UTC
    """
    logger.info("Starting domain_analysis_daily job")

    try:
        result = await service.analyze_all(utc_today())
        failed = [r.domain_code for r in result.results if not r.success]
        message = f"Analyzed {result.success_count}/{result.total} domains"
        if failed:
            message += f" (failed: {', '.join(failed)})"
        logger.info(f"domain_analysis_daily: {message}")
        return message

    except Exception as e:
        logger.error(f"domain_analysis_daily failed: {e}")
        raise


# =============================================================================
# CLEANUP - retention sweep
# =============================================================================


@register_job("domain_cleanup_daily")
async def domain_cleanup_daily_job(service: "DomainAnalysisService") -> str:
    """
    Delete analyses older than the retention window.

    Schedule: Daily 00:30 UTC
    """
    logger.info("Starting domain_cleanup_daily job")

    try:
        deleted = await service.cleanup()
        message = f"Deleted {deleted} old domain analyses"
        logger.info(f"domain_cleanup_daily: {message}")
        return message

    except Exception as e:
        logger.error(f"domain_cleanup_daily failed: {e}")
        raise

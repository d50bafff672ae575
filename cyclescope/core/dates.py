"""Calendar date helpers shared by the API, jobs and repositories."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta


def utc_today() -> date:
    """Current calendar date in UTC."""
    return datetime.now(UTC).date()


def retention_cutoff(today: date | None = None, days: int = 5) -> date:
    """First date that survives a retention sweep of `days` days."""
    return (today or utc_today()) - timedelta(days=days)


def parse_iso_date(value: object) -> date | None:
    """Parse a YYYY-MM-DD string, returning None for anything else."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None

"""Scheduled jobs."""

from .registry import get_all_jobs, get_job, list_job_names, register_job

# Import definitions so the built-in jobs register themselves
from . import definitions  # noqa: F401


__all__ = [
    "get_all_jobs",
    "get_job",
    "list_job_names",
    "register_job",
]

"""Logging for hdr-sucks: text or JSON output with job/stage context."""

from hdrsucks.logging.config import configure_logging
from hdrsucks.logging.context import (
    JobContextFilter,
    get_job_context,
    job_context,
    stage_context,
)
from hdrsucks.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "JobContextFilter",
    "configure_logging",
    "get_job_context",
    "job_context",
    "stage_context",
]

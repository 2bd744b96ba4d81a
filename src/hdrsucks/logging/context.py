"""Job and stage context for log records.

The orchestrator sets the job id once and the stage name around each
stage; JobContextFilter copies both onto every record so progress-free
log lines still say where they came from.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_job_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "job_id", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


def get_job_context() -> tuple[str | None, str | None]:
    """Get the current (job_id, stage); either may be None."""
    return _job_id.get(), _stage.get()


@contextmanager
def job_context(job_id: str) -> Generator[None, None, None]:
    """Tag log records emitted inside the block with a job id."""
    token = _job_id.set(job_id)
    try:
        yield
    finally:
        _job_id.reset(token)


@contextmanager
def stage_context(stage: str) -> Generator[None, None, None]:
    """Tag log records emitted inside the block with a stage name.

    Example:
        with job_context("a1b2c3"), stage_context("remux"):
            logger.info("Merging source and temp to output")
    """
    token = _stage.set(stage)
    try:
        yield
    finally:
        _stage.reset(token)


class JobContextFilter(logging.Filter):
    """Logging filter that adds job_id, stage and a compact job_tag.

    job_tag renders as ``[a1b2c3:remux] ``, ``[a1b2c3] `` or an empty
    string, for use in text formats.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        job_id, stage = get_job_context()
        record.job_id = job_id
        record.stage = stage
        if job_id and stage:
            record.job_tag = f"[{job_id}:{stage}] "
        elif job_id:
            record.job_tag = f"[{job_id}] "
        else:
            record.job_tag = ""
        return True

"""Admission checks shared by the enqueue and schedule paths.

``check`` looks at a job once and reports the first problem it finds, or the
first field that still needs a default. ``admit`` fills defaults one at a time
and re-runs ``check`` from the top, so every rule is applied to the job in its
final form and in the same order no matter which fields were missing.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Union

from . import config
from .jid import generate_jid
from .job import Job
from .result import Error, Ok

logger = logging.getLogger(__name__)


class Rejection(str, Enum):
    MISSING_QUEUE = "missing_queue"
    MISSING_MODULE = "missing_module"
    MISSING_ARGS = "missing_args"
    INVALID_MAX_RETRY_COUNT = "invalid_max_retry_count"


@dataclass(frozen=True)
class JobRejected:
    kind: Rejection
    job: Job


@dataclass(frozen=True)
class NeedsDefault:
    field: str


COMPLETE = object()

# max_retry_count, then jid
MAX_DEFAULT_PASSES = 2


def check(job: Job) -> Union[object, JobRejected, NeedsDefault]:
    if not job.queue:
        return JobRejected(Rejection.MISSING_QUEUE, job)
    if not job.class_:
        return JobRejected(Rejection.MISSING_MODULE, job)
    if not isinstance(job.args, (list, tuple)):
        return JobRejected(Rejection.MISSING_ARGS, job)
    if job.max_retry_count is None:
        return NeedsDefault("max_retry_count")
    count = job.max_retry_count
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        return JobRejected(Rejection.INVALID_MAX_RETRY_COUNT, job)
    if not job.jid:
        return NeedsDefault("jid")
    return COMPLETE


def _default_for(field: str):
    if field == "max_retry_count":
        return config.DEFAULT_MAX_RETRY_COUNT
    return generate_jid()


def admit(job: Job) -> Union[Ok, Error]:
    """Validate ``job`` and fill its defaults.

    Returns ``Ok(job)`` with a completed copy, or ``Error(JobRejected)``.
    The caller's job is never modified.
    """
    if isinstance(job.args, tuple):
        job = job.model_copy(update={"args": list(job.args)})

    for _ in range(MAX_DEFAULT_PASSES + 1):
        outcome = check(job)
        if outcome is COMPLETE:
            return Ok(job)
        if isinstance(outcome, JobRejected):
            logger.info("rejected job for queue %r: %s", job.queue, outcome.kind.value)
            return Error(outcome)
        job = job.model_copy(update={outcome.field: _default_for(outcome.field)})

    raise RuntimeError(f"job still incomplete after {MAX_DEFAULT_PASSES} default passes")

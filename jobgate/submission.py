"""Submit jobs for immediate or delayed execution.

Both entry points return ``Ok(jid)`` or ``Error(reason)``. ``reason`` is a
``JobRejected`` when validation fails, the ``ValueError`` from ``encode`` when
the job cannot be serialized, or the exception raised by the Redis client,
unchanged, when the write fails. Nothing is written on any error path
and every successful call issues exactly one store command.

``redis_client`` defaults to the process-wide client from
``redis_helper.get_redis()``.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Optional, Union

from redis.exceptions import RedisError

from . import metrics, redis_helper
from .job import Job, encode
from .result import Error, Ok
from .validation import JobRejected, admit

logger = logging.getLogger(__name__)


def to_unix(when: datetime) -> float:
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when.timestamp()


def is_due(perform_at: datetime, now: Optional[float] = None) -> bool:
    """A job scheduled for now or earlier is due."""
    if now is None:
        now = time.time()
    return to_unix(perform_at) <= now


def _record_rejection(result: Error):
    if isinstance(result.reason, JobRejected):
        metrics.jobs_rejected_total.labels(reason=result.reason.kind.value).inc()


def _encode(job: Job) -> Union[Ok, Error]:
    try:
        return Ok(encode(job))
    except ValueError as exc:
        logger.warning("job %s on %r cannot be encoded: %s", job.jid, job.queue, exc)
        return Error(exc)


async def enqueue(job: Job, redis_client=None) -> Union[Ok, Error]:
    admitted = admit(job)
    if not admitted.ok:
        _record_rejection(admitted)
        return admitted
    job = admitted.value
    if redis_client is None:
        redis_client = await redis_helper.get_redis()

    job = job.model_copy(update={"enqueued_at": int(time.time())})
    encoded = _encode(job)
    if not encoded.ok:
        return encoded
    payload = encoded.value
    start = time.time()
    try:
        await redis_client.lpush(redis_helper.queue_key(job.queue), payload)
    except RedisError as exc:
        logger.warning("enqueue of job %s to %r failed: %s", job.jid, job.queue, exc)
        metrics.store_errors_total.inc()
        return Error(exc)
    finally:
        metrics.enqueue_latency_seconds.observe(time.time() - start)

    logger.debug("enqueued job %s on %r", job.jid, job.queue)
    metrics.jobs_submitted_total.inc()
    metrics.jobs_enqueued_total.inc()
    return Ok(job.jid)


async def schedule(
    job: Job, perform_at: datetime, redis_client=None, now: Optional[float] = None
) -> Union[Ok, Error]:
    """Schedule `job` for `perform_at`, or enqueue it if that moment has passed.

    `now` pins the due check to a timestamp the caller already used.
    """
    admitted = admit(job)
    if not admitted.ok:
        _record_rejection(admitted)
        return admitted
    job = admitted.value

    if is_due(perform_at, now):
        # past time to do the job
        return await enqueue(job, redis_client)

    if redis_client is None:
        redis_client = await redis_helper.get_redis()
    score = int(to_unix(perform_at))
    encoded = _encode(job)
    if not encoded.ok:
        return encoded
    payload = encoded.value
    start = time.time()
    try:
        await redis_client.zadd(redis_helper.SCHEDULE_KEY, {payload: score})
    except RedisError as exc:
        logger.warning("schedule of job %s at %s failed: %s", job.jid, score, exc)
        metrics.store_errors_total.inc()
        return Error(exc)
    finally:
        metrics.enqueue_latency_seconds.observe(time.time() - start)

    logger.debug("scheduled job %s on %r for %s", job.jid, job.queue, score)
    metrics.jobs_submitted_total.inc()
    metrics.jobs_scheduled_total.inc()
    return Ok(job.jid)


submit_now = enqueue
submit_later = schedule

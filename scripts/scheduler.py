#!/usr/bin/env python3
"""Sweeper that periodically moves due jobs from the `schedule` sorted set into their work lists.

Usage:
  python scripts/scheduler.py

Environment variables:
- REDIS_URL (optional)
- TESTING=1 to use in-memory redis
- POLL_SECONDS (optional, default 0.5)
"""
import asyncio
import logging
import os
import time

from pydantic import ValidationError
from redis.exceptions import RedisError

from jobgate import metrics
from jobgate.job import decode, encode
from jobgate.redis_helper import DEAD_KEY, SCHEDULE_KEY, due_jobs, get_redis, queue_key

logger = logging.getLogger(__name__)

POLL_SECONDS = float(os.getenv("POLL_SECONDS", "0.5"))


async def promote_due(redis_client, now=None) -> int:
    """Move every job due at `now` into its queue, stamping `enqueued_at`.

    Each entry is pushed before it is removed from the schedule, so a failed
    push leaves it in place for the next sweep. A RedisError stops the sweep
    and propagates. Two sweepers racing over the same entry may both push it.
    """
    if now is None:
        now = time.time()
    promoted = 0
    for payload in await due_jobs(redis_client, now):
        try:
            job = decode(payload).model_copy(update={"enqueued_at": int(time.time())})
            promoted_payload = encode(job)
        except (ValueError, ValidationError) as exc:
            logger.error("moving undecodable schedule entry to %r: %s", DEAD_KEY, exc)
            await redis_client.zadd(DEAD_KEY, {payload: now})
            await redis_client.zrem(SCHEDULE_KEY, payload)
            continue
        await redis_client.lpush(queue_key(job.queue), promoted_payload)
        await redis_client.zrem(SCHEDULE_KEY, payload)
        metrics.jobs_promoted_total.inc()
        logger.info("promoted job %s to %r", job.jid, job.queue)
        promoted += 1
    return promoted


async def run_scheduler():
    redis_client = await get_redis()
    logger.info("scheduler: connected")
    try:
        while True:
            try:
                await promote_due(redis_client)
            except RedisError as exc:
                logger.warning("scheduler: sweep failed, retrying in %ss: %s", POLL_SECONDS, exc)
            await asyncio.sleep(POLL_SECONDS)
    except asyncio.CancelledError:
        pass


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        asyncio.run(run_scheduler())
    except KeyboardInterrupt:
        logger.info("scheduler: exiting")

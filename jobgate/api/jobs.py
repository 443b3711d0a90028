import time

from fastapi import APIRouter, Depends, HTTPException

from ..schemas import JobSubmission, JobResponse, QueueResponse, ScheduleResponse
from ..job import Job
from ..validation import JobRejected
from .. import redis_helper
from .. import submission
from ..auth import require_api_key

router = APIRouter()


@router.post("/jobs", response_model=JobResponse)
async def create_job(body: JobSubmission, authorized: bool = Depends(require_api_key)):
    redis_client = await redis_helper.get_redis()
    job = Job(
        queue=body.queue,
        class_=body.class_,
        args=body.args,
        jid=body.jid,
        max_retry_count=body.max_retry_count,
    )
    if body.perform_at is None:
        status = "enqueued"
        result = await submission.enqueue(job, redis_client)
    else:
        now = time.time()
        status = "enqueued" if submission.is_due(body.perform_at, now) else "scheduled"
        result = await submission.schedule(job, body.perform_at, redis_client, now=now)

    if not result.ok:
        if isinstance(result.reason, JobRejected):
            raise HTTPException(status_code=422, detail={"error": result.reason.kind.value})
        raise HTTPException(status_code=500, detail=str(result.reason))
    return JobResponse(jid=result.value, status=status)


@router.get("/queues/{queue}", response_model=QueueResponse)
async def queue_size(queue: str):
    redis_client = await redis_helper.get_redis()
    size = await redis_client.llen(redis_helper.queue_key(queue))
    return QueueResponse(queue=queue, size=size)


@router.get("/schedule", response_model=ScheduleResponse)
async def schedule_size():
    redis_client = await redis_helper.get_redis()
    size = await redis_client.zcard(redis_helper.SCHEDULE_KEY)
    return ScheduleResponse(size=size)

import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Job(BaseModel):
    """A unit of work in the Sidekiq wire layout.

    Fields are deliberately loose so that a half-built or malformed job can
    still be constructed and handed to the validation chain, which is the
    only place that decides whether it is acceptable.
    """

    model_config = ConfigDict(populate_by_name=True)

    queue: Optional[str] = None
    class_: Optional[str] = Field(default=None, alias="class")
    args: Any = None
    jid: Optional[str] = None
    max_retry_count: Any = None
    retry_count: int = 0
    enqueued_at: Optional[int] = None
    failed_at: Optional[int] = None
    retried_at: Optional[int] = None
    error_message: Optional[str] = None


def _is_encodable(job: Job) -> bool:
    return (
        bool(job.queue)
        and bool(job.class_)
        and isinstance(job.args, list)
        and isinstance(job.max_retry_count, int)
        and not isinstance(job.max_retry_count, bool)
        and bool(job.jid)
    )


def encode(job: Job) -> str:
    if not _is_encodable(job):
        raise ValueError(f"cannot encode incomplete job: {job!r}")
    # sort_keys keeps re-encoding of a decoded payload byte-identical
    try:
        return json.dumps(job.model_dump(by_alias=True), sort_keys=True, separators=(",", ":"))
    except TypeError as exc:
        raise ValueError(f"cannot encode job {job.jid}: {exc}") from exc


def decode(payload: str) -> Job:
    return Job.model_validate(json.loads(payload))

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class JobSubmission(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    queue: Optional[str] = None
    class_: Optional[str] = Field(default=None, alias="class")
    args: Any = None
    jid: Optional[str] = None
    max_retry_count: Any = None
    perform_at: Optional[datetime] = None  # if set, job will be scheduled


class JobResponse(BaseModel):
    jid: str
    status: str


class QueueResponse(BaseModel):
    queue: str
    size: int


class ScheduleResponse(BaseModel):
    size: int

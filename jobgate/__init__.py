from .job import Job, decode, encode
from .result import Error, Ok
from .submission import enqueue, is_due, schedule, submit_later, submit_now
from .validation import JobRejected, Rejection

__all__ = [
    "Job",
    "encode",
    "decode",
    "Ok",
    "Error",
    "JobRejected",
    "Rejection",
    "enqueue",
    "schedule",
    "submit_now",
    "submit_later",
    "is_due",
]

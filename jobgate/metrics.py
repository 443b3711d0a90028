from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, Counter, Histogram, generate_latest
from starlette.requests import Request
from starlette.responses import Response

# Keep metrics module-level singletons
jobs_submitted_total = Counter("jobs_submitted_total", "Total jobs accepted for submission")
jobs_enqueued_total = Counter("jobs_enqueued_total", "Jobs pushed onto a work list")
jobs_scheduled_total = Counter("jobs_scheduled_total", "Jobs stored in the schedule for later")
jobs_rejected_total = Counter("jobs_rejected_total", "Jobs refused by validation", ["reason"])
store_errors_total = Counter("store_errors_total", "Store failures while persisting a job")
jobs_promoted_total = Counter("jobs_promoted_total", "Scheduled jobs moved into their work list")
enqueue_latency_seconds = Histogram("enqueue_latency_seconds", "Time to persist a job")
request_latency_seconds = Histogram(
    "request_latency_seconds", "HTTP request latency seconds", ["method", "route"]
)


def route_label(request: Request) -> str:
    """The matched route template, so `/queues/{queue}` is one series rather than one per queue."""
    route = request.scope.get("route")
    return getattr(route, "path", "unmatched")


def metrics_response(registry=REGISTRY) -> Response:
    return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from redis.exceptions import RedisError

from .api import jobs as jobs_api
from . import redis_helper
from .metrics import metrics_response, request_latency_seconds, route_label


@asynccontextmanager
async def lifespan(app: FastAPI):
    await redis_helper.init_redis()
    try:
        yield
    finally:
        await redis_helper.close_redis()


app = FastAPI(title="jobgate", lifespan=lifespan)

app.include_router(jobs_api.router)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start = time.time()
    try:
        return await call_next(request)
    finally:
        # the router has filled in scope["route"] by now
        request_latency_seconds.labels(method=request.method, route=route_label(request)).observe(
            time.time() - start
        )


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


@app.get("/readyz")
async def readyz():
    redis_client = await redis_helper.get_redis()
    try:
        await redis_client.ping()
    except RedisError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return {"ready": True}


@app.get("/metrics")
async def metrics():
    return metrics_response()

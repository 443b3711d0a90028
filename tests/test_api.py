from datetime import datetime, timedelta, timezone

import pytest

from jobgate import redis_helper
from jobgate.job import decode

HEADERS = {"X-API-Key": "dev-key"}


@pytest.mark.asyncio
async def test_submit_and_metrics(client, redis_client):
    res = await client.post(
        "/jobs", json={"queue": "mailers", "class": "SendEmail", "args": ["a@b.com"]}, headers=HEADERS
    )
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "enqueued"

    [payload] = await redis_client.lrange("queue:mailers", 0, -1)
    assert decode(payload).jid == body["jid"]

    res2 = await client.get("/queues/mailers")
    assert res2.json() == {"queue": "mailers", "size": 1}

    resm = await client.get("/metrics")
    assert resm.status_code == 200
    assert "jobs_submitted_total" in resm.text
    assert "jobs_enqueued_total" in resm.text


@pytest.mark.asyncio
async def test_submit_scheduled(client, redis_client):
    perform_at = datetime.now(timezone.utc) + timedelta(hours=1)
    res = await client.post(
        "/jobs",
        json={"queue": "reports", "class": "Build", "args": [], "perform_at": perform_at.isoformat()},
        headers=HEADERS,
    )
    assert res.status_code == 200
    assert res.json()["status"] == "scheduled"
    assert (await client.get("/schedule")).json() == {"size": 1}
    assert (await client.get("/queues/reports")).json()["size"] == 0


@pytest.mark.asyncio
async def test_submit_past_perform_at_is_enqueued(client, redis_client):
    perform_at = datetime.now(timezone.utc) - timedelta(seconds=1)
    res = await client.post(
        "/jobs",
        json={"queue": "reports", "class": "Build", "args": [], "perform_at": perform_at.isoformat()},
        headers=HEADERS,
    )
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "enqueued"
    [payload] = await redis_client.lrange("queue:reports", 0, -1)
    assert decode(payload).jid == body["jid"]
    assert (await client.get("/schedule")).json() == {"size": 0}


@pytest.mark.asyncio
async def test_rejected_submission(client, redis_client):
    res = await client.post("/jobs", json={"queue": "reports", "class": "Build", "args": 1}, headers=HEADERS)
    assert res.status_code == 422
    assert res.json()["detail"] == {"error": "missing_args"}


@pytest.mark.asyncio
async def test_store_failure(client, failing_redis, monkeypatch):
    monkeypatch.setattr(redis_helper, "_client", failing_redis)
    res = await client.post("/jobs", json={"queue": "q", "class": "W", "args": []}, headers=HEADERS)
    assert res.status_code == 500
    assert res.json()["detail"] == "Connection refused"
    assert (await client.get("/readyz")).status_code == 503


@pytest.mark.asyncio
async def test_requires_api_key(client):
    res = await client.post("/jobs", json={"queue": "q", "class": "W", "args": []})
    assert res.status_code == 401
    res = await client.post("/jobs", json={"queue": "q", "class": "W", "args": []}, headers={"X-API-Key": "x"})
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_health(client):
    assert (await client.get("/healthz")).json() == {"status": "ok"}
    assert (await client.get("/readyz")).json() == {"ready": True}


@pytest.mark.asyncio
async def test_request_latency_labelled_by_route(client, redis_client):
    await client.get("/queues/mailers")
    await client.get("/queues/reports")
    text = (await client.get("/metrics")).text
    assert 'request_latency_seconds_count{method="GET",route="/queues/{queue}"}' in text
    assert 'route="/queues/mailers"' not in text

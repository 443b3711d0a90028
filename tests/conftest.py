import os
import pytest
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError

os.environ["TESTING"] = "1"

from jobgate import redis_helper
from jobgate.job import Job
from jobgate.main import app as fastapi_app


class FailingRedis(redis_helper.AsyncInMemoryRedis):
    """In-memory store whose writes always fail like a dropped connection."""

    def __init__(self):
        super().__init__()
        self.error = ConnectionError("Connection refused")

    async def lpush(self, name, *values):
        raise self.error

    async def zadd(self, name, mapping):
        raise self.error

    async def ping(self):
        raise self.error


@pytest.fixture
async def redis_client():
    await redis_helper.close_redis()
    client = await redis_helper.init_redis()
    yield client
    await redis_helper.close_redis()


@pytest.fixture
def failing_redis():
    return FailingRedis()


@pytest.fixture
def job():
    return Job(queue="default", class_="MyWorker", args=[1, "two"])


@pytest.fixture
async def client(redis_client):
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

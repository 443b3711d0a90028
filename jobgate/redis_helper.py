import logging
from typing import Dict, List, Optional, Union

import redis.asyncio as redis

from . import config

logger = logging.getLogger(__name__)

SCHEDULE_KEY = config.SCHEDULE_KEY
DEAD_KEY = config.DEAD_KEY


def queue_key(queue: str) -> str:
    return f"{config.QUEUE_KEY_PREFIX}{queue}"


class AsyncInMemoryRedis:
    def __init__(self):
        self._lists: Dict[str, List[str]] = {}
        self._zsets: Dict[str, Dict[str, float]] = {}

    async def ping(self):
        return True

    async def lpush(self, name: str, *values: str):
        lst = self._lists.setdefault(name, [])
        for v in values:
            lst.insert(0, v)
        return len(lst)

    async def rpop(self, name: str) -> Optional[str]:
        lst = self._lists.get(name, [])
        if not lst:
            return None
        return lst.pop()

    async def lrange(self, name: str, start: int, end: int) -> List[str]:
        lst = self._lists.get(name, [])
        if end == -1:
            return list(lst[start:])
        return list(lst[start:end + 1])

    async def llen(self, name: str) -> int:
        return len(self._lists.get(name, []))

    # zset methods
    async def zadd(self, name: str, mapping: Dict[str, float]):
        z = self._zsets.setdefault(name, {})
        added = 0
        for member, score in mapping.items():
            if member not in z:
                added += 1
            z[member] = score
        return added

    async def zrangebyscore(
        self,
        name: str,
        min: Union[float, str],
        max: Union[float, str],
        start: Optional[int] = None,
        num: Optional[int] = None,
        withscores: bool = False,
    ):
        z = self._zsets.get(name, {})
        lo, hi = float(min), float(max)
        items = sorted(((m, s) for m, s in z.items() if lo <= s <= hi), key=lambda kv: (kv[1], kv[0]))
        if start is not None and num is not None:
            items = items[start:start + num]
        if withscores:
            return items
        return [m for m, _ in items]

    async def zrem(self, name: str, *members: str) -> int:
        z = self._zsets.get(name, {})
        removed = 0
        for m in members:
            if m in z:
                del z[m]
                removed += 1
        return removed

    async def zcard(self, name: str) -> int:
        return len(self._zsets.get(name, {}))

    async def aclose(self):
        pass


_client: Optional[Union[redis.Redis, AsyncInMemoryRedis]] = None


async def init_redis():
    """Create the process-wide client. Safe to call more than once."""
    global _client
    if _client is None:
        if config.TESTING:
            _client = AsyncInMemoryRedis()
        else:
            _client = redis.Redis.from_url(config.REDIS_URL, decode_responses=True)
            logger.info("redis client created for %s", config.REDIS_URL)
    return _client


async def get_redis():
    if _client is None:
        return await init_redis()
    return _client


async def close_redis():
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


async def due_jobs(redis_client, max_score: float, count: int = 100) -> List[str]:
    """Return up to `count` encoded jobs from the schedule with score <= max_score, oldest first.

    Nothing is removed here. The sweeper removes each member only after it
    has been pushed onto its work list.
    """
    return await redis_client.zrangebyscore(SCHEDULE_KEY, "-inf", max_score, start=0, num=count)

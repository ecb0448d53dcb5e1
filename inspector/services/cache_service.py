"""Redis cache-aside service for inspection reports."""

import json
import logging
from collections.abc import Sequence

import redis.asyncio as redis

from inspector.routers.metrics import cache_hits, cache_misses

logger = logging.getLogger(__name__)

REPORT_CACHE_TTL = 300  # 5 minutes


def report_key(fids: Sequence[int], batch: bool) -> str:
    mode = "batch" if batch else "full"
    return f"inspect:{mode}:{','.join(str(f) for f in sorted(set(fids)))}"


class CacheService:
    """Redis cache-aside layer. If client is None, all operations are no-ops."""

    def __init__(self, client: redis.Redis | None, ttl: int = REPORT_CACHE_TTL):
        self._rdb = client
        self._ttl = ttl

    @property
    def client(self) -> redis.Redis | None:
        return self._rdb

    async def get_report(self, fids: Sequence[int], batch: bool) -> dict | None:
        if self._rdb is None:
            return None
        key = report_key(fids, batch)
        try:
            data = await self._rdb.get(key)
        except Exception:
            logger.warning("cache get_report failed for %s", key, exc_info=True)
            cache_misses.inc()
            return None
        if data is None:
            cache_misses.inc()
            return None
        cache_hits.inc()
        return json.loads(data)

    async def set_report(self, fids: Sequence[int], batch: bool, data: dict) -> None:
        if self._rdb is None:
            return
        key = report_key(fids, batch)
        try:
            await self._rdb.set(key, json.dumps(data, default=str), ex=self._ttl)
        except Exception:
            logger.warning("cache set_report failed for %s", key, exc_info=True)

    async def close(self) -> None:
        if self._rdb is None:
            return
        await self._rdb.aclose()


async def create_cache_service(redis_url: str, ttl: int = REPORT_CACHE_TTL) -> CacheService:
    """Create a CacheService. Returns a no-op service if connection fails."""
    if not redis_url:
        logger.info("redis: no URL configured, caching disabled")
        return CacheService(None, ttl)

    try:
        client = redis.from_url(redis_url, decode_responses=True)
        await client.ping()
        logger.info("redis: connected, caching enabled")
        return CacheService(client, ttl)
    except Exception:
        logger.warning("redis: connection failed, caching disabled", exc_info=True)
        return CacheService(None, ttl)

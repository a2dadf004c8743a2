"""Redis-backed cache (JSON values)."""
import json
import logging
from typing import Any, Optional

import redis.asyncio as redis

from adventure_api.domain.adventure.repositories import CacheClient

logger = logging.getLogger(__name__)


class RedisCache(CacheClient):
    """Cache on a shared Redis; connects lazily on first use."""

    def __init__(self, url: str, client: Optional[redis.Redis] = None):
        self._url = url
        self._redis: Optional[redis.Redis] = client

    async def connect(self) -> redis.Redis:
        if self._redis is None:
            self._redis = redis.from_url(self._url, decode_responses=True)
        return self._redis

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    async def get(self, key: str) -> Optional[Any]:
        client = await self.connect()
        raw = await client.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring unparsable cache entry %s: %s", key, e)
            return None

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        client = await self.connect()
        if ttl_seconds is not None and ttl_seconds <= 0:
            # Redis rejects EX 0; an entry that expires at once is no entry.
            await client.delete(key)
            return
        await client.set(key, json.dumps(value), ex=ttl_seconds)

    async def delete(self, key: str) -> None:
        client = await self.connect()
        await client.delete(key)

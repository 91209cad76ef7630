# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Redis-backed counter store, shared by every gateway instance pointing at the
same Redis. Check-and-increment runs as one Lua script so concurrent
instances cannot both admit past the limit.
"""

import logging
from typing import Any, Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import NoScriptError, RedisError

from ..errors import CounterStoreError
from .store import CounterStore

logger = logging.getLogger(__name__)

INCREMENT_IF_BELOW_SCRIPT = """
local current = tonumber(redis.call('GET', KEYS[1]) or '0')
local limit = tonumber(ARGV[1])
local ttl = tonumber(ARGV[2])

if current >= limit then
    return {0, current}
end

current = redis.call('INCR', KEYS[1])
if current == 1 and ttl > 0 then
    redis.call('EXPIRE', KEYS[1], ttl)
end

return {1, current}
"""


class RedisCounterStore(CounterStore):
    """Counter store on Redis; stale windows expire through key TTLs."""

    def __init__(self, redis_client: Any = None, redis_url: Optional[str] = None,
                 key_prefix: str = "contentgate:rate:"):
        if redis_client is None:
            redis_client = redis.from_url(redis_url) if redis_url else redis.Redis()
        self.redis_client = redis_client
        self.key_prefix = key_prefix
        self.script_sha: Optional[str] = None

    def _get_key(self, principal_id: str, window_index: int) -> str:
        return f"{self.key_prefix}{principal_id}:{window_index}"

    async def _ensure_script_loaded(self) -> str:
        """Ensure the Lua script is loaded into Redis."""
        if self.script_sha is None:
            self.script_sha = await self.redis_client.script_load(INCREMENT_IF_BELOW_SCRIPT)
        return self.script_sha

    async def get(self, principal_id: str, window_index: int) -> int:
        try:
            value = await self.redis_client.get(self._get_key(principal_id, window_index))
        except RedisError as e:
            logger.error(f"Redis get failed: {e}")
            raise CounterStoreError("Rate counter lookup failed", cause=e) from e
        return int(value) if value is not None else 0

    async def increment_if_below(self, principal_id: str, window_index: int,
                                 limit: int, ttl: Optional[int] = None) -> Tuple[bool, int]:
        key = self._get_key(principal_id, window_index)
        try:
            try:
                result = await self._eval(key, limit, ttl or 0)
            except NoScriptError:
                # Script cache flushed (restart or SCRIPT FLUSH); load again
                self.script_sha = None
                result = await self._eval(key, limit, ttl or 0)
        except RedisError as e:
            logger.error(f"Redis increment failed for {key}: {e}")
            raise CounterStoreError("Rate counter update failed", cause=e) from e

        admitted, count = result
        return bool(int(admitted)), int(count)

    async def _eval(self, key: str, limit: int, ttl: int):
        script_sha = await self._ensure_script_loaded()
        return await self.redis_client.evalsha(script_sha, 1, key, limit, ttl)

    async def purge(self, before_window_index: int) -> int:
        # Keys carry a TTL; Redis expires stale windows on its own
        return 0

    async def close(self) -> None:
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()

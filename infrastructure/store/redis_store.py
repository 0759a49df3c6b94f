"""Redis-backed EphemeralStore.

Redis expires keys natively, so no sweeper is needed. The check-then-act
primitives run as Lua scripts (EVAL), which Redis executes atomically, so two
concurrent verifies of the same code can never both observe and delete it.

The store never fails open: every Redis error surfaces as DependencyError.
"""

from __future__ import annotations

import math
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from errors import DependencyError
from shared.logging import get_logger

log = get_logger(__name__)

_COMPARE_AND_DELETE = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
end
return 0
"""

# PTTL is re-applied so the swap never resets or extends the expiry
_COMPARE_AND_SWAP = """
if redis.call('GET', KEYS[1]) ~= ARGV[1] then
    return 0
end
local ttl = redis.call('PTTL', KEYS[1])
if ttl > 0 then
    redis.call('SET', KEYS[1], ARGV[2], 'PX', ttl)
else
    redis.call('SET', KEYS[1], ARGV[2])
end
return 1
"""

_INCREMENT = """
local count = redis.call('INCR', KEYS[1])
if count == 1 or redis.call('PTTL', KEYS[1]) < 0 then
    redis.call('EXPIRE', KEYS[1], ARGV[1])
end
return count
"""


class RedisStore:
    native_expiry = True

    def __init__(self, redis_client: aioredis.Redis, prefix: str = "pwreset") -> None:
        self._redis = redis_client
        self._prefix = prefix

    @classmethod
    async def connect(cls, redis_uri: str, prefix: str = "pwreset") -> Optional["RedisStore"]:
        """Connect to Redis and return a store, or None if Redis is unreachable."""
        client: aioredis.Redis = aioredis.from_url(redis_uri, decode_responses=True)
        try:
            await client.ping()
        except RedisError as e:
            log.warning(
                "redis_connection_failed", error=str(e), error_type=type(e).__name__
            )
            await client.aclose()
            return None
        log.info("redis_connected", uri=redis_uri.split("@")[-1])  # mask credentials
        return cls(client, prefix=prefix)

    async def aclose(self) -> None:
        await self._redis.aclose()

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except RedisError as e:
            log.error(
                "redis_store_error",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise DependencyError("Credential store is unavailable.") from e

    async def get(self, key: str) -> Optional[str]:
        async with self._guard("get"):
            return await self._redis.get(self._key(key))

    async def set(self, key: str, value: str, ttl: int) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        async with self._guard("set"):
            await self._redis.set(self._key(key), value, ex=ttl)

    async def delete(self, key: str) -> bool:
        async with self._guard("delete"):
            return bool(await self._redis.delete(self._key(key)))

    async def remaining_ttl(self, key: str) -> Optional[float]:
        async with self._guard("remaining_ttl"):
            millis = await self._redis.pttl(self._key(key))
        if millis == -2:
            return None
        if millis == -1:
            return math.inf
        return millis / 1000.0

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        async with self._guard("compare_and_delete"):
            result = await self._redis.eval(
                _COMPARE_AND_DELETE, 1, self._key(key), expected
            )
        return bool(int(result))

    async def compare_and_swap(self, key: str, expected: str, value: str) -> bool:
        async with self._guard("compare_and_swap"):
            result = await self._redis.eval(
                _COMPARE_AND_SWAP, 1, self._key(key), expected, value
            )
        return bool(int(result))

    async def increment(self, key: str, ttl: int) -> int:
        async with self._guard("increment"):
            result = await self._redis.eval(_INCREMENT, 1, self._key(key), ttl)
        return int(result)

    async def purge_expired(self) -> int:
        return 0

    async def ping(self) -> bool:
        async with self._guard("ping"):
            return bool(await self._redis.ping())

"""Unit tests for the Redis-backed EphemeralStore (Redis client mocked)."""

import math
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from errors import DependencyError
from infrastructure.store.protocol import EphemeralStore
from infrastructure.store.redis_store import RedisStore


def _fake_redis():
    r = AsyncMock()
    r.get.return_value = None
    r.set.return_value = True
    r.delete.return_value = 1
    r.pttl.return_value = -2
    r.eval.return_value = 1
    r.ping.return_value = True
    return r


class TestRedisStoreCommands:
    def test_satisfies_protocol(self):
        store = RedisStore(_fake_redis())
        assert isinstance(store, EphemeralStore)
        assert store.native_expiry is True

    async def test_get_uses_prefixed_key(self):
        r = _fake_redis()
        r.get.return_value = '{"a": 1}'
        store = RedisStore(r, prefix="pw")
        assert await store.get("code:a@x.com") == '{"a": 1}'
        r.get.assert_awaited_once_with("pw:code:a@x.com")

    async def test_set_passes_ttl_as_ex(self):
        r = _fake_redis()
        await RedisStore(r).set("k", "v", ttl=300)
        r.set.assert_awaited_once_with("pwreset:k", "v", ex=300)

    async def test_set_rejects_non_positive_ttl(self):
        r = _fake_redis()
        with pytest.raises(ValueError):
            await RedisStore(r).set("k", "v", ttl=0)
        r.set.assert_not_awaited()

    @pytest.mark.parametrize("deleted, expected", [(1, True), (0, False)])
    async def test_delete(self, deleted, expected):
        r = _fake_redis()
        r.delete.return_value = deleted
        assert await RedisStore(r).delete("k") is expected

    @pytest.mark.parametrize(
        "pttl, expected",
        [(-2, None), (1500, 1.5)],
        ids=["absent", "live"],
    )
    async def test_remaining_ttl(self, pttl, expected):
        r = _fake_redis()
        r.pttl.return_value = pttl
        assert await RedisStore(r).remaining_ttl("k") == expected

    async def test_remaining_ttl_without_expiry_is_infinite(self):
        r = _fake_redis()
        r.pttl.return_value = -1
        assert await RedisStore(r).remaining_ttl("k") == math.inf

    async def test_purge_is_noop(self):
        r = _fake_redis()
        assert await RedisStore(r).purge_expired() == 0


class TestRedisStoreScripts:
    async def test_compare_and_delete_runs_script(self):
        r = _fake_redis()
        r.eval.return_value = 1
        store = RedisStore(r)
        assert await store.compare_and_delete("k", "expected") is True
        script, numkeys, key, arg = r.eval.await_args.args
        assert "DEL" in script
        assert (numkeys, key, arg) == (1, "pwreset:k", "expected")

    async def test_compare_and_delete_miss(self):
        r = _fake_redis()
        r.eval.return_value = 0
        assert await RedisStore(r).compare_and_delete("k", "x") is False

    async def test_compare_and_swap_keeps_pttl(self):
        r = _fake_redis()
        store = RedisStore(r)
        assert await store.compare_and_swap("k", "old", "new") is True
        script, numkeys, key, *args = r.eval.await_args.args
        assert "PTTL" in script
        assert (numkeys, key, args) == (1, "pwreset:k", ["old", "new"])

    async def test_increment_returns_count(self):
        r = _fake_redis()
        r.eval.return_value = 7
        store = RedisStore(r)
        assert await store.increment("ratelimit:x", ttl=900) == 7
        _, _, key, ttl = r.eval.await_args.args
        assert (key, ttl) == ("pwreset:ratelimit:x", 900)


class TestRedisStoreFailures:
    async def test_redis_error_becomes_dependency_error(self):
        r = _fake_redis()
        r.get.side_effect = RedisConnectionError("down")
        with pytest.raises(DependencyError):
            await RedisStore(r).get("k")

    async def test_script_error_becomes_dependency_error(self):
        r = _fake_redis()
        r.eval.side_effect = RedisConnectionError("down")
        with pytest.raises(DependencyError):
            await RedisStore(r).compare_and_delete("k", "v")

    async def test_connect_returns_none_when_ping_fails(self, mocker):
        client = _fake_redis()
        client.ping.side_effect = RedisConnectionError("refused")
        mocker.patch(
            "infrastructure.store.redis_store.aioredis.from_url", return_value=client
        )
        assert await RedisStore.connect("redis://localhost:6379") is None
        client.aclose.assert_awaited_once()

    async def test_connect_returns_store(self, mocker):
        client = _fake_redis()
        mocker.patch(
            "infrastructure.store.redis_store.aioredis.from_url", return_value=client
        )
        store = await RedisStore.connect("redis://localhost:6379", prefix="x")
        assert isinstance(store, RedisStore)
        assert await store.ping() is True

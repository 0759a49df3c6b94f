"""Unit tests for FixedWindowRateLimiter."""

import pytest

from services.rate_limiter import FixedWindowRateLimiter


@pytest.fixture
def limiter(store):
    return FixedWindowRateLimiter(store)


class TestFixedWindowRateLimiter:
    async def test_admits_twenty_then_rejects(self, limiter):
        results = [await limiter.hit("10.0.0.1") for _ in range(21)]
        assert all(r.allowed for r in results[:20])
        assert results[20].allowed is False
        assert results[19].remaining == 0
        assert results[0].remaining == 19

    async def test_reports_time_to_reset(self, limiter, clock):
        await limiter.hit("10.0.0.1")
        clock.advance(100)
        result = await limiter.hit("10.0.0.1")
        assert result.reset_in == pytest.approx(800)
        assert result.limit == 20

    async def test_window_rollover_resets_counter(self, limiter, clock):
        for _ in range(21):
            await limiter.hit("10.0.0.1")
        clock.advance(900)
        result = await limiter.hit("10.0.0.1")
        assert result.allowed is True
        assert result.remaining == 19

    async def test_still_blocked_just_before_rollover(self, limiter, clock):
        for _ in range(20):
            await limiter.hit("10.0.0.1")
        clock.advance(899)
        assert (await limiter.hit("10.0.0.1")).allowed is False

    async def test_clients_are_independent(self, limiter):
        for _ in range(21):
            await limiter.hit("10.0.0.1")
        assert (await limiter.hit("10.0.0.2")).allowed is True

    async def test_scopes_are_independent(self, store):
        a = FixedWindowRateLimiter(store, limit=1, scope="a")
        b = FixedWindowRateLimiter(store, limit=1, scope="b")
        assert (await a.hit("c")).allowed is True
        assert (await b.hit("c")).allowed is True
        assert (await a.hit("c")).allowed is False

    @pytest.mark.parametrize("limit, window", [(0, 900), (20, 0)])
    def test_rejects_bad_configuration(self, store, limit, window):
        with pytest.raises(ValueError):
            FixedWindowRateLimiter(store, limit=limit, window_seconds=window)

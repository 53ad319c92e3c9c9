# tests/test_cache_get_or_compute.py

"""
Tests for ExpiringCache.get_or_compute.
"""

import asyncio

import pytest

from core.errors import InvalidTTLError


class Counter:
    def __init__(self, value="computed", delay=0.0, error=None):
        self.calls = 0
        self.value = value
        self.delay = delay
        self.error = error

    async def __call__(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.value


@pytest.mark.asyncio
async def test_cold_key_computes_once_then_hits(cache):
    compute = Counter({"total": 3})

    first = await cache.get_or_compute("dashboard:t1:stats", compute, 60)
    second = await cache.get_or_compute("dashboard:t1:stats", compute, 60)

    assert first == {"total": 3}
    assert second == {"total": 3}
    assert compute.calls == 1
    assert cache.get_stats().hits == 1


@pytest.mark.asyncio
async def test_recomputes_after_expiry(cache, clock):
    compute = Counter()

    await cache.get_or_compute("k", compute, ttl_seconds=1)
    clock.advance(2)
    await cache.get_or_compute("k", compute, ttl_seconds=1)

    assert compute.calls == 2


@pytest.mark.asyncio
async def test_accepts_sync_compute(cache):
    assert await cache.get_or_compute("k", lambda: 42) == 42
    assert cache.get("k") == 42


@pytest.mark.asyncio
async def test_failed_compute_stores_nothing(cache):
    compute = Counter(error=RuntimeError("database down"))

    with pytest.raises(RuntimeError, match="database down"):
        await cache.get_or_compute("k", compute)

    assert cache.has("k") is False

    # The next call tries again
    compute.error = None
    assert await cache.get_or_compute("k", compute) == "computed"
    assert compute.calls == 2


@pytest.mark.asyncio
async def test_concurrent_misses_share_one_computation(cache):
    compute = Counter("shared", delay=0.01)

    results = await asyncio.gather(
        *(cache.get_or_compute("dashboard:t1:stats", compute) for _ in range(5))
    )

    assert results == ["shared"] * 5
    assert compute.calls == 1
    assert cache.get("dashboard:t1:stats") == "shared"


@pytest.mark.asyncio
async def test_concurrent_waiters_all_see_the_failure(cache):
    compute = Counter(delay=0.01, error=ValueError("bad data"))

    results = await asyncio.gather(
        *(cache.get_or_compute("k", compute) for _ in range(3)),
        return_exceptions=True,
    )

    assert compute.calls == 1
    assert all(isinstance(r, ValueError) for r in results)
    assert cache.has("k") is False


@pytest.mark.asyncio
async def test_different_keys_compute_independently(cache):
    a = Counter("a", delay=0.01)
    b = Counter("b", delay=0.01)

    results = await asyncio.gather(
        cache.get_or_compute("x:t1:a", a),
        cache.get_or_compute("x:t1:b", b),
    )

    assert results == ["a", "b"]
    assert a.calls == 1
    assert b.calls == 1


@pytest.mark.asyncio
async def test_cancelled_follower_does_not_cancel_leader(cache):
    compute = Counter("done", delay=0.05)

    leader = asyncio.ensure_future(cache.get_or_compute("k", compute))
    await asyncio.sleep(0)
    follower = asyncio.ensure_future(cache.get_or_compute("k", compute))
    await asyncio.sleep(0)
    follower.cancel()

    assert await leader == "done"
    with pytest.raises(asyncio.CancelledError):
        await follower
    assert cache.get("k") == "done"


@pytest.mark.asyncio
async def test_invalid_ttl_fails_before_computing(cache):
    compute = Counter()

    with pytest.raises(InvalidTTLError):
        await cache.get_or_compute("k", compute, ttl_seconds=0)

    assert compute.calls == 0

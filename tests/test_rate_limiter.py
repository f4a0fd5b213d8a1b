import asyncio

import redis.asyncio as redis

from src.api.services.rate_limiter import MemoryRateLimiter, RedisRateLimiter


class FakeClock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakePipeline:
    def __init__(self, owner):
        self.owner = owner
        self.ops = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def incr(self, key):
        self.ops.append(("incr", key))

    def expire(self, key, seconds):
        self.ops.append(("expire", key, seconds))

    async def execute(self):
        if self.owner.fail:
            raise redis.ConnectionError("down")
        results = []
        for op in self.ops:
            if op[0] == "incr":
                self.owner.counts[op[1]] = self.owner.counts.get(op[1], 0) + 1
                results.append(self.owner.counts[op[1]])
            else:
                self.owner.expiries[op[1]] = op[2]
                results.append(True)
        return results


class FakeRedis:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.counts = {}
        self.expiries = {}

    def pipeline(self, transaction=True):
        return FakePipeline(self)


def _run(limiter, key, times):
    async def go():
        return [await limiter.check(key) for _ in range(times)]

    return asyncio.run(go())


def test_memory_limiter_fixed_window():
    clock = FakeClock(1_000_010.0)
    limiter = MemoryRateLimiter(5, 60, clock=clock)
    decisions = _run(limiter, "1.2.3.4", 6)
    assert [d.allowed for d in decisions] == [True] * 5 + [False]
    assert [d.remaining for d in decisions] == [4, 3, 2, 1, 0, 0]
    window_start = 1_000_010 // 60 * 60
    assert decisions[-1].reset_ms == (window_start + 60) * 1000

    assert _run(limiter, "5.6.7.8", 1)[0].allowed

    clock.now += 60
    assert _run(limiter, "1.2.3.4", 1)[0].remaining == 4


def test_redis_limiter_counts_and_expires():
    fake = FakeRedis()
    limiter = RedisRateLimiter(fake, 2, 60, prefix="test", clock=FakeClock(120.0))
    decisions = _run(limiter, "ip", 3)
    assert [d.allowed for d in decisions] == [True, True, False]
    assert fake.counts == {"test:ip:120": 3}
    assert fake.expiries == {"test:ip:120": 60}


def test_redis_limiter_fails_open():
    limiter = RedisRateLimiter(FakeRedis(fail=True), 1, 60, clock=FakeClock(0.0))
    decisions = _run(limiter, "ip", 3)
    assert all(d.allowed for d in decisions)

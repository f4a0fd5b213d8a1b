"""Fixed-window request limiter keyed by client identity (IP)."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol, Tuple

import redis.asyncio as redis
from fastapi import Request

LOGGER = logging.getLogger("crisp.ratelimit")


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_ms: int


class RateLimiter(Protocol):
    name: str

    async def check(self, key: str) -> RateLimitDecision: ...


def _window(now: float, window_sec: int) -> Tuple[int, int]:
    start = int(now // window_sec) * window_sec
    return start, (start + window_sec) * 1000


def _decision(count: int, limit: int, reset_ms: int) -> RateLimitDecision:
    return RateLimitDecision(
        allowed=count <= limit,
        limit=limit,
        remaining=max(0, limit - count),
        reset_ms=reset_ms,
    )


class MemoryRateLimiter:
    """Per-process counters; fine for a single worker or for tests."""

    name = "memory"

    def __init__(
        self, limit: int, window_sec: int, *, clock: Callable[[], float] = time.time
    ) -> None:
        self.limit = limit
        self.window_sec = window_sec
        self._clock = clock
        self._lock = threading.Lock()
        self._counts: Dict[Tuple[str, int], int] = {}

    async def check(self, key: str) -> RateLimitDecision:
        window_start, reset_ms = _window(self._clock(), self.window_sec)
        with self._lock:
            for stale in [k for k in self._counts if k[1] < window_start]:
                del self._counts[stale]
            count = self._counts.get((key, window_start), 0) + 1
            self._counts[(key, window_start)] = count
        return _decision(count, self.limit, reset_ms)


class RedisRateLimiter:
    """Shared counters in Redis (INCR + EXPIRE per window)."""

    name = "redis"

    def __init__(
        self,
        client: redis.Redis,
        limit: int,
        window_sec: int,
        *,
        prefix: str = "crisp:ratelimit",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._redis = client
        self.limit = limit
        self.window_sec = window_sec
        self.prefix = prefix
        self._clock = clock

    @classmethod
    def from_url(cls, url: str, limit: int, window_sec: int, *, prefix: str) -> "RedisRateLimiter":
        return cls(redis.from_url(url), limit, window_sec, prefix=prefix)

    async def check(self, key: str) -> RateLimitDecision:
        window_start, reset_ms = _window(self._clock(), self.window_sec)
        redis_key = f"{self.prefix}:{key}:{window_start}"
        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.incr(redis_key)
                pipe.expire(redis_key, self.window_sec)
                count, _ = await pipe.execute()
        except redis.RedisError as exc:
            # Fail open: a throttling outage must not take the waitlist down.
            LOGGER.warning("Rate limiter unavailable, allowing request: %s", exc)
            return RateLimitDecision(True, self.limit, self.limit, reset_ms)
        return _decision(int(count), self.limit, reset_ms)


def build_rate_limiter(
    redis_url: Optional[str], limit: int, window_sec: int, prefix: str
) -> RateLimiter:
    if redis_url:
        return RedisRateLimiter.from_url(redis_url, limit, window_sec, prefix=prefix)
    LOGGER.warning("REDIS_URL not set; waitlist rate limits are per-process")
    return MemoryRateLimiter(limit, window_sec)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"

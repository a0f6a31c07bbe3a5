"""Sign-in attempt limiting over a sliding window."""

from __future__ import annotations

import asyncio
import math
import time
from collections import defaultdict, deque
from collections.abc import Callable
from functools import lru_cache
from typing import Any, Protocol
from uuid import uuid4

from mentor_portal.core.config import get_settings

REDIS_KEY_PREFIX = "mentor_portal"


class RateLimiter(Protocol):
    async def acquire(
        self,
        key: str,
        *,
        max_requests: int,
        window_seconds: int,
    ) -> tuple[bool, int]:
        """Record one attempt; return (allowed, retry_after_seconds)."""


# KEYS[1] attempts zset; ARGV: now, window, limit, member.
_REDIS_ACQUIRE_SCRIPT = """
redis.call('ZREMRANGEBYSCORE', KEYS[1], '-inf', ARGV[1] - ARGV[2])
if redis.call('ZCARD', KEYS[1]) >= tonumber(ARGV[3]) then
  local oldest = redis.call('ZRANGE', KEYS[1], 0, 0, 'WITHSCORES')
  return {0, oldest[2] or ARGV[1]}
end
redis.call('ZADD', KEYS[1], ARGV[1], ARGV[4])
redis.call('EXPIRE', KEYS[1], math.ceil(ARGV[2]))
return {1, 0}
"""


def _retry_after(oldest_attempt: float, window_seconds: int, now: float) -> int:
    return max(1, math.ceil(oldest_attempt + window_seconds - now))


class InMemorySlidingWindowRateLimiter:
    """Attempts tracked in this process only."""

    def __init__(self, now_provider: Callable[[], float] | None = None) -> None:
        self._attempts: dict[str, deque[float]] = defaultdict(deque)
        self._lock = asyncio.Lock()
        self._now = now_provider or time.monotonic

    async def acquire(
        self,
        key: str,
        *,
        max_requests: int,
        window_seconds: int,
    ) -> tuple[bool, int]:
        now = self._now()
        async with self._lock:
            attempts = self._attempts[key]
            while attempts and attempts[0] <= now - window_seconds:
                attempts.popleft()
            if len(attempts) >= max_requests:
                return False, _retry_after(attempts[0], window_seconds, now)
            attempts.append(now)
            return True, 0


class RedisSlidingWindowRateLimiter:
    """Attempts shared by every portal replica through one Redis."""

    def __init__(self, redis_url: str, now_provider: Callable[[], float] | None = None) -> None:
        self.redis_url = redis_url
        self._now = now_provider or time.time
        self._script: Any | None = None

    def _acquire_script(self) -> Any:
        if self._script is None:
            from redis.asyncio import from_url

            client = from_url(self.redis_url, decode_responses=True)
            self._script = client.register_script(_REDIS_ACQUIRE_SCRIPT)
        return self._script

    async def acquire(
        self,
        key: str,
        *,
        max_requests: int,
        window_seconds: int,
    ) -> tuple[bool, int]:
        now = self._now()
        allowed, oldest = await self._acquire_script()(
            keys=[f"{REDIS_KEY_PREFIX}:{key}"],
            args=[now, window_seconds, max_requests, f"{now}:{uuid4().hex}"],
        )
        if int(allowed):
            return True, 0
        return False, _retry_after(float(oldest), window_seconds, now)


@lru_cache
def _limiter_for(backend: str, redis_url: str | None) -> RateLimiter:
    if backend == "redis":
        return RedisSlidingWindowRateLimiter(redis_url or "")
    return InMemorySlidingWindowRateLimiter()


def get_rate_limiter() -> RateLimiter:
    """Limiter for the configured backend, shared per (backend, redis_url)."""
    settings = get_settings()
    return _limiter_for(settings.signin_rate_limit_backend, settings.redis_url)

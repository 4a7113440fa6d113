"""
Rate limiting strategies using Strategy Pattern.
Allows switching between different backends (Redis, In-Memory, Null).

Lookups are limited per token, which protects against one short URL
being hammered rather than throttling individual clients.
"""

import time
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Dict


class RateLimiterStrategy(ABC):
    """
    Abstract base class for rate limiters.

    All methods are async because distributed limiters involve I/O.
    """

    @abstractmethod
    async def limit(self, key: str) -> bool:
        """
        Record one request for key and decide whether it may proceed.

        Returns:
            True if allowed, False if the key is currently throttled
        """
        pass

    @abstractmethod
    async def get_remaining(self, key: str) -> int:
        """Requests still allowed for key in the current window"""
        pass


class RedisRateLimiter(RateLimiterStrategy):
    """
    Fixed-window counter in Redis.

    INCR + EXPIRE in one pipeline; shared by every app instance
    pointing at the same Redis.
    """

    def __init__(self, redis_client, max_requests: int = 60, window_seconds: int = 60,
                 key_prefix: str = "ratelimit:", clock: Callable[[], float] = time.time):
        self.redis = redis_client
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.key_prefix = key_prefix
        self.clock = clock

    def _window_key(self, key: str) -> str:
        window = int(self.clock() // self.window_seconds)
        return f"{self.key_prefix}{key}:{window}"

    async def limit(self, key: str) -> bool:
        window_key = self._window_key(key)
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.incr(window_key)
            pipe.expire(window_key, self.window_seconds)
            count, _ = await pipe.execute()
        return int(count) <= self.max_requests

    async def get_remaining(self, key: str) -> int:
        count = await self.redis.get(self._window_key(key))
        return max(0, self.max_requests - int(count or 0))


class InMemoryRateLimiter(RateLimiterStrategy):
    """
    Sliding-window log kept in process memory.

    Good for development and single-instance deployments; every process
    keeps its own windows.

    Keys whose window has emptied are dropped: on access, and by a sweep
    over all keys at most once per window_seconds.
    """

    def __init__(self, max_requests: int = 60, window_seconds: int = 60,
                 clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self.windows: Dict[str, deque] = {}
        self._last_sweep = clock()

    def _prune(self, window: deque, now: float) -> deque:
        window_start = now - self.window_seconds
        while window and window[0] <= window_start:
            window.popleft()
        return window

    def _sweep(self, now: float):
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        for key in list(self.windows):
            if not self._prune(self.windows[key], now):
                del self.windows[key]

    async def limit(self, key: str) -> bool:
        now = self.clock()
        self._sweep(now)
        window = self._prune(self.windows.get(key, deque()), now)
        if len(window) < self.max_requests:
            window.append(now)
            self.windows[key] = window
            return True
        return False

    async def get_remaining(self, key: str) -> int:
        window = self.windows.get(key)
        if window is None:
            return self.max_requests
        now = self.clock()
        if not self._prune(window, now):
            del self.windows[key]
        return max(0, self.max_requests - len(window))


class NullRateLimiter(RateLimiterStrategy):
    """
    Null Object Pattern - limiter that lets everything through.

    Used when rate limiting is handled upstream or disabled.
    """

    async def limit(self, key: str) -> bool:
        return True

    async def get_remaining(self, key: str) -> int:
        return 0

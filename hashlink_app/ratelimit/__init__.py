"""
Rate limiting module for URL lookups.
Implements Strategy Pattern for flexible limiter backends.
"""

from .strategies import RateLimiterStrategy, RedisRateLimiter, InMemoryRateLimiter, NullRateLimiter
from .factory import RateLimiterFactory, RateLimitBackend

__all__ = [
    "RateLimiterStrategy",
    "RedisRateLimiter",
    "InMemoryRateLimiter",
    "NullRateLimiter",
    "RateLimiterFactory",
    "RateLimitBackend",
]

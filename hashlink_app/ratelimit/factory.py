"""
Factory for creating rate limiter instances.
Simple, clean factory with singleton caching.
"""

import logging
from enum import Enum

from .strategies import RateLimiterStrategy, RedisRateLimiter, InMemoryRateLimiter, NullRateLimiter
from hashlink_app.config import settings

logger = logging.getLogger(__name__)


class RateLimitBackend(Enum):
    """Available rate limiter backends"""
    REDIS = "redis"
    MEMORY = "memory"
    NULL = "null"


class RateLimiterFactory:
    """
    Simple factory for creating rate limiter instances.

    Gets configuration from settings (not passed as parameters).
    """

    _instance: RateLimiterStrategy = None  # Single cached instance

    @classmethod
    def create(cls, backend: RateLimitBackend) -> RateLimiterStrategy:
        """
        Create or return cached rate limiter instance.

        Args:
            backend: Type of rate limiter backend (from enum)

        Returns:
            Singleton rate limiter instance
        """
        if cls._instance is not None:
            return cls._instance

        if backend == RateLimitBackend.REDIS:
            import redis
            import redis.asyncio as redis_async

            try:
                # Test connection immediately
                redis.from_url(settings.redis_url, socket_connect_timeout=2).ping()

                redis_client = redis_async.from_url(
                    settings.redis_url,
                    decode_responses=True,
                    socket_connect_timeout=2,
                    socket_timeout=2,
                )
                cls._instance = RedisRateLimiter(
                    redis_client,
                    max_requests=settings.rate_limit_requests,
                    window_seconds=settings.rate_limit_window_seconds,
                )
                logger.info("✅ Redis rate limiter initialized")

            except redis.RedisError as e:
                logger.warning(f"⚠️  Redis connection failed: {e}")
                logger.warning("⚠️  Falling back to in-memory rate limiter")
                cls._instance = cls._in_memory()

        elif backend == RateLimitBackend.MEMORY:
            cls._instance = cls._in_memory()
            logger.info("✅ In-memory rate limiter initialized")

        elif backend == RateLimitBackend.NULL:
            cls._instance = NullRateLimiter()
            logger.info("✅ Null rate limiter initialized")

        else:
            raise ValueError(f"Unknown rate limit backend: {backend}")

        return cls._instance

    @staticmethod
    def _in_memory() -> InMemoryRateLimiter:
        return InMemoryRateLimiter(
            max_requests=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None

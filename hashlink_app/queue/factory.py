"""
Factory for creating queue instances.
Simple, clean factory with singleton caching.
"""

import logging
from enum import Enum

from .strategies import QueueStrategy, RedisStreamQueue, InMemoryQueue
from hashlink_app.config import settings

logger = logging.getLogger(__name__)


class QueueBackend(Enum):
    """Available queue backends"""
    REDIS_STREAMS = "redis_streams"
    MEMORY = "memory"


class QueueFactory:
    """
    Simple factory for creating queue instances.

    Gets configuration from settings (not passed as parameters).
    """

    _instance: QueueStrategy = None  # Single cached instance

    @classmethod
    def create(cls, backend: QueueBackend) -> QueueStrategy:
        """
        Create or return cached queue instance.

        Args:
            backend: Type of queue backend (from enum)

        Returns:
            Singleton queue instance
        """
        if cls._instance is not None:
            return cls._instance

        if backend == QueueBackend.REDIS_STREAMS:
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
                cls._instance = RedisStreamQueue(redis_client, settings.queue_consumer_group)
                logger.info("✅ Redis queue initialized")

            except redis.RedisError as e:
                logger.warning(f"⚠️  Redis connection failed: {e}")
                logger.warning("⚠️  Falling back to in-memory queue")
                cls._instance = InMemoryQueue(settings.queue_max_length)

        elif backend == QueueBackend.MEMORY:
            cls._instance = InMemoryQueue(settings.queue_max_length)
            logger.info("✅ In-memory queue initialized")

        else:
            raise ValueError(f"Unknown queue backend: {backend}")

        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None

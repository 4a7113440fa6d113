"""
Factory for creating mapping store instances.
Simple, clean factory with singleton caching.
"""

import logging
from enum import Enum

from .strategies import MappingStore, RedisMappingStore, SQLMappingStore, InMemoryMappingStore
from hashlink_app.config import settings

logger = logging.getLogger(__name__)


class StoreBackend(Enum):
    """Available mapping store backends"""
    REDIS = "redis"
    SQL = "sql"
    MEMORY = "memory"


class StoreFactory:
    """
    Simple factory for creating mapping store instances.

    Unlike the rate limiter and queue factories there is no in-memory
    fallback: the store is the system of record, so a misconfigured
    backend must fail loudly instead of silently losing mappings.
    """

    _instance: MappingStore = None  # Single cached instance

    @classmethod
    def create(cls, backend: StoreBackend) -> MappingStore:
        """
        Create or return cached mapping store instance.

        Args:
            backend: Type of store backend (from enum)

        Returns:
            Singleton mapping store instance
        """
        if cls._instance is not None:
            return cls._instance

        if backend == StoreBackend.REDIS:
            import redis.asyncio as redis

            redis_client = redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
            cls._instance = RedisMappingStore(redis_client, key_prefix=settings.store_key_prefix)
            logger.info("✅ Redis mapping store initialized")

        elif backend == StoreBackend.SQL:
            from hashlink_app.database.connection import Base, SessionLocal, engine

            Base.metadata.create_all(bind=engine)
            cls._instance = SQLMappingStore(SessionLocal)
            logger.info("✅ SQL mapping store initialized")

        elif backend == StoreBackend.MEMORY:
            cls._instance = InMemoryMappingStore()
            logger.info("✅ In-memory mapping store initialized")

        else:
            raise ValueError(f"Unknown store backend: {backend}")

        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None

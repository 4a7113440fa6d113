"""
FastAPI dependencies for dependency injection.

This module provides singleton instances of the mapping store, rate limiter
and queue, and wires them into one URLService.

Pattern: Dependency Injection
- Loose coupling between components
- Easy to test (override get_url_service with in-memory backends)
- Flexible (swap implementations via config)
"""

from functools import lru_cache

from hashlink_app.config import ShortenerConfig, settings
from hashlink_app.queue.factory import QueueFactory, QueueBackend
from hashlink_app.queue.strategies import QueueStrategy
from hashlink_app.ratelimit.factory import RateLimiterFactory, RateLimitBackend
from hashlink_app.ratelimit.strategies import RateLimiterStrategy
from hashlink_app.services.url_service import URLService
from hashlink_app.store.factory import StoreFactory, StoreBackend
from hashlink_app.store.strategies import MappingStore


@lru_cache()
def get_store() -> MappingStore:
    """Get mapping store instance (singleton)"""
    return StoreFactory.create(StoreBackend(settings.store_backend))


@lru_cache()
def get_rate_limiter() -> RateLimiterStrategy:
    """Get rate limiter instance (singleton)"""
    return RateLimiterFactory.create(RateLimitBackend(settings.rate_limit_backend))


@lru_cache()
def get_queue() -> QueueStrategy:
    """Get usage event queue instance (singleton)"""
    return QueueFactory.create(QueueBackend(settings.queue_backend))


@lru_cache()
def get_url_service() -> URLService:
    """
    Get URLService with all dependencies injected.

    A single instance for the process: configuration is fixed at startup,
    and the service keeps track of usage events it is still publishing.
    """
    return URLService(
        store=get_store(),
        rate_limiter=get_rate_limiter(),
        queue=get_queue(),
        config=ShortenerConfig.from_settings(settings),
        queue_name=settings.queue_name,
        list_page_size=settings.list_page_size,
    )

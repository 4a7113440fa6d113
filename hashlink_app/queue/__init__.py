"""
Message queue module for usage events.
Implements Strategy Pattern for flexible queue backends.
"""

from .strategies import QueueStrategy, RedisStreamQueue, InMemoryQueue
from .factory import QueueFactory, QueueBackend
from .models import UsageEvent

__all__ = [
    "QueueStrategy",
    "RedisStreamQueue",
    "InMemoryQueue",
    "QueueFactory",
    "QueueBackend",
    "UsageEvent",
]

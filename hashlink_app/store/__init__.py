"""
Mapping store module for URL shortener.
Implements Strategy Pattern for flexible key-value backends.
"""

from .strategies import (
    MappingStore,
    KeyPage,
    RedisMappingStore,
    SQLMappingStore,
    InMemoryMappingStore,
)
from .factory import StoreFactory, StoreBackend

__all__ = [
    "MappingStore",
    "KeyPage",
    "RedisMappingStore",
    "SQLMappingStore",
    "InMemoryMappingStore",
    "StoreFactory",
    "StoreBackend",
]

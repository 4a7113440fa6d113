"""
Hit storage module for usage analytics.

Separates the mapping store (system of record) from analytical data.
"""

from .strategies import HitStorageStrategy, SQLiteHitStorage

__all__ = [
    "HitStorageStrategy",
    "SQLiteHitStorage",
]

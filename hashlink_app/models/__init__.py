"""
Database models for the URL shortener.

Note: Usage events are stored in a separate analytics database,
not in SQLAlchemy models.
"""

from .mapping import Mapping

__all__ = ["Mapping"]

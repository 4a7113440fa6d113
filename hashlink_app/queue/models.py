"""
Data models for queue messages.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UsageEvent(BaseModel):
    """
    Event model for token usage counting.

    Published once per successful resolve. The core only writes these;
    the hit worker and analytics storage are the readers.
    """

    token: str = Field(..., description="The token that was resolved")
    url: str = Field(..., description="The original URL it resolved to")
    count: int = Field(1, description="Number of uses this event represents")
    timestamp: datetime = Field(default_factory=_utcnow, description="When the resolve happened")

    # Set by queue backends that need acknowledgement
    message_id: Optional[str] = Field(None, exclude=True)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "token": "1f3a9c2e",
                "url": "https://example.com/page",
                "count": 1,
                "timestamp": "2025-10-29T10:30:00Z",
            }
        }
    )

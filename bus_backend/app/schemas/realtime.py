"""
Real-time channel frame schemas.

Frames are JSON objects {"event": <name>, "data": <payload>}.
"""

from pydantic import BaseModel, Field
from typing import Any, Optional


class RealtimeFrame(BaseModel):
    """Envelope of every frame in both directions."""
    event: str = Field(..., min_length=1)
    data: Any = None


class TripJoin(BaseModel):
    """Object form of a join-trip/leave-trip payload."""
    trip_id: int = Field(..., alias="tripId")

    class Config:
        populate_by_name = True


class LocationUpdatePayload(BaseModel):
    """
    location-update payload.

    Only the fields needed to route the frame are validated; the received
    payload is relayed untouched.
    """
    trip_id: int = Field(..., alias="tripId")
    latitude: float
    longitude: float
    speed: Optional[float] = None

    class Config:
        populate_by_name = True
        extra = "allow"

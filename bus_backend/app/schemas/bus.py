"""
Bus Pydantic schemas.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional


class BusCreate(BaseModel):
    """Schema for registering a bus."""
    bus_no: str = Field(..., min_length=1, max_length=50, description="Unique bus number, e.g. 150A-01")


class BusUpdate(BaseModel):
    """Schema for updating a bus."""
    bus_no: Optional[str] = Field(None, min_length=1, max_length=50)

    @field_validator("bus_no")
    @classmethod
    def reject_null(cls, value):
        # Omit the field to leave it unchanged
        if value is None:
            raise ValueError("may not be null")
        return value


class BusLocationUpdate(BaseModel):
    """
    Location report from the driver app.

    The server stamps last_updated; clients never send it.
    """
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    speed: Optional[float] = Field(None, ge=0, description="Speed in km/h")
    trip_id: Optional[int] = Field(None, description="Trip being driven; relays the update to its channel")


class BusResponse(BaseModel):
    """Schema for bus response."""
    bus_id: int
    bus_no: str
    current_latitude: Optional[float] = None
    current_longitude: Optional[float] = None
    current_speed_kmh: Optional[float] = None
    last_updated: Optional[datetime] = None
    current_trip_id: Optional[int] = None

    class Config:
        from_attributes = True


class BusLocationResponse(BaseModel):
    """Response after recording a location."""
    message: str
    bus: BusResponse

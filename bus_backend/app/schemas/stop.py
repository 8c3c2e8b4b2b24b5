"""
Stop Pydantic schemas.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional


class StopCreate(BaseModel):
    """Schema for creating a stop."""
    stop_name: str = Field(..., min_length=1, max_length=255)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    geofence_radius_meters: int = Field(50, gt=0, description="Arrival detection radius")


class StopUpdate(BaseModel):
    """Schema for updating a stop."""
    stop_name: Optional[str] = Field(None, min_length=1, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    geofence_radius_meters: Optional[int] = Field(None, gt=0)

    @field_validator("stop_name", "latitude", "longitude", "geofence_radius_meters")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class StopResponse(BaseModel):
    """Schema for stop response."""
    stop_id: int
    stop_name: str
    latitude: float
    longitude: float
    geofence_radius_meters: int

    class Config:
        from_attributes = True

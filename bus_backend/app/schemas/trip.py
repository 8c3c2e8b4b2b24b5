"""
Trip Pydantic schemas.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from typing import Optional
from bus_backend.app.models.enums import TripStatus


class TripCreate(BaseModel):
    """Schema for creating a trip (the endpoint also accepts a list of these)."""
    schedule_id: int = Field(..., gt=0)
    bus_id: int = Field(..., gt=0)
    driver_id: int = Field(..., gt=0)
    trip_date: date
    status: str = Field(TripStatus.SCHEDULED.value, min_length=1, max_length=50)


class TripUpdate(BaseModel):
    """Schema for updating a trip."""
    bus_id: Optional[int] = Field(None, gt=0)
    driver_id: Optional[int] = Field(None, gt=0)
    trip_date: Optional[date] = None
    status: Optional[str] = Field(None, min_length=1, max_length=50)

    @field_validator("bus_id", "driver_id", "trip_date", "status")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class TripStatusUpdate(BaseModel):
    """
    Generic status update.

    Any non-empty string is accepted; transitions are not checked.
    """
    status: str = Field(..., min_length=1, max_length=50)


class TripResponse(BaseModel):
    """Bare trip row."""
    trip_id: int
    schedule_id: int
    bus_id: int
    driver_id: int
    trip_date: date
    status: str

    class Config:
        from_attributes = True


class TripDetailResponse(TripResponse):
    """Trip joined with bus, driver, schedule and route details."""
    bus_no: Optional[str] = None
    driver_name: Optional[str] = None
    start_time: Optional[str] = None
    route_name: Optional[str] = None
    route_id: Optional[int] = None


class TripActionResponse(BaseModel):
    """Response for start/pause/resume/complete and status updates."""
    message: str
    trip_id: int
    status: str


class TripStopTimeline(BaseModel):
    """One stop of a trip's route with recorded and predicted times."""
    stop_id: int
    stop_name: str
    latitude: float
    longitude: float
    geofence_radius_meters: int
    stop_sequence: int
    time_offset_from_start: Optional[int] = None
    actual_arrival_time: Optional[datetime] = None
    actual_departure_time: Optional[datetime] = None
    predicted_arrival_time: Optional[datetime] = None


class StopEventResponse(BaseModel):
    """Response after recording a stop arrival or departure."""
    message: str
    trip_stop_id: int
    recorded_at: datetime


class DailyTripsResponse(BaseModel):
    """Result of the daily trip roll-over."""
    created: int
    date: date
    message: str

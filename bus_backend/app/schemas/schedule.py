"""
Schedule Pydantic schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional


class ScheduleCreate(BaseModel):
    """Schema for creating a schedule."""
    route_id: int = Field(..., gt=0)
    start_time: str = Field(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$", description="Departure time, HH:MM")


class ScheduleResponse(BaseModel):
    """Schedule with its route name."""
    schedule_id: int
    route_id: int
    start_time: str
    route_name: Optional[str] = None

    class Config:
        from_attributes = True

"""
Passenger report Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class ReportCreate(BaseModel):
    """Schema for a passenger filing a report."""
    report_type: str = Field(..., min_length=1, max_length=100, description="e.g. Complaint, Lost Item, Feedback")
    message: str = Field(..., min_length=1)
    trip_id: Optional[int] = Field(None, gt=0)
    bus_id: Optional[int] = Field(None, gt=0)
    driver_id: Optional[int] = Field(None, gt=0)
    route_id: Optional[int] = Field(None, gt=0)


class ReportStatusUpdate(BaseModel):
    """Schema for moving a report through review."""
    status: str = Field(..., min_length=1, max_length=50)


class ReportResponse(BaseModel):
    """Schema for report response."""
    report_id: int
    report_type: str
    message: str
    status: str
    trip_id: Optional[int] = None
    bus_id: Optional[int] = None
    driver_id: Optional[int] = None
    route_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ReportCreatedResponse(BaseModel):
    message: str
    report_id: int

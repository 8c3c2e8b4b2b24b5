"""
Announcement Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime


class AnnouncementCreate(BaseModel):
    """Schema for broadcasting an announcement."""
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)


class AnnouncementResponse(BaseModel):
    """Schema for announcement response."""
    announcement_id: int
    title: str
    message: str
    created_at: datetime

    class Config:
        from_attributes = True


class AnnouncementCreatedResponse(BaseModel):
    message: str
    announcement_id: int

"""
Driver Pydantic schemas.

Password hashes never leave the server.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional


class DriverCreate(BaseModel):
    """Schema for an admin creating a driver."""
    name: str = Field(..., min_length=1, max_length=255)
    phone_number: str = Field(..., min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, description="Initial password for the driver app")
    profile_photo_url: Optional[str] = Field(None, max_length=1024)


class DriverUpdate(BaseModel):
    """Schema for updating a driver."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone_number: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    profile_photo_url: Optional[str] = Field(None, max_length=1024)

    @field_validator("name", "phone_number", "password")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class DriverResponse(BaseModel):
    """Schema for driver response."""
    driver_id: int
    name: str
    phone_number: str
    email: Optional[str] = None
    profile_photo_url: Optional[str] = None

    class Config:
        from_attributes = True

"""
Authentication Pydantic schemas.

Defines request and response schemas for authentication endpoints.
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from bus_backend.app.models.enums import UserRole


class DriverLogin(BaseModel):
    """
    Schema for driver login.

    Used by POST /auth/driver/login from the driver app.
    """
    phone_number: str = Field(..., min_length=1, description="Registered phone number")
    password: str = Field(..., min_length=1, description="Password")


class DriverRegister(BaseModel):
    """Schema for driver self-registration."""
    name: str = Field(..., min_length=1, max_length=255, description="Driver full name")
    phone_number: str = Field(..., min_length=1, max_length=50, description="Unique phone number")
    email: Optional[EmailStr] = Field(default=None, description="Optional email address")
    password: str = Field(..., min_length=6, description="Password (min 6 characters)")


class AdminLogin(BaseModel):
    """Schema for dashboard admin login."""
    email: EmailStr = Field(..., description="Admin email address")
    password: str = Field(..., min_length=1, description="Password")


class DriverProfile(BaseModel):
    """Public driver fields returned alongside a token."""
    driver_id: int
    name: str
    phone_number: str
    email: Optional[str] = None

    class Config:
        from_attributes = True


class AdminProfile(BaseModel):
    """Public admin fields returned alongside a token."""
    admin_id: int
    email: str
    name: Optional[str] = None

    class Config:
        from_attributes = True


class DriverTokenResponse(BaseModel):
    """Returned by driver login/registration."""
    token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    driver: DriverProfile


class AdminTokenResponse(BaseModel):
    """Returned by admin login."""
    token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    admin: AdminProfile


class PrincipalResponse(BaseModel):
    """
    Decoded identity of the caller.

    Used by GET /auth/me.
    """
    sub: str
    role: UserRole
    driver_id: Optional[int] = None
    admin_id: Optional[int] = None

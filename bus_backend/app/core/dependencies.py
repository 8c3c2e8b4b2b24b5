"""
Authentication dependencies for FastAPI.

This module provides dependencies for protecting routes with JWT authentication.
"""

from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from bus_backend.app.core.jwt import decode_access_token
from bus_backend.app.core.token_revocation import is_token_revoked, are_principal_tokens_revoked
from bus_backend.app.db.session import get_db
from bus_backend.app.models.admin import Admin
from bus_backend.app.models.driver import Driver
from bus_backend.app.models.enums import UserRole

# HTTP Bearer security scheme; missing credentials are reported as 401 below
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Return the raw bearer token or raise 401 when absent."""
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Access token required")
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db)
) -> dict:
    """
    FastAPI dependency for JWT authentication.

    Checks:
    1. Validates JWT token signature and expiry
    2. Checks if token has been explicitly revoked (logout)
    3. Checks the token was not issued before a principal-wide revocation (driver removed)
    4. Verifies the admin/driver row still exists

    Returns:
        Decoded token payload ({"sub", "role", "driver_id" | "admin_id", "exp"})

    Raises:
        HTTPException: 401 if authentication fails for any reason
    """
    # 1. Decode and validate JWT
    payload = decode_access_token(token)
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    role = payload.get("role")
    if role == UserRole.DRIVER.value:
        model, principal_id = Driver, payload.get("driver_id")
    elif role == UserRole.ADMIN.value:
        model, principal_id = Admin, payload.get("admin_id")
    else:
        raise _unauthorized("Invalid token payload")

    if not principal_id:
        raise _unauthorized("Invalid token payload")

    # 2. Explicit revocation
    if await is_token_revoked(token):
        raise _unauthorized("Token has been revoked")

    # 3. Principal-wide revocation
    if await are_principal_tokens_revoked(
        payload.get("sub", f"{role}:{principal_id}"), payload.get("iat", 0)
    ):
        raise _unauthorized("Access has been revoked")

    # 4. Principal still exists
    principal = await db.get(model, principal_id)
    if principal is None:
        raise _unauthorized(f"{role.capitalize()} not found")

    return payload

"""
Authentication API endpoints.

Driver login/registration for the driver app, admin login for the dashboard,
plus identity lookup and logout for both.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from bus_backend.app.db.session import get_db
from bus_backend.app.models.driver import Driver
from bus_backend.app.models.admin import Admin
from bus_backend.app.models.enums import UserRole
from bus_backend.app.schemas.auth import (
    DriverLogin, DriverRegister, AdminLogin,
    DriverProfile, AdminProfile,
    DriverTokenResponse, AdminTokenResponse, PrincipalResponse,
)
from bus_backend.app.core.security import get_password_hash, verify_password
from bus_backend.app.core.jwt import create_access_token, token_seconds_remaining
from bus_backend.app.core.dependencies import get_current_user, get_bearer_token
from bus_backend.app.core.exceptions import ConflictError
from bus_backend.app.core.token_revocation import revoke_token
from bus_backend.app.services.audit import log_auth_event, log_event, AuditAction

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _invalid_credentials() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def _driver_token(driver: Driver) -> str:
    return create_access_token(data={
        "sub": f"{UserRole.DRIVER.value}:{driver.driver_id}",
        "role": UserRole.DRIVER.value,
        "driver_id": driver.driver_id,
    })


@router.post("/driver/login", response_model=DriverTokenResponse)
async def driver_login(
    credentials: DriverLogin,
    db: AsyncSession = Depends(get_db)
):
    """
    Login a driver by phone number and return a JWT token.

    Logs successful and failed login attempts for security monitoring.
    """
    result = await db.execute(
        select(Driver).where(Driver.phone_number == credentials.phone_number)
    )
    driver = result.scalar_one_or_none()

    if not driver:
        await log_auth_event(
            db=db,
            action=AuditAction.LOGIN_FAILED,
            role=UserRole.DRIVER.value,
            principal_id=None,
            identifier=credentials.phone_number,
            metadata={"reason": "Driver not found"}
        )
        raise _invalid_credentials()

    if not verify_password(credentials.password, driver.password_hash):
        await log_auth_event(
            db=db,
            action=AuditAction.LOGIN_FAILED,
            role=UserRole.DRIVER.value,
            principal_id=driver.driver_id,
            identifier=driver.phone_number,
            metadata={"reason": "Invalid password"}
        )
        raise _invalid_credentials()

    await log_auth_event(
        db=db,
        action=AuditAction.LOGIN_SUCCESS,
        role=UserRole.DRIVER.value,
        principal_id=driver.driver_id,
        identifier=driver.phone_number,
    )

    return DriverTokenResponse(
        token=_driver_token(driver),
        driver=DriverProfile.model_validate(driver),
    )


@router.post("/driver/register", response_model=DriverTokenResponse, status_code=status.HTTP_201_CREATED)
async def driver_register(
    data: DriverRegister,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new driver and sign them in.

    Phone number and email must both be unused.
    """
    conditions = [Driver.phone_number == data.phone_number]
    if data.email:
        conditions.append(Driver.email == data.email)
    result = await db.execute(select(Driver).where(or_(*conditions)))
    existing = result.scalars().first()

    if existing:
        if existing.phone_number == data.phone_number:
            raise ConflictError("Phone number already registered")
        raise ConflictError("Email already registered")

    driver = Driver(
        name=data.name,
        phone_number=data.phone_number,
        email=data.email,
        password_hash=get_password_hash(data.password),
    )
    db.add(driver)
    await db.commit()
    await db.refresh(driver)

    await log_auth_event(
        db=db,
        action=AuditAction.DRIVER_REGISTERED,
        role=UserRole.DRIVER.value,
        principal_id=driver.driver_id,
        identifier=driver.phone_number,
    )

    return DriverTokenResponse(
        token=_driver_token(driver),
        driver=DriverProfile.model_validate(driver),
    )


@router.post("/admin/login", response_model=AdminTokenResponse)
async def admin_login(
    credentials: AdminLogin,
    db: AsyncSession = Depends(get_db)
):
    """Login a dashboard admin by email."""
    result = await db.execute(select(Admin).where(Admin.email == credentials.email))
    admin = result.scalar_one_or_none()

    if not admin or not verify_password(credentials.password, admin.password_hash):
        await log_auth_event(
            db=db,
            action=AuditAction.LOGIN_FAILED,
            role=UserRole.ADMIN.value,
            principal_id=admin.admin_id if admin else None,
            identifier=credentials.email,
            metadata={"reason": "Invalid password" if admin else "Admin not found"}
        )
        raise _invalid_credentials()

    await log_auth_event(
        db=db,
        action=AuditAction.LOGIN_SUCCESS,
        role=UserRole.ADMIN.value,
        principal_id=admin.admin_id,
        identifier=admin.email,
    )

    token = create_access_token(data={
        "sub": f"{UserRole.ADMIN.value}:{admin.admin_id}",
        "role": UserRole.ADMIN.value,
        "admin_id": admin.admin_id,
    })
    return AdminTokenResponse(token=token, admin=AdminProfile.model_validate(admin))


@router.get("/me", response_model=PrincipalResponse)
async def get_current_principal(current_user: dict = Depends(get_current_user)):
    """Return the decoded identity of the caller."""
    return PrincipalResponse(**current_user)


@router.post("/logout")
async def logout(
    token: str = Depends(get_bearer_token),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Revoke the presented token.

    The blacklist entry lives as long as the token would have.
    """
    await revoke_token(token, current_user["sub"], ttl_seconds=token_seconds_remaining(current_user))
    await log_event(db, AuditAction.LOGOUT, principal=current_user)
    return {"message": "Logged out successfully"}

"""
Driver management endpoints (admin-only).

Password hashes are stored but never returned.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, update, func
from bus_backend.app.db.session import get_db
from bus_backend.app.models.driver import Driver
from bus_backend.app.models.trip import Trip
from bus_backend.app.models.passenger_report import PassengerReport
from bus_backend.app.models.enums import UserRole
from bus_backend.app.schemas.driver import DriverCreate, DriverUpdate, DriverResponse
from bus_backend.app.core.guards import require_admin
from bus_backend.app.core.security import get_password_hash
from bus_backend.app.core.exceptions import ResourceNotFoundError, ConflictError
from bus_backend.app.core.token_revocation import revoke_all_principal_tokens
from bus_backend.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/drivers", tags=["Drivers"])


async def _get_driver(db: AsyncSession, driver_id: int) -> Driver:
    driver = await db.get(Driver, driver_id)
    if driver is None:
        raise ResourceNotFoundError("Driver", driver_id)
    return driver


@router.get("", response_model=List[DriverResponse])
async def list_drivers(
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(select(Driver).order_by(Driver.name))
    return result.scalars().all()


@router.get("/{driver_id}", response_model=DriverResponse)
async def get_driver(
    driver_id: int,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await _get_driver(db, driver_id)


@router.post("", response_model=DriverResponse, status_code=status.HTTP_201_CREATED)
async def create_driver(
    data: DriverCreate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Create a driver; phone number and email must be unused."""
    values = data.model_dump(exclude={"password"})
    driver = Driver(
        **values,
        password_hash=get_password_hash(data.password) if data.password else None,
    )
    db.add(driver)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("A driver with this phone number or email already exists")
    await db.refresh(driver)
    return driver


@router.put("/{driver_id}", response_model=DriverResponse)
async def update_driver(
    driver_id: int,
    data: DriverUpdate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    driver = await _get_driver(db, driver_id)
    changes = data.model_dump(exclude_unset=True)
    password = changes.pop("password", None)
    for field, value in changes.items():
        setattr(driver, field, value)
    if password:
        driver.password_hash = get_password_hash(password)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("A driver with this phone number or email already exists")
    await db.refresh(driver)
    return driver


@router.delete("/{driver_id}")
async def delete_driver(
    driver_id: int,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a driver and revoke their outstanding tokens.

    Refused with 409 while any trip references the driver.
    """
    driver = await _get_driver(db, driver_id)

    trip_count = (await db.execute(
        select(func.count(Trip.trip_id)).where(Trip.driver_id == driver_id)
    )).scalar()
    if trip_count:
        raise ConflictError(
            "Cannot delete driver: assigned to existing trips",
            details={"driver_id": driver_id, "trips": trip_count},
        )

    await db.execute(
        update(PassengerReport).where(PassengerReport.driver_id == driver_id).values(driver_id=None)
    )
    await db.delete(driver)
    await db.commit()

    await revoke_all_principal_tokens(f"{UserRole.DRIVER.value}:{driver_id}")
    await log_event(db, AuditAction.DRIVER_DELETED, principal=admin, metadata={"driver_id": driver_id})
    return {"message": "Driver deleted successfully", "driver_id": driver_id}

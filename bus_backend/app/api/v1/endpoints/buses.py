"""
Bus API endpoints.

Fleet CRUD plus the driver app's location reporting.
"""

import logging
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, update, func
from bus_backend.app.db.session import get_db
from bus_backend.app.models.bus import Bus
from bus_backend.app.models.trip import Trip
from bus_backend.app.models.passenger_report import PassengerReport
from bus_backend.app.schemas.bus import (
    BusCreate, BusUpdate, BusResponse, BusLocationUpdate, BusLocationResponse
)
from bus_backend.app.core.guards import require_admin, require_operator
from bus_backend.app.core.exceptions import ResourceNotFoundError, ConflictError
from bus_backend.app.services.audit import log_event, AuditAction
from bus_backend.app.services.realtime import TripChannelHub, get_hub

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/buses", tags=["Buses"])


async def _get_bus(db: AsyncSession, bus_id: int) -> Bus:
    bus = await db.get(Bus, bus_id)
    if bus is None:
        raise ResourceNotFoundError("Bus", bus_id)
    return bus


@router.get("", response_model=List[BusResponse])
async def list_buses(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Bus).order_by(Bus.bus_no))
    return result.scalars().all()


@router.get("/{bus_id}", response_model=BusResponse)
async def get_bus(bus_id: int, db: AsyncSession = Depends(get_db)):
    return await _get_bus(db, bus_id)


@router.post("", response_model=BusResponse, status_code=status.HTTP_201_CREATED)
async def create_bus(
    data: BusCreate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Register a bus; bus_no must be unique."""
    bus = Bus(bus_no=data.bus_no)
    db.add(bus)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Bus number '{data.bus_no}' already exists")
    await db.refresh(bus)
    return bus


@router.put("/{bus_id}", response_model=BusResponse)
async def update_bus(
    bus_id: int,
    data: BusUpdate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    bus = await _get_bus(db, bus_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(bus, field, value)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Bus number '{data.bus_no}' already exists")
    await db.refresh(bus)
    return bus


@router.delete("/{bus_id}")
async def delete_bus(
    bus_id: int,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a bus.

    Refused with 409 while any trip references it; the row is left intact.
    """
    bus = await _get_bus(db, bus_id)

    trip_count = (await db.execute(
        select(func.count(Trip.trip_id)).where(Trip.bus_id == bus_id)
    )).scalar()
    if trip_count:
        raise ConflictError(
            "Cannot delete bus: it is referenced by existing trips",
            details={"bus_id": bus_id, "trips": trip_count},
        )

    await db.execute(
        update(PassengerReport).where(PassengerReport.bus_id == bus_id).values(bus_id=None)
    )
    await db.delete(bus)
    await db.commit()

    await log_event(db, AuditAction.BUS_DELETED, principal=admin, metadata={"bus_id": bus_id})
    return {"message": "Bus deleted successfully", "bus_id": bus_id}


@router.post("/{bus_id}/location", response_model=BusLocationResponse)
async def update_bus_location(
    bus_id: int,
    data: BusLocationUpdate,
    current_user: dict = Depends(require_operator),
    db: AsyncSession = Depends(get_db),
    hub: TripChannelHub = Depends(get_hub)
):
    """
    Record the bus's current position.

    Overwrites the previous coordinates; no history is kept. With a trip_id
    the update is also pushed to listeners of that trip's channel.
    """
    bus = await _get_bus(db, bus_id)

    bus.current_latitude = data.latitude
    bus.current_longitude = data.longitude
    bus.current_speed_kmh = data.speed
    bus.last_updated = datetime.now(timezone.utc)
    if data.trip_id is not None:
        bus.current_trip_id = data.trip_id

    await db.commit()
    await db.refresh(bus)

    if data.trip_id is not None:
        await hub.publish_location(data.trip_id, {
            "tripId": data.trip_id,
            "busId": bus.bus_id,
            "latitude": data.latitude,
            "longitude": data.longitude,
            "speed": data.speed,
            "timestamp": bus.last_updated.isoformat(),
        })

    return BusLocationResponse(
        message="Location updated successfully",
        bus=BusResponse.model_validate(bus),
    )

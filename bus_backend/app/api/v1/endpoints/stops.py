"""
Stop API endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from bus_backend.app.db.session import get_db
from bus_backend.app.models.stop import Stop
from bus_backend.app.models.route import RouteStop
from bus_backend.app.models.trip import TripStopTime
from bus_backend.app.schemas.stop import StopCreate, StopUpdate, StopResponse
from bus_backend.app.core.guards import require_admin
from bus_backend.app.core.exceptions import ResourceNotFoundError, ConflictError

router = APIRouter(prefix="/stops", tags=["Stops"])


async def _get_stop(db: AsyncSession, stop_id: int) -> Stop:
    stop = await db.get(Stop, stop_id)
    if stop is None:
        raise ResourceNotFoundError("Stop", stop_id)
    return stop


@router.get("", response_model=List[StopResponse])
async def list_stops(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Stop).order_by(Stop.stop_name))
    return result.scalars().all()


@router.get("/search/{query}", response_model=List[StopResponse])
async def search_stops(query: str, db: AsyncSession = Depends(get_db)):
    """Case-insensitive substring search on stop names."""
    result = await db.execute(
        select(Stop).where(Stop.stop_name.ilike(f"%{query}%")).order_by(Stop.stop_name)
    )
    return result.scalars().all()


@router.get("/{stop_id}", response_model=StopResponse)
async def get_stop(stop_id: int, db: AsyncSession = Depends(get_db)):
    return await _get_stop(db, stop_id)


@router.post("", response_model=StopResponse, status_code=status.HTTP_201_CREATED)
async def create_stop(
    data: StopCreate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    stop = Stop(**data.model_dump())
    db.add(stop)
    await db.commit()
    await db.refresh(stop)
    return stop


@router.put("/{stop_id}", response_model=StopResponse)
async def update_stop(
    stop_id: int,
    data: StopUpdate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    stop = await _get_stop(db, stop_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(stop, field, value)
    await db.commit()
    await db.refresh(stop)
    return stop


@router.delete("/{stop_id}")
async def delete_stop(
    stop_id: int,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Delete a stop that no route uses; recorded trip times at it go too."""
    stop = await _get_stop(db, stop_id)

    in_use = (await db.execute(
        select(func.count(RouteStop.route_stop_id)).where(RouteStop.stop_id == stop_id)
    )).scalar()
    if in_use:
        raise ConflictError(
            "Cannot delete stop: it is part of one or more routes",
            details={"stop_id": stop_id, "routes": in_use},
        )

    await db.execute(delete(TripStopTime).where(TripStopTime.stop_id == stop_id))
    await db.delete(stop)
    await db.commit()
    return {"message": "Stop deleted successfully", "stop_id": stop_id}

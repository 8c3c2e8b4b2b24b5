"""
Schedule API endpoints.

A schedule is a daily departure time of a route.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from bus_backend.app.db.session import get_db
from bus_backend.app.models.schedule import Schedule
from bus_backend.app.models.route import Route
from bus_backend.app.models.trip import Trip
from bus_backend.app.schemas.schedule import ScheduleCreate, ScheduleResponse
from bus_backend.app.core.guards import require_admin
from bus_backend.app.core.exceptions import ResourceNotFoundError, ConflictError

router = APIRouter(prefix="/schedules", tags=["Schedules"])


@router.get("", response_model=List[ScheduleResponse])
async def list_schedules(
    route_id: Optional[int] = Query(None, description="Only schedules of this route"),
    db: AsyncSession = Depends(get_db)
):
    """Schedules ordered by route name, then departure time."""
    query = (
        select(Schedule, Route.route_name)
        .join(Route, Route.route_id == Schedule.route_id)
        .order_by(Route.route_name, Schedule.start_time)
    )
    if route_id is not None:
        query = query.where(Schedule.route_id == route_id)

    result = await db.execute(query)
    return [
        ScheduleResponse(
            schedule_id=schedule.schedule_id,
            route_id=schedule.route_id,
            start_time=schedule.start_time,
            route_name=route_name,
        )
        for schedule, route_name in result.all()
    ]


@router.post("", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    data: ScheduleCreate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    route = await db.get(Route, data.route_id)
    if route is None:
        raise ResourceNotFoundError("Route", data.route_id)

    schedule = Schedule(route_id=data.route_id, start_time=data.start_time)
    db.add(schedule)
    await db.commit()
    await db.refresh(schedule)

    return ScheduleResponse(
        schedule_id=schedule.schedule_id,
        route_id=schedule.route_id,
        start_time=schedule.start_time,
        route_name=route.route_name,
    )


@router.delete("/{schedule_id}")
async def delete_schedule(
    schedule_id: int,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    schedule = await db.get(Schedule, schedule_id)
    if schedule is None:
        raise ResourceNotFoundError("Schedule", schedule_id)

    trip_count = (await db.execute(
        select(func.count(Trip.trip_id)).where(Trip.schedule_id == schedule_id)
    )).scalar()
    if trip_count:
        raise ConflictError(
            "Cannot delete schedule: trips exist for it",
            details={"schedule_id": schedule_id, "trips": trip_count},
        )

    await db.delete(schedule)
    await db.commit()
    return {"message": "Schedule deleted successfully", "schedule_id": schedule_id}

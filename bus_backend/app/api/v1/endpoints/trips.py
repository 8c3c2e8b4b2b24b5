"""
Trip API endpoints.

Planning (admin), execution from the driver app, stop timelines with
ETAs, and the daily roll-over.
"""

from datetime import date
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from bus_backend.app.db.session import get_db
from bus_backend.app.models.trip import Trip
from bus_backend.app.models.enums import TripStatus
from bus_backend.app.schemas.trip import (
    TripCreate, TripUpdate, TripStatusUpdate,
    TripResponse, TripDetailResponse, TripActionResponse,
    TripStopTimeline, StopEventResponse, DailyTripsResponse,
)
from bus_backend.app.core.guards import require_admin, require_driver, require_operator
from bus_backend.app.services.audit import log_event, AuditAction
from bus_backend.app.services.trip_service import TripService

router = APIRouter(prefix="/trips", tags=["Trips"])


async def _change_status(db: AsyncSession, trip_id: int, new_status: str, principal: dict, message: str) -> TripActionResponse:
    trip = await TripService.get_trip(db, trip_id)
    previous = trip.status
    trip = await TripService.set_status(db, trip, new_status)
    await log_event(
        db, AuditAction.TRIP_STATUS_CHANGED, principal=principal,
        metadata={"trip_id": trip_id, "from": previous, "to": new_status},
    )
    return TripActionResponse(message=message, trip_id=trip.trip_id, status=trip.status)


@router.get("", response_model=List[TripDetailResponse])
async def list_trips(
    trip_date: Optional[date] = Query(None, description="Only trips on this date"),
    status: Optional[str] = Query(None, description="Only trips with this status"),
    driver_id: Optional[int] = Query(None, description="Only trips of this driver"),
    db: AsyncSession = Depends(get_db)
):
    return await TripService.list_trips(db, trip_date=trip_date, status=status, driver_id=driver_id)


@router.get("/driver/me", response_model=List[TripDetailResponse])
async def list_my_trips(
    trip_date: Optional[date] = Query(None),
    driver: dict = Depends(require_driver),
    db: AsyncSession = Depends(get_db)
):
    """Trips assigned to the calling driver."""
    return await TripService.list_trips(db, trip_date=trip_date, driver_id=driver["driver_id"])


@router.post("/generate-daily", response_model=DailyTripsResponse)
async def generate_daily_trips(
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Create today's trips from yesterday's.

    Every schedule that ran yesterday and has no trip today gets one, with
    the same bus and driver.
    """
    today = date.today()
    created = await TripService.generate_daily_trips(db, today=today)
    await log_event(db, AuditAction.TRIPS_GENERATED, principal=admin, metadata={"date": today.isoformat(), "created": created})
    return DailyTripsResponse(
        created=created,
        date=today,
        message=f"Generated {created} trips for {today.isoformat()}",
    )


@router.get("/{trip_id}", response_model=TripDetailResponse)
async def get_trip(trip_id: int, db: AsyncSession = Depends(get_db)):
    return await TripService.get_trip_detail(db, trip_id)


@router.post(
    "",
    response_model=Union[List[TripResponse], TripResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_trips(
    data: Union[List[TripCreate], TripCreate],
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Create one trip, or several when a list is posted.

    Every referenced schedule, bus and driver must exist; nothing is
    written otherwise.
    """
    items = data if isinstance(data, list) else [data]
    for item in items:
        await TripService.ensure_references(
            db, schedule_id=item.schedule_id, bus_id=item.bus_id, driver_id=item.driver_id
        )

    trips = [Trip(**item.model_dump()) for item in items]
    db.add_all(trips)
    await db.commit()
    for trip in trips:
        await db.refresh(trip)

    if isinstance(data, list):
        return [TripResponse.model_validate(trip) for trip in trips]
    return TripResponse.model_validate(trips[0])


@router.put("/{trip_id}", response_model=TripResponse)
async def update_trip(
    trip_id: int,
    data: TripUpdate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    trip = await TripService.get_trip(db, trip_id)
    changes = data.model_dump(exclude_unset=True)
    await TripService.ensure_references(db, bus_id=changes.get("bus_id"), driver_id=changes.get("driver_id"))

    for field, value in changes.items():
        setattr(trip, field, value)
    await db.commit()
    await db.refresh(trip)
    return trip


@router.delete("/{trip_id}")
async def delete_trip(
    trip_id: int,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await TripService.get_trip(db, trip_id)
    await TripService.delete_trip(db, trip_id)
    return {"message": "Trip deleted successfully", "trip_id": trip_id}


@router.patch("/{trip_id}/status", response_model=TripActionResponse)
async def update_trip_status(
    trip_id: int,
    data: TripStatusUpdate,
    current_user: dict = Depends(require_operator),
    db: AsyncSession = Depends(get_db)
):
    """Set any status value; the previous status is not checked."""
    return await _change_status(db, trip_id, data.status, current_user, "Trip status updated")


@router.post("/{trip_id}/start", response_model=TripActionResponse)
async def start_trip(
    trip_id: int,
    current_user: dict = Depends(require_operator),
    db: AsyncSession = Depends(get_db)
):
    return await _change_status(db, trip_id, TripStatus.IN_PROGRESS.value, current_user, "Trip started")


@router.patch("/{trip_id}/pause", response_model=TripActionResponse)
async def pause_trip(
    trip_id: int,
    current_user: dict = Depends(require_operator),
    db: AsyncSession = Depends(get_db)
):
    return await _change_status(db, trip_id, TripStatus.PAUSED.value, current_user, "Trip paused")


@router.patch("/{trip_id}/resume", response_model=TripActionResponse)
async def resume_trip(
    trip_id: int,
    current_user: dict = Depends(require_operator),
    db: AsyncSession = Depends(get_db)
):
    return await _change_status(db, trip_id, TripStatus.IN_PROGRESS.value, current_user, "Trip resumed")


@router.post("/{trip_id}/complete", response_model=TripActionResponse)
async def complete_trip(
    trip_id: int,
    current_user: dict = Depends(require_operator),
    db: AsyncSession = Depends(get_db)
):
    return await _change_status(db, trip_id, TripStatus.COMPLETED.value, current_user, "Trip completed")


@router.get("/{trip_id}/stops", response_model=List[TripStopTimeline])
async def get_trip_timeline(trip_id: int, db: AsyncSession = Depends(get_db)):
    """Route stops in order with actual times and predicted arrivals."""
    return await TripService.get_timeline(db, trip_id)


@router.post("/{trip_id}/stops/{stop_id}/arrive", response_model=StopEventResponse)
async def arrive_at_stop(
    trip_id: int,
    stop_id: int,
    current_user: dict = Depends(require_operator),
    db: AsyncSession = Depends(get_db)
):
    stop_time = await TripService.record_stop_event(db, trip_id, stop_id)
    return StopEventResponse(
        message="Arrival recorded",
        trip_stop_id=stop_time.trip_stop_id,
        recorded_at=stop_time.actual_arrival_time,
    )


@router.post("/{trip_id}/stops/{stop_id}/depart", response_model=StopEventResponse)
async def depart_from_stop(
    trip_id: int,
    stop_id: int,
    current_user: dict = Depends(require_operator),
    db: AsyncSession = Depends(get_db)
):
    stop_time = await TripService.record_stop_event(db, trip_id, stop_id, departed=True)
    return StopEventResponse(
        message="Departure recorded",
        trip_stop_id=stop_time.trip_stop_id,
        recorded_at=stop_time.actual_departure_time,
    )

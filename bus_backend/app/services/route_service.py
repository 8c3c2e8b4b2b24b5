"""
Route persistence helpers.

Route creation spans two tables. The route row is committed first; if the
stop-sequence insert then fails, the route row is deleted again so no
orphaned route is left behind. There is no idempotence key and no retry.
"""

import logging
from typing import List, Tuple

from sqlalchemy import select, delete, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bus_backend.app.core.exceptions import AppException, ValidationFailedError
from bus_backend.app.models.bus import Bus
from bus_backend.app.models.route import Route, RouteStop
from bus_backend.app.models.stop import Stop
from bus_backend.app.models.schedule import Schedule
from bus_backend.app.models.trip import Trip, TripStopTime
from bus_backend.app.models.passenger_report import PassengerReport
from bus_backend.app.schemas.route import RouteCreate, RouteStopInput

logger = logging.getLogger(__name__)

MIN_ROUTE_STOPS = 2


class RouteStopsInsertError(AppException):
    """Raised after the compensating delete when stop rows could not be stored."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(
            message=message,
            error_code="ERR_ROUTE_STOPS",
            status_code=status_code,
        )


def _route_stop_rows(route_id: int, stops: List[RouteStopInput]) -> List[RouteStop]:
    return [
        RouteStop(
            route_id=route_id,
            stop_id=item.stop_id,
            stop_sequence=index + 1,
            time_offset_from_start=item.time_offset_from_start,
        )
        for index, item in enumerate(stops)
    ]


async def create_route_with_stops(db: AsyncSession, data: RouteCreate) -> Tuple[Route, int]:
    """
    Insert a route and, when given, its stop sequence.

    Returns:
        (route, number of stop rows inserted)

    Raises:
        ValidationFailedError: fewer than two stops were supplied
        RouteStopsInsertError: the stop insert failed; the route row was removed
    """
    stops = data.stop_inputs()
    if data.stops is not None and len(stops) < MIN_ROUTE_STOPS:
        raise ValidationFailedError("At least two valid stop IDs are required to create a route.")

    # 1. Route row
    route = Route(route_name=data.route_name, route_no=data.route_no)
    db.add(route)
    await db.commit()
    await db.refresh(route)

    if not stops:
        return route, 0

    # 2. Stop sequence, with compensating delete on failure
    route_id = route.route_id
    try:
        db.add_all(_route_stop_rows(route_id, stops))
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        await db.execute(delete(Route).where(Route.route_id == route_id))
        await db.commit()
        logger.warning("route %s removed after stop insert failure: %s", route_id, exc)
        reason = str(getattr(exc, "orig", None) or exc)
        status_code = 400 if isinstance(exc, IntegrityError) else 500
        raise RouteStopsInsertError(f"Failed to insert route stops: {reason}", status_code=status_code)

    return route, len(stops)


async def replace_route_stops(db: AsyncSession, route_id: int, stops: List[RouteStopInput]) -> int:
    """Swap a route's stop sequence for a new one in a single transaction."""
    try:
        await db.execute(delete(RouteStop).where(RouteStop.route_id == route_id))
        await db.flush()
        db.add_all(_route_stop_rows(route_id, stops))
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ValidationFailedError(f"Failed to replace route stops: {getattr(exc, 'orig', None) or exc}")
    return len(stops)


async def get_route_stops(db: AsyncSession, route_id: int) -> List[dict]:
    """Ordered stops of a route with their sequence and offsets."""
    result = await db.execute(
        select(Stop, RouteStop.stop_sequence, RouteStop.time_offset_from_start)
        .join(RouteStop, RouteStop.stop_id == Stop.stop_id)
        .where(RouteStop.route_id == route_id)
        .order_by(RouteStop.stop_sequence)
    )
    return [
        {
            "stop_id": stop.stop_id,
            "stop_name": stop.stop_name,
            "latitude": stop.latitude,
            "longitude": stop.longitude,
            "geofence_radius_meters": stop.geofence_radius_meters,
            "stop_sequence": sequence,
            "time_offset_from_start": offset,
        }
        for stop, sequence, offset in result.all()
    ]


async def delete_route_cascade(db: AsyncSession, route_id: int) -> None:
    """
    Delete a route together with its schedules, their trips and its stop sequence.

    Passenger reports keep existing with their trip/route references cleared,
    and buses running one of the deleted trips are detached from it.
    """
    schedule_ids = select(Schedule.schedule_id).where(Schedule.route_id == route_id)
    trip_ids = select(Trip.trip_id).where(Trip.schedule_id.in_(schedule_ids))

    await db.execute(delete(TripStopTime).where(TripStopTime.trip_id.in_(trip_ids)))
    await db.execute(
        update(PassengerReport).where(PassengerReport.trip_id.in_(trip_ids)).values(trip_id=None)
    )
    await db.execute(
        update(PassengerReport).where(PassengerReport.route_id == route_id).values(route_id=None)
    )
    await db.execute(
        update(Bus).where(Bus.current_trip_id.in_(trip_ids)).values(current_trip_id=None)
    )
    await db.execute(delete(Trip).where(Trip.schedule_id.in_(schedule_ids)))
    await db.execute(delete(Schedule).where(Schedule.route_id == route_id))
    await db.execute(delete(RouteStop).where(RouteStop.route_id == route_id))
    await db.execute(delete(Route).where(Route.route_id == route_id))
    await db.commit()

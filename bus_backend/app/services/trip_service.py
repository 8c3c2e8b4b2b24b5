"""
Trip Service.

Joins, timelines, stop events and the daily trip roll-over.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional, List

from sqlalchemy import select, delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from bus_backend.app.core.exceptions import ResourceNotFoundError
from bus_backend.app.models.bus import Bus
from bus_backend.app.models.driver import Driver
from bus_backend.app.models.route import Route, RouteStop
from bus_backend.app.models.schedule import Schedule
from bus_backend.app.models.stop import Stop
from bus_backend.app.models.trip import Trip, TripStopTime
from bus_backend.app.models.passenger_report import PassengerReport
from bus_backend.app.models.enums import TripStatus
from bus_backend.app.services.eta import predict_arrivals

logger = logging.getLogger(__name__)


def _detail_query():
    return (
        select(
            Trip,
            Bus.bus_no,
            Driver.name.label("driver_name"),
            Schedule.start_time,
            Route.route_name,
            Route.route_id,
        )
        .outerjoin(Bus, Trip.bus_id == Bus.bus_id)
        .outerjoin(Driver, Trip.driver_id == Driver.driver_id)
        .outerjoin(Schedule, Trip.schedule_id == Schedule.schedule_id)
        .outerjoin(Route, Schedule.route_id == Route.route_id)
    )


def _detail_row(row) -> dict:
    trip = row[0]
    return {
        "trip_id": trip.trip_id,
        "schedule_id": trip.schedule_id,
        "bus_id": trip.bus_id,
        "driver_id": trip.driver_id,
        "trip_date": trip.trip_date,
        "status": trip.status,
        "bus_no": row.bus_no,
        "driver_name": row.driver_name,
        "start_time": row.start_time,
        "route_name": row.route_name,
        "route_id": row.route_id,
    }


class TripService:

    @staticmethod
    async def list_trips(
        db: AsyncSession,
        trip_date: Optional[date] = None,
        status: Optional[str] = None,
        driver_id: Optional[int] = None,
    ) -> List[dict]:
        """Trips joined with bus number, driver name, start time and route."""
        query = _detail_query()
        if trip_date:
            query = query.where(Trip.trip_date == trip_date)
        if status:
            query = query.where(Trip.status == status)
        if driver_id:
            query = query.where(Trip.driver_id == driver_id)
        query = query.order_by(Trip.trip_date, Schedule.start_time, Trip.trip_id)

        result = await db.execute(query)
        return [_detail_row(row) for row in result.all()]

    @staticmethod
    async def get_trip_detail(db: AsyncSession, trip_id: int) -> dict:
        result = await db.execute(_detail_query().where(Trip.trip_id == trip_id))
        row = result.first()
        if row is None:
            raise ResourceNotFoundError("Trip", trip_id)
        return _detail_row(row)

    @staticmethod
    async def get_trip(db: AsyncSession, trip_id: int) -> Trip:
        trip = await db.get(Trip, trip_id)
        if trip is None:
            raise ResourceNotFoundError("Trip", trip_id)
        return trip

    @staticmethod
    async def ensure_references(db: AsyncSession, schedule_id=None, bus_id=None, driver_id=None) -> None:
        """Raise 404 for a referenced schedule/bus/driver that does not exist."""
        for model, key, label in (
            (Schedule, schedule_id, "Schedule"),
            (Bus, bus_id, "Bus"),
            (Driver, driver_id, "Driver"),
        ):
            if key is not None and await db.get(model, key) is None:
                raise ResourceNotFoundError(label, key)

    @staticmethod
    async def set_status(db: AsyncSession, trip: Trip, status: str) -> Trip:
        """
        Write a trip status without checking the previous value.

        Starting a trip points its bus at it; completing clears the pointer.
        """
        previous = trip.status
        trip.status = status

        if status == TripStatus.IN_PROGRESS.value:
            await db.execute(
                update(Bus).where(Bus.bus_id == trip.bus_id).values(current_trip_id=trip.trip_id)
            )
        elif status == TripStatus.COMPLETED.value:
            await db.execute(
                update(Bus)
                .where(Bus.bus_id == trip.bus_id, Bus.current_trip_id == trip.trip_id)
                .values(current_trip_id=None)
            )

        await db.commit()
        await db.refresh(trip)
        logger.info("trip %s status %r -> %r", trip.trip_id, previous, status)
        return trip

    @staticmethod
    async def delete_trip(db: AsyncSession, trip_id: int) -> None:
        """Delete a trip, its stop times, and detach passenger reports."""
        await db.execute(delete(TripStopTime).where(TripStopTime.trip_id == trip_id))
        await db.execute(
            update(PassengerReport).where(PassengerReport.trip_id == trip_id).values(trip_id=None)
        )
        await db.execute(
            update(Bus).where(Bus.current_trip_id == trip_id).values(current_trip_id=None)
        )
        await db.execute(delete(Trip).where(Trip.trip_id == trip_id))
        await db.commit()

    @staticmethod
    async def record_stop_event(db: AsyncSession, trip_id: int, stop_id: int, departed: bool = False) -> TripStopTime:
        """
        Stamp the arrival (or departure) time of a trip at a stop.

        A repeated event overwrites the earlier timestamp.
        """
        await TripService.get_trip(db, trip_id)
        if await db.get(Stop, stop_id) is None:
            raise ResourceNotFoundError("Stop", stop_id)

        result = await db.execute(
            select(TripStopTime).where(TripStopTime.trip_id == trip_id, TripStopTime.stop_id == stop_id)
        )
        stop_time = result.scalar_one_or_none()
        if stop_time is None:
            stop_time = TripStopTime(trip_id=trip_id, stop_id=stop_id)
            db.add(stop_time)

        now = datetime.now(timezone.utc)
        if departed:
            stop_time.actual_departure_time = now
        else:
            stop_time.actual_arrival_time = now

        await db.commit()
        await db.refresh(stop_time)
        return stop_time

    @staticmethod
    async def get_timeline(db: AsyncSession, trip_id: int) -> List[dict]:
        """
        The trip's route stops in sequence with recorded times and ETAs.

        ETAs are computed for stops not yet reached, from the bus's last
        reported position; without a position no prediction is made.
        """
        trip = await TripService.get_trip(db, trip_id)
        schedule = await db.get(Schedule, trip.schedule_id)
        bus = await db.get(Bus, trip.bus_id)

        result = await db.execute(
            select(
                Stop,
                RouteStop.stop_sequence,
                RouteStop.time_offset_from_start,
                TripStopTime.actual_arrival_time,
                TripStopTime.actual_departure_time,
                TripStopTime.predicted_arrival_time,
            )
            .join(RouteStop, RouteStop.stop_id == Stop.stop_id)
            .outerjoin(
                TripStopTime,
                (TripStopTime.trip_id == trip_id) & (TripStopTime.stop_id == Stop.stop_id),
            )
            .where(RouteStop.route_id == schedule.route_id)
            .order_by(RouteStop.stop_sequence)
        )
        rows = result.all()

        etas = {}
        if bus is not None and bus.current_latitude is not None and bus.current_longitude is not None:
            pending = [
                (stop.stop_id, stop.latitude, stop.longitude)
                for stop, _, _, arrived, _, _ in rows
                if arrived is None
            ]
            etas = predict_arrivals(
                (bus.current_latitude, bus.current_longitude), pending, bus.current_speed_kmh
            )

        timeline = []
        for stop, sequence, offset, arrived, departed, predicted in rows:
            timeline.append({
                "stop_id": stop.stop_id,
                "stop_name": stop.stop_name,
                "latitude": stop.latitude,
                "longitude": stop.longitude,
                "geofence_radius_meters": stop.geofence_radius_meters,
                "stop_sequence": sequence,
                "time_offset_from_start": offset,
                "actual_arrival_time": arrived,
                "actual_departure_time": departed,
                "predicted_arrival_time": etas.get(stop.stop_id, predicted),
            })
        return timeline

    @staticmethod
    async def generate_daily_trips(db: AsyncSession, today: Optional[date] = None) -> int:
        """
        Roll yesterday's trips forward.

        For every schedule that ran yesterday and has no trip today, create
        today's trip with the same bus and driver, status Scheduled.

        Returns:
            Number of trips created
        """
        today = today or date.today()
        yesterday = today - timedelta(days=1)

        schedules = (await db.execute(select(Schedule.schedule_id))).scalars().all()
        created = 0
        for schedule_id in schedules:
            previous = (await db.execute(
                select(Trip)
                .where(Trip.schedule_id == schedule_id, Trip.trip_date == yesterday)
                .order_by(Trip.trip_id)
                .limit(1)
            )).scalar_one_or_none()
            if previous is None:
                continue

            existing = (await db.execute(
                select(Trip.trip_id)
                .where(Trip.schedule_id == schedule_id, Trip.trip_date == today)
                .limit(1)
            )).scalar_one_or_none()
            if existing is not None:
                continue

            db.add(Trip(
                schedule_id=schedule_id,
                bus_id=previous.bus_id,
                driver_id=previous.driver_id,
                trip_date=today,
                status=TripStatus.SCHEDULED.value,
            ))
            created += 1

        await db.commit()
        logger.info("generated %d trips for %s", created, today)
        return created

"""
Database seeding script for sample fleet data.

Creates two routes with their stops, buses, drivers, schedules and today's
trips, plus the default admin. Run with:

    python -m bus_backend.seed_data
"""

import asyncio
from datetime import date

from sqlalchemy import select

from bus_backend.app.db.session import AsyncSessionLocal, engine, Base
from bus_backend.app.models.route import Route, RouteStop
from bus_backend.app.models.stop import Stop
from bus_backend.app.models.bus import Bus
from bus_backend.app.models.driver import Driver
from bus_backend.app.models.schedule import Schedule
from bus_backend.app.models.trip import Trip, TripStopTime
from bus_backend.app.models.enums import TripStatus
from bus_backend.app.core.security import get_password_hash
from bus_backend.app.services.bootstrap import ensure_default_admin

# Registered with Base so create_all builds every table
from bus_backend.app.models.admin import Admin
from bus_backend.app.models.announcement import Announcement
from bus_backend.app.models.passenger_report import PassengerReport
from bus_backend.app.models.audit_log import AuditLog

STOPS = [
    ("City Center", 12.2958, 76.6394),
    ("Main Street", 12.3000, 76.6450),
    ("Airport", 12.3200, 76.6800),
    ("University Gate", 12.2800, 76.6200),
    ("Shopping Mall", 12.2900, 76.6300),
]

# route_name, route_no, [(stop_name, minutes from start)], departure times
ROUTES = [
    ("City Center to Airport", "150A", [("City Center", 0), ("Main Street", 15), ("Airport", 45)], ["08:00", "14:00"]),
    ("University to Mall", "201B", [("University Gate", 0), ("Shopping Mall", 20)], ["09:00"]),
]

BUSES = ["150A-01", "201B-01"]

DRIVERS = [
    ("John Driver", "+91-9876543210", "driver123"),
    ("Jane Driver", "+91-9876543211", "driver123"),
]


async def seed_data():
    """
    Insert the sample data set.

    Skipped entirely when any route already exists.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting sample data seeding...")

        if await ensure_default_admin(db):
            print("✅ Created default admin")

        existing = (await db.execute(select(Route.route_id).limit(1))).scalar_one_or_none()
        if existing is not None:
            print("ℹ️  Routes already exist, skipping sample data")
            return

        stops = {}
        for name, lat, lon in STOPS:
            stops[name] = Stop(stop_name=name, latitude=lat, longitude=lon)
            db.add(stops[name])

        buses = [Bus(bus_no=bus_no) for bus_no in BUSES]
        drivers = [
            Driver(name=name, phone_number=phone, password_hash=get_password_hash(password))
            for name, phone, password in DRIVERS
        ]
        db.add_all(buses + drivers)
        await db.flush()

        first_departures = []
        for route_name, route_no, sequence, departures in ROUTES:
            route = Route(route_name=route_name, route_no=route_no)
            db.add(route)
            await db.flush()

            for position, (stop_name, offset) in enumerate(sequence, start=1):
                db.add(RouteStop(
                    route_id=route.route_id,
                    stop_id=stops[stop_name].stop_id,
                    stop_sequence=position,
                    time_offset_from_start=offset,
                ))

            schedules = [Schedule(route_id=route.route_id, start_time=start) for start in departures]
            db.add_all(schedules)
            await db.flush()
            first_departures.append(schedules[0])
            print(f"✅ Created route {route_no} with {len(sequence)} stops")

        today = date.today()
        for schedule, bus, driver, status in zip(
            first_departures, buses, drivers, [TripStatus.SCHEDULED, TripStatus.IN_PROGRESS]
        ):
            db.add(Trip(
                schedule_id=schedule.schedule_id,
                bus_id=bus.bus_id,
                driver_id=driver.driver_id,
                trip_date=today,
                status=status.value,
            ))

        await db.commit()

        print("\n🎉 Sample data seeding completed successfully!")
        print("\nDriver logins:")
        for name, phone, password in DRIVERS:
            print(f"  - {name}: {phone} / {password}")


if __name__ == "__main__":
    asyncio.run(seed_data())

"""
API Router.

Aggregates all REST endpoints mounted under the API prefix.
"""

from fastapi import APIRouter
from bus_backend.app.api.v1.endpoints import (
    auth, admin, buses, routes, stops, drivers,
    schedules, trips, announcements, reports,
)

router = APIRouter()

# Authentication
router.include_router(auth.router)

# Fleet data
router.include_router(buses.router)
router.include_router(routes.router)
router.include_router(stops.router)
router.include_router(drivers.router)
router.include_router(schedules.router)

# Operations
router.include_router(trips.router)

# Passenger-facing
router.include_router(announcements.router)
router.include_router(reports.router)

# Audit trail
router.include_router(admin.router)

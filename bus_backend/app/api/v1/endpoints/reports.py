"""
Passenger report endpoints.

Filing is open to anyone; review is admin-only.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from bus_backend.app.db.session import get_db
from bus_backend.app.models.passenger_report import PassengerReport
from bus_backend.app.models.trip import Trip
from bus_backend.app.models.bus import Bus
from bus_backend.app.models.driver import Driver
from bus_backend.app.models.route import Route
from bus_backend.app.schemas.report import (
    ReportCreate, ReportStatusUpdate, ReportResponse, ReportCreatedResponse
)
from bus_backend.app.core.guards import require_admin
from bus_backend.app.core.exceptions import ResourceNotFoundError

router = APIRouter(prefix="/reports", tags=["Passenger Reports"])


@router.post("", response_model=ReportCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_report(data: ReportCreate, db: AsyncSession = Depends(get_db)):
    """File a report; any referenced trip/bus/driver/route must exist."""
    for model, key, label in (
        (Trip, data.trip_id, "Trip"),
        (Bus, data.bus_id, "Bus"),
        (Driver, data.driver_id, "Driver"),
        (Route, data.route_id, "Route"),
    ):
        if key is not None and await db.get(model, key) is None:
            raise ResourceNotFoundError(label, key)

    report = PassengerReport(**data.model_dump())
    db.add(report)
    await db.commit()
    await db.refresh(report)
    return ReportCreatedResponse(message="Report submitted successfully", report_id=report.report_id)


@router.get("", response_model=List[ReportResponse])
async def list_reports(
    status: Optional[str] = Query(None, description="Only reports with this status"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    query = select(PassengerReport).order_by(
        PassengerReport.created_at.desc(), PassengerReport.report_id.desc()
    )
    if status:
        query = query.where(PassengerReport.status == status)
    result = await db.execute(query)
    return result.scalars().all()


@router.patch("/{report_id}/status", response_model=ReportResponse)
async def update_report_status(
    report_id: int,
    data: ReportStatusUpdate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    report = await db.get(PassengerReport, report_id)
    if report is None:
        raise ResourceNotFoundError("Report", report_id)

    report.status = data.status
    await db.commit()
    await db.refresh(report)
    return report

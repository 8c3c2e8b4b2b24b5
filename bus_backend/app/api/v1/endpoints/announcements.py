"""
Announcement API endpoints.

New announcements are stored and pushed to sockets listening on the
announcements channel.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from bus_backend.app.db.session import get_db
from bus_backend.app.models.announcement import Announcement
from bus_backend.app.schemas.announcement import (
    AnnouncementCreate, AnnouncementResponse, AnnouncementCreatedResponse
)
from bus_backend.app.core.guards import require_admin
from bus_backend.app.core.exceptions import ResourceNotFoundError
from bus_backend.app.services.audit import log_event, AuditAction
from bus_backend.app.services.realtime import TripChannelHub, get_hub

router = APIRouter(prefix="/announcements", tags=["Announcements"])


@router.get("", response_model=List[AnnouncementResponse])
async def list_announcements(db: AsyncSession = Depends(get_db)):
    """Newest first."""
    result = await db.execute(
        select(Announcement).order_by(Announcement.created_at.desc(), Announcement.announcement_id.desc())
    )
    return result.scalars().all()


@router.post("", response_model=AnnouncementCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_announcement(
    data: AnnouncementCreate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    hub: TripChannelHub = Depends(get_hub)
):
    announcement = Announcement(title=data.title, message=data.message)
    db.add(announcement)
    await db.commit()
    await db.refresh(announcement)

    await hub.publish_announcement(
        AnnouncementResponse.model_validate(announcement).model_dump(mode="json")
    )
    await log_event(
        db, AuditAction.ANNOUNCEMENT_CREATED, principal=admin,
        metadata={"announcement_id": announcement.announcement_id},
    )

    return AnnouncementCreatedResponse(
        message="Announcement created successfully",
        announcement_id=announcement.announcement_id,
    )


@router.delete("/{announcement_id}")
async def delete_announcement(
    announcement_id: int,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    announcement = await db.get(Announcement, announcement_id)
    if announcement is None:
        raise ResourceNotFoundError("Announcement", announcement_id)

    await db.delete(announcement)
    await db.commit()
    return {"message": "Announcement deleted successfully", "announcement_id": announcement_id}

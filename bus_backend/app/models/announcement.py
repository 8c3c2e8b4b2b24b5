"""
Announcement database model.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from bus_backend.app.db.session import Base


class Announcement(Base):
    """Service announcement broadcast by an admin to drivers and passengers."""
    __tablename__ = "announcements"

    announcement_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<Announcement(id={self.announcement_id}, title='{self.title}')>"

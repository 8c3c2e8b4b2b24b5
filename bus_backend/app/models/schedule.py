"""
Schedule database model.
"""

from sqlalchemy import Column, Integer, String, ForeignKey
from bus_backend.app.db.session import Base


class Schedule(Base):
    """Daily departure of a route at start_time ("HH:MM")."""
    __tablename__ = "schedules"

    schedule_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    route_id = Column(Integer, ForeignKey("routes.route_id"), nullable=False, index=True)
    start_time = Column(String(5), nullable=False)

    def __repr__(self):
        return f"<Schedule(schedule_id={self.schedule_id}, route_id={self.route_id}, start='{self.start_time}')>"

"""
Bus database model.

Current location, speed and last_updated are overwritten on every
location report; no history is retained.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime
from bus_backend.app.db.session import Base


class Bus(Base):
    """Fleet bus."""
    __tablename__ = "buses"

    bus_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    bus_no = Column(String(50), unique=True, nullable=False, index=True)

    # Live position (last report wins)
    current_latitude = Column(Float, nullable=True)
    current_longitude = Column(Float, nullable=True)
    current_speed_kmh = Column(Float, nullable=True)
    last_updated = Column(DateTime(timezone=True), nullable=True)

    # Plain column, not a foreign key: trips reference buses already
    current_trip_id = Column(Integer, nullable=True)

    def __repr__(self):
        return f"<Bus(bus_id={self.bus_id}, bus_no='{self.bus_no}')>"

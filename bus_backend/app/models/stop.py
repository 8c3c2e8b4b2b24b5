"""
Stop database model.
"""

from sqlalchemy import Column, Integer, String, Float
from bus_backend.app.db.session import Base


class Stop(Base):
    """Physical bus stop with a geofence radius used for arrival detection."""
    __tablename__ = "stops"

    stop_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    stop_name = Column(String(255), nullable=False, index=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    geofence_radius_meters = Column(Integer, nullable=False, default=50)

    def __repr__(self):
        return f"<Stop(stop_id={self.stop_id}, stop_name='{self.stop_name}')>"

"""
Trip and trip stop time database models.
"""

from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, UniqueConstraint
from bus_backend.app.db.session import Base
from bus_backend.app.models.enums import TripStatus


class Trip(Base):
    """
    A run of a bus along a scheduled route on a specific date.

    status is a plain string: the generic status update
    accepts any value.
    """
    __tablename__ = "trips"

    trip_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    schedule_id = Column(Integer, ForeignKey("schedules.schedule_id"), nullable=False, index=True)
    bus_id = Column(Integer, ForeignKey("buses.bus_id"), nullable=False, index=True)
    driver_id = Column(Integer, ForeignKey("drivers.driver_id"), nullable=False, index=True)
    trip_date = Column(Date, nullable=False, index=True)
    status = Column(String(50), nullable=False, default=TripStatus.SCHEDULED.value, index=True)

    def __repr__(self):
        return f"<Trip(trip_id={self.trip_id}, schedule_id={self.schedule_id}, status='{self.status}')>"


class TripStopTime(Base):
    """Actual (and predicted) times a trip reached a stop."""
    __tablename__ = "trip_stop_times"
    __table_args__ = (
        UniqueConstraint("trip_id", "stop_id", name="uq_trip_stop_times_trip_stop"),
    )

    trip_stop_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    trip_id = Column(Integer, ForeignKey("trips.trip_id"), nullable=False, index=True)
    stop_id = Column(Integer, ForeignKey("stops.stop_id"), nullable=False)
    actual_arrival_time = Column(DateTime(timezone=True), nullable=True)
    actual_departure_time = Column(DateTime(timezone=True), nullable=True)
    predicted_arrival_time = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<TripStopTime(trip_id={self.trip_id}, stop_id={self.stop_id})>"

"""
Passenger report database model.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from bus_backend.app.db.session import Base
from bus_backend.app.models.enums import ReportStatus


class PassengerReport(Base):
    """
    Feedback or complaint filed from the passenger app.

    The trip/bus/driver/route references are all optional.
    """
    __tablename__ = "passenger_reports"

    report_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    report_type = Column(String(100), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String(50), nullable=False, default=ReportStatus.NEW.value, index=True)

    trip_id = Column(Integer, ForeignKey("trips.trip_id"), nullable=True)
    bus_id = Column(Integer, ForeignKey("buses.bus_id"), nullable=True)
    driver_id = Column(Integer, ForeignKey("drivers.driver_id"), nullable=True)
    route_id = Column(Integer, ForeignKey("routes.route_id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<PassengerReport(id={self.report_id}, type='{self.report_type}', status='{self.status}')>"

"""
Route and route stop database models.

A route is an ordered sequence of stops; the sequence lives in route_stops.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from bus_backend.app.db.session import Base


class Route(Base):
    """Named bus route (e.g. "City Center to Airport", route number "150A")."""
    __tablename__ = "routes"

    route_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    route_name = Column(String(255), nullable=False)
    route_no = Column(String(50), nullable=True, index=True)

    def __repr__(self):
        return f"<Route(route_id={self.route_id}, route_name='{self.route_name}', route_no='{self.route_no}')>"


class RouteStop(Base):
    """
    One position in a route's stop sequence.

    stop_sequence is 1-based; time_offset_from_start is in minutes.
    """
    __tablename__ = "route_stops"
    __table_args__ = (
        UniqueConstraint("route_id", "stop_sequence", name="uq_route_stops_route_sequence"),
    )

    route_stop_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    route_id = Column(Integer, ForeignKey("routes.route_id"), nullable=False, index=True)
    stop_id = Column(Integer, ForeignKey("stops.stop_id"), nullable=False, index=True)
    stop_sequence = Column(Integer, nullable=False)
    time_offset_from_start = Column(Integer, nullable=True)

    def __repr__(self):
        return f"<RouteStop(route_id={self.route_id}, stop_id={self.stop_id}, seq={self.stop_sequence})>"

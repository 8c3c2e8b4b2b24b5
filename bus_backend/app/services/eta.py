"""
Arrival time estimates from a bus's last reported position.

Straight-line (haversine) distance divided by the reported speed, falling
back to a default cruising speed when the bus reports none.
"""

from datetime import datetime, timedelta, timezone
from math import radians, sin, cos, atan2, sqrt
from typing import Dict, Iterable, Optional, Tuple

from bus_backend.app.core.config import settings

EARTH_RADIUS_METERS = 6371e3


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two lat/lon points."""
    phi1, phi2 = radians(lat1), radians(lat2)
    d_phi = radians(lat2 - lat1)
    d_lambda = radians(lon2 - lon1)
    a = sin(d_phi / 2) ** 2 + cos(phi1) * cos(phi2) * sin(d_lambda / 2) ** 2
    return EARTH_RADIUS_METERS * 2 * atan2(sqrt(a), sqrt(1 - a))


def predict_arrivals(
    bus_position: Tuple[float, float],
    stops: Iterable[Tuple[int, float, float]],
    speed_kmh: Optional[float] = None,
    now: Optional[datetime] = None,
) -> Dict[int, datetime]:
    """
    Estimate arrival times for each (stop_id, latitude, longitude).

    Args:
        bus_position: (latitude, longitude) of the bus
        stops: iterable of (stop_id, latitude, longitude)
        speed_kmh: last reported speed; None or <= 0 uses settings.default_speed_kmh
        now: reference time, defaults to the current UTC time

    Returns:
        Mapping stop_id -> predicted arrival datetime
    """
    now = now or datetime.now(timezone.utc)
    speed = speed_kmh if speed_kmh and speed_kmh > 0 else settings.default_speed_kmh
    bus_lat, bus_lon = bus_position

    etas = {}
    for stop_id, lat, lon in stops:
        distance_km = haversine_meters(bus_lat, bus_lon, lat, lon) / 1000
        etas[stop_id] = now + timedelta(hours=distance_km / speed)
    return etas

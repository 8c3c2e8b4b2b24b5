"""
Route Pydantic schemas.

Defines request and response models for routes and their stop sequences.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Union


class RouteStopInput(BaseModel):
    """One stop in a submitted sequence, with an optional time offset."""
    stop_id: int = Field(..., gt=0)
    time_offset_from_start: Optional[int] = Field(None, ge=0, description="Minutes after departure")


class RouteCreate(BaseModel):
    """
    Schema for creating a route.

    stops may list bare stop IDs or objects with offsets; sequence numbers
    follow list order starting at 1.
    """
    route_name: str = Field(..., min_length=1, max_length=255)
    route_no: Optional[str] = Field(None, max_length=50)
    stops: Optional[List[Union[int, RouteStopInput]]] = Field(
        None, description="Ordered stop IDs; at least two when given"
    )

    def stop_inputs(self) -> List[RouteStopInput]:
        """Normalise stops into RouteStopInput objects."""
        normalised = []
        for item in self.stops or []:
            if isinstance(item, int):
                normalised.append(RouteStopInput(stop_id=item))
            else:
                normalised.append(item)
        return normalised


class RouteUpdate(BaseModel):
    """Schema for updating a route."""
    route_name: Optional[str] = Field(None, min_length=1, max_length=255)
    route_no: Optional[str] = Field(None, max_length=50)

    @field_validator("route_name")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class RouteStopsReplace(BaseModel):
    """Replace a route's whole stop sequence."""
    stops: List[Union[int, RouteStopInput]] = Field(..., min_length=2)

    def stop_inputs(self) -> List[RouteStopInput]:
        return [RouteStopInput(stop_id=s) if isinstance(s, int) else s for s in self.stops]


class RouteResponse(BaseModel):
    """Schema for route response."""
    route_id: int
    route_name: str
    route_no: Optional[str] = None

    class Config:
        from_attributes = True


class RouteStopResponse(BaseModel):
    """A stop as it appears on a route."""
    stop_id: int
    stop_name: str
    latitude: float
    longitude: float
    geofence_radius_meters: int
    stop_sequence: int
    time_offset_from_start: Optional[int] = None


class RouteDetailResponse(RouteResponse):
    """Route with its ordered stops."""
    stops: List[RouteStopResponse] = []


class RouteCreateResponse(RouteResponse):
    """Response after route creation."""
    message: str
    total_stops: int


class RouteSearchResult(RouteResponse):
    """Route matching a source/destination search."""
    source_stop: str
    destination_stop: str

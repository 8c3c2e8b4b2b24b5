"""
Route API endpoints.

Routes and their ordered stop sequences, including source/destination search.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased
from sqlalchemy import select
from bus_backend.app.db.session import get_db
from bus_backend.app.models.route import Route, RouteStop
from bus_backend.app.models.stop import Stop
from bus_backend.app.schemas.route import (
    RouteCreate, RouteUpdate, RouteStopsReplace,
    RouteResponse, RouteDetailResponse, RouteStopResponse,
    RouteCreateResponse, RouteSearchResult,
)
from bus_backend.app.core.guards import require_admin
from bus_backend.app.core.exceptions import ResourceNotFoundError
from bus_backend.app.services.audit import log_event, AuditAction
from bus_backend.app.services.route_service import (
    RouteStopsInsertError,
    create_route_with_stops,
    replace_route_stops,
    get_route_stops,
    delete_route_cascade,
)

router = APIRouter(prefix="/routes", tags=["Routes"])


async def _get_route(db: AsyncSession, route_id: int) -> Route:
    route = await db.get(Route, route_id)
    if route is None:
        raise ResourceNotFoundError("Route", route_id)
    return route


@router.get("", response_model=List[RouteResponse])
async def list_routes(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Route).order_by(Route.route_name))
    return result.scalars().all()


@router.get("/search/{source}/{destination}", response_model=List[RouteSearchResult])
async def search_routes(source: str, destination: str, db: AsyncSession = Depends(get_db)):
    """
    Routes travelling from a stop matching `source` to one matching `destination`.

    Matching is a case-insensitive substring on stop names; the source stop
    must come earlier in the sequence than the destination stop.
    """
    source_rs, dest_rs = aliased(RouteStop), aliased(RouteStop)
    source_stop, dest_stop = aliased(Stop), aliased(Stop)

    result = await db.execute(
        select(Route, source_stop.stop_name, dest_stop.stop_name)
        .join(source_rs, source_rs.route_id == Route.route_id)
        .join(source_stop, source_stop.stop_id == source_rs.stop_id)
        .join(dest_rs, dest_rs.route_id == Route.route_id)
        .join(dest_stop, dest_stop.stop_id == dest_rs.stop_id)
        .where(
            source_stop.stop_name.ilike(f"%{source}%"),
            dest_stop.stop_name.ilike(f"%{destination}%"),
            source_rs.stop_sequence < dest_rs.stop_sequence,
        )
        .order_by(Route.route_name, source_rs.stop_sequence)
    )

    seen = set()
    matches = []
    for route, source_name, dest_name in result.all():
        if route.route_id in seen:
            continue
        seen.add(route.route_id)
        matches.append(RouteSearchResult(
            route_id=route.route_id,
            route_name=route.route_name,
            route_no=route.route_no,
            source_stop=source_name,
            destination_stop=dest_name,
        ))
    return matches


@router.get("/{route_id}", response_model=RouteDetailResponse)
async def get_route(route_id: int, db: AsyncSession = Depends(get_db)):
    route = await _get_route(db, route_id)
    stops = await get_route_stops(db, route_id)
    return RouteDetailResponse(
        route_id=route.route_id,
        route_name=route.route_name,
        route_no=route.route_no,
        stops=stops,
    )


@router.get("/{route_id}/stops", response_model=List[RouteStopResponse])
async def list_route_stops(route_id: int, db: AsyncSession = Depends(get_db)):
    await _get_route(db, route_id)
    return await get_route_stops(db, route_id)


@router.post("", response_model=RouteCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_route(
    data: RouteCreate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a route and, optionally, its stop sequence.

    If the stops cannot be stored the route row is deleted again before the
    error is returned.
    """
    try:
        route, total_stops = await create_route_with_stops(db, data)
    except RouteStopsInsertError as exc:
        await log_event(
            db, AuditAction.ROUTE_CREATE_ROLLED_BACK, principal=admin,
            metadata={"route_name": data.route_name, "reason": exc.message},
        )
        raise

    await log_event(
        db, AuditAction.ROUTE_CREATED, principal=admin,
        metadata={"route_id": route.route_id, "total_stops": total_stops},
    )
    return RouteCreateResponse(
        message="Route created successfully",
        route_id=route.route_id,
        route_name=route.route_name,
        route_no=route.route_no,
        total_stops=total_stops,
    )


@router.put("/{route_id}", response_model=RouteResponse)
async def update_route(
    route_id: int,
    data: RouteUpdate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    route = await _get_route(db, route_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(route, field, value)
    await db.commit()
    await db.refresh(route)
    return route


@router.put("/{route_id}/stops", response_model=RouteDetailResponse)
async def replace_stops(
    route_id: int,
    data: RouteStopsReplace,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Replace the route's stop sequence with the submitted order."""
    route = await _get_route(db, route_id)
    await replace_route_stops(db, route_id, data.stop_inputs())
    return RouteDetailResponse(
        route_id=route.route_id,
        route_name=route.route_name,
        route_no=route.route_no,
        stops=await get_route_stops(db, route_id),
    )


@router.delete("/{route_id}")
async def delete_route(
    route_id: int,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Delete a route with its schedules, their trips and its stop sequence."""
    await _get_route(db, route_id)
    await delete_route_cascade(db, route_id)
    await log_event(db, AuditAction.ROUTE_DELETED, principal=admin, metadata={"route_id": route_id})
    return {"message": "Route deleted successfully", "route_id": route_id}

"""
Bus management and location reporting tests.
"""

import pytest
from sqlalchemy import select, func

from bus_backend.app.models.bus import Bus


@pytest.mark.asyncio
async def test_create_and_fetch_bus(client, admin_headers):
    response = await client.post("/api/buses", json={"bus_no": "150A-02"}, headers=admin_headers)
    assert response.status_code == 201
    bus_id = response.json()["bus_id"]

    response = await client.get(f"/api/buses/{bus_id}")
    assert response.status_code == 200
    assert response.json()["bus_no"] == "150A-02"
    assert response.json()["current_latitude"] is None


@pytest.mark.asyncio
async def test_create_bus_missing_number(client, admin_headers):
    response = await client.post("/api/buses", json={}, headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_duplicate_bus_number_conflicts(client, admin_headers):
    await client.post("/api/buses", json={"bus_no": "201B-01"}, headers=admin_headers)
    response = await client.post("/api/buses", json={"bus_no": "201B-01"}, headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_CONFLICT_001"


@pytest.mark.asyncio
async def test_unknown_bus_is_404(client):
    response = await client.get("/api/buses/9999")
    assert response.status_code == 404
    assert response.json()["message"] == "Bus with ID 9999 not found"


@pytest.mark.asyncio
async def test_update_bus(client, admin_headers, fleet):
    response = await client.put(
        f"/api/buses/{fleet['bus_id']}", json={"bus_no": "150A-99"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["bus_no"] == "150A-99"


@pytest.mark.asyncio
async def test_update_bus_rejects_null_bus_no(client, admin_headers, fleet):
    response = await client.put(
        f"/api/buses/{fleet['bus_id']}", json={"bus_no": None}, headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_VALIDATION"

    bus = (await client.get(f"/api/buses/{fleet['bus_id']}")).json()
    assert bus["bus_no"] == "150A-01"


@pytest.mark.asyncio
async def test_delete_bus_referenced_by_trip_conflicts(client, admin_headers, fleet, db_session):
    response = await client.delete(f"/api/buses/{fleet['bus_id']}", headers=admin_headers)
    assert response.status_code == 409

    count = (await db_session.execute(
        select(func.count(Bus.bus_id)).where(Bus.bus_id == fleet["bus_id"])
    )).scalar()
    assert count == 1


@pytest.mark.asyncio
async def test_delete_unreferenced_bus(client, admin_headers):
    bus_id = (await client.post("/api/buses", json={"bus_no": "SPARE-1"}, headers=admin_headers)).json()["bus_id"]

    response = await client.delete(f"/api/buses/{bus_id}", headers=admin_headers)
    assert response.status_code == 200
    assert (await client.get(f"/api/buses/{bus_id}")).status_code == 404


@pytest.mark.asyncio
async def test_location_update_overwrites_previous(client, driver_headers, fleet):
    url = f"/api/buses/{fleet['bus_id']}/location"

    first = await client.post(url, json={"latitude": 12.30, "longitude": 76.64, "speed": 30}, headers=driver_headers)
    assert first.status_code == 200

    second = await client.post(url, json={"latitude": 12.31, "longitude": 76.65}, headers=driver_headers)
    assert second.status_code == 200

    bus = (await client.get(f"/api/buses/{fleet['bus_id']}")).json()
    assert bus["current_latitude"] == 12.31
    assert bus["current_longitude"] == 76.65
    assert bus["current_speed_kmh"] is None
    assert bus["last_updated"] is not None


@pytest.mark.asyncio
async def test_location_update_requires_token(client, fleet):
    response = await client.post(
        f"/api/buses/{fleet['bus_id']}/location", json={"latitude": 12.3, "longitude": 76.6}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_location_update_out_of_range(client, driver_headers, fleet):
    response = await client.post(
        f"/api/buses/{fleet['bus_id']}/location",
        json={"latitude": 120.0, "longitude": 76.6},
        headers=driver_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_location_with_trip_is_relayed(client, driver_headers, fleet, hub, mocker):
    listener = mocker.Mock()
    listener.send_json = mocker.AsyncMock()
    hub.join(listener, f"trip-{fleet['trip_id']}")

    response = await client.post(
        f"/api/buses/{fleet['bus_id']}/location",
        json={"latitude": 12.3, "longitude": 76.6, "trip_id": fleet["trip_id"]},
        headers=driver_headers,
    )
    assert response.status_code == 200
    assert response.json()["bus"]["current_trip_id"] == fleet["trip_id"]

    listener.send_json.assert_awaited_once()
    frame = listener.send_json.await_args.args[0]
    assert frame["event"] == "bus-location"
    assert frame["data"]["tripId"] == fleet["trip_id"]
    assert frame["data"]["latitude"] == 12.3

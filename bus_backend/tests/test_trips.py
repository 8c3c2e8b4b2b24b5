"""
Trip lifecycle tests.

Status updates are unguarded: any string is stored, and the convenience
verbs write fixed values regardless of the previous status.
"""

from datetime import date, datetime, timedelta

import pytest
from sqlalchemy import select

from bus_backend.app.models.trip import Trip
from bus_backend.app.services.trip_service import TripService


@pytest.mark.asyncio
async def test_trip_detail_join(client, fleet):
    response = await client.get(f"/api/trips/{fleet['trip_id']}")
    assert response.status_code == 200
    data = response.json()
    assert data["bus_no"] == "150A-01"
    assert data["driver_name"] == "John Driver"
    assert data["start_time"] == "08:00"
    assert data["route_name"] == "City Center to Airport"
    assert data["route_id"] == fleet["route_id"]


@pytest.mark.asyncio
async def test_unknown_trip_is_404(client):
    assert (await client.get("/api/trips/424242")).status_code == 404


@pytest.mark.asyncio
async def test_list_trips_filters(client, fleet):
    today = date.today().isoformat()
    assert len((await client.get(f"/api/trips?trip_date={today}")).json()) == 1
    assert (await client.get("/api/trips?status=Completed")).json() == []
    assert len((await client.get(f"/api/trips?driver_id={fleet['driver_id']}")).json()) == 1


@pytest.mark.asyncio
async def test_create_single_and_bulk(client, admin_headers, fleet):
    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    base = {
        "schedule_id": fleet["schedule_id"],
        "bus_id": fleet["bus_id"],
        "driver_id": fleet["driver_id"],
    }

    single = await client.post("/api/trips", json={**base, "trip_date": tomorrow}, headers=admin_headers)
    assert single.status_code == 201
    assert single.json()["status"] == "Scheduled"

    day_after = (date.today() + timedelta(days=2)).isoformat()
    bulk = await client.post(
        "/api/trips",
        json=[{**base, "trip_date": tomorrow}, {**base, "trip_date": day_after}],
        headers=admin_headers,
    )
    assert bulk.status_code == 201
    assert len(bulk.json()) == 2


@pytest.mark.asyncio
async def test_create_trip_unknown_bus(client, admin_headers, fleet):
    response = await client.post(
        "/api/trips",
        json={
            "schedule_id": fleet["schedule_id"],
            "bus_id": 9999,
            "driver_id": fleet["driver_id"],
            "trip_date": date.today().isoformat(),
        },
        headers=admin_headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_status_update_accepts_any_string(client, driver_headers, fleet):
    response = await client.patch(
        f"/api/trips/{fleet['trip_id']}/status", json={"status": "Stuck In Traffic"}, headers=driver_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "Stuck In Traffic"

    detail = (await client.get(f"/api/trips/{fleet['trip_id']}")).json()
    assert detail["status"] == "Stuck In Traffic"


@pytest.mark.asyncio
async def test_empty_status_rejected(client, driver_headers, fleet):
    response = await client.patch(
        f"/api/trips/{fleet['trip_id']}/status", json={"status": ""}, headers=driver_headers
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_trip_rejects_null_bus(client, admin_headers, fleet):
    response = await client.put(
        f"/api/trips/{fleet['trip_id']}", json={"bus_id": None}, headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_VALIDATION"

    detail = (await client.get(f"/api/trips/{fleet['trip_id']}")).json()
    assert detail["bus_id"] == fleet["bus_id"]


@pytest.mark.asyncio
async def test_start_pause_resume_complete(client, driver_headers, fleet):
    trip_url = f"/api/trips/{fleet['trip_id']}"

    started = await client.post(f"{trip_url}/start", headers=driver_headers)
    assert started.json()["status"] == "In Progress"
    bus = (await client.get(f"/api/buses/{fleet['bus_id']}")).json()
    assert bus["current_trip_id"] == fleet["trip_id"]

    assert (await client.patch(f"{trip_url}/pause", headers=driver_headers)).json()["status"] == "Paused"
    assert (await client.patch(f"{trip_url}/resume", headers=driver_headers)).json()["status"] == "In Progress"

    completed = await client.post(f"{trip_url}/complete", headers=driver_headers)
    assert completed.json()["status"] == "Completed"
    bus = (await client.get(f"/api/buses/{fleet['bus_id']}")).json()
    assert bus["current_trip_id"] is None

    # Unguarded: a completed trip can be started again
    restarted = await client.post(f"{trip_url}/start", headers=driver_headers)
    assert restarted.json()["status"] == "In Progress"


@pytest.mark.asyncio
async def test_arrive_then_depart_upserts_one_row(client, driver_headers, fleet):
    stop_id = fleet["stop_ids"][0]
    url = f"/api/trips/{fleet['trip_id']}/stops/{stop_id}"

    arrived = await client.post(f"{url}/arrive", headers=driver_headers)
    assert arrived.status_code == 200
    departed = await client.post(f"{url}/depart", headers=driver_headers)
    assert departed.status_code == 200
    assert arrived.json()["trip_stop_id"] == departed.json()["trip_stop_id"]

    timeline = (await client.get(f"/api/trips/{fleet['trip_id']}/stops")).json()
    assert [s["stop_sequence"] for s in timeline] == [1, 2, 3]
    assert timeline[0]["actual_arrival_time"] is not None
    assert timeline[0]["actual_departure_time"] is not None
    assert timeline[1]["actual_arrival_time"] is None


@pytest.mark.asyncio
async def test_timeline_predicts_from_bus_position(client, driver_headers, fleet):
    timeline = (await client.get(f"/api/trips/{fleet['trip_id']}/stops")).json()
    assert all(s["predicted_arrival_time"] is None for s in timeline)

    await client.post(
        f"/api/buses/{fleet['bus_id']}/location",
        json={"latitude": 12.2958, "longitude": 76.6394, "speed": 0},
        headers=driver_headers,
    )
    timeline = (await client.get(f"/api/trips/{fleet['trip_id']}/stops")).json()
    assert all(s["predicted_arrival_time"] is not None for s in timeline)
    predicted = [datetime.fromisoformat(s["predicted_arrival_time"].replace("Z", "+00:00")) for s in timeline]
    assert predicted[0] <= predicted[1] <= predicted[2]


@pytest.mark.asyncio
async def test_delete_trip_keeps_reports(client, admin_headers, driver_headers, fleet):
    await client.post(f"/api/trips/{fleet['trip_id']}/stops/{fleet['stop_ids'][0]}/arrive", headers=driver_headers)
    report = await client.post(
        "/api/reports", json={"report_type": "Lost Item", "message": "Umbrella", "trip_id": fleet["trip_id"]}
    )
    report_id = report.json()["report_id"]

    response = await client.delete(f"/api/trips/{fleet['trip_id']}", headers=admin_headers)
    assert response.status_code == 200

    reports = (await client.get("/api/reports", headers=admin_headers)).json()
    assert reports[0]["report_id"] == report_id
    assert reports[0]["trip_id"] is None


@pytest.mark.asyncio
async def test_generate_daily_trips(db_session, fleet):
    today = date.today() + timedelta(days=1)

    created = await TripService.generate_daily_trips(db_session, today=today)
    assert created == 1

    # Second run is a no-op
    assert await TripService.generate_daily_trips(db_session, today=today) == 0

    result = await db_session.execute(select(Trip).where(Trip.trip_date == today))
    trip = result.scalar_one()
    assert trip.bus_id == fleet["bus_id"]
    assert trip.driver_id == fleet["driver_id"]
    assert trip.status == "Scheduled"


@pytest.mark.asyncio
async def test_generate_daily_endpoint(client, admin_headers, fleet):
    response = await client.post("/api/trips/generate-daily", headers=admin_headers)
    assert response.status_code == 200
    # The fixture trip is dated today, so nothing ran yesterday
    assert response.json()["created"] == 0
    assert response.json()["date"] == date.today().isoformat()


@pytest.mark.asyncio
async def test_driver_sees_own_trips(client, driver_headers, fleet):
    response = await client.get("/api/trips/driver/me", headers=driver_headers)
    assert response.status_code == 200
    assert [t["trip_id"] for t in response.json()] == [fleet["trip_id"]]

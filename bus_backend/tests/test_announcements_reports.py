"""
Announcements, passenger reports and the audit trail.
"""

import pytest


@pytest.mark.asyncio
async def test_announcement_created_and_pushed(client, admin_headers, hub, mocker):
    listener = mocker.Mock()
    listener.send_json = mocker.AsyncMock()
    hub.join(listener, "announcements")

    response = await client.post(
        "/api/announcements",
        json={"title": "Route 150A diverted", "message": "Main Street closed until noon"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    announcement_id = response.json()["announcement_id"]

    frame = listener.send_json.await_args.args[0]
    assert frame["event"] == "announcement"
    assert frame["data"]["announcement_id"] == announcement_id
    assert frame["data"]["title"] == "Route 150A diverted"

    listed = (await client.get("/api/announcements")).json()
    assert [a["announcement_id"] for a in listed] == [announcement_id]


@pytest.mark.asyncio
async def test_announcement_missing_message(client, admin_headers):
    response = await client.post("/api/announcements", json={"title": "Empty"}, headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_announcement_requires_admin(client, driver_headers):
    response = await client.post(
        "/api/announcements", json={"title": "Hi", "message": "Hello"}, headers=driver_headers
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_missing_announcement(client, admin_headers):
    response = await client.delete("/api/announcements/123", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_report_lifecycle(client, admin_headers, fleet):
    response = await client.post(
        "/api/reports",
        json={"report_type": "Complaint", "message": "Bus skipped my stop", "bus_id": fleet["bus_id"]},
    )
    assert response.status_code == 201
    report_id = response.json()["report_id"]

    new_reports = (await client.get("/api/reports?status=New", headers=admin_headers)).json()
    assert [r["report_id"] for r in new_reports] == [report_id]

    response = await client.patch(
        f"/api/reports/{report_id}/status", json={"status": "Resolved"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "Resolved"

    assert (await client.get("/api/reports?status=New", headers=admin_headers)).json() == []


@pytest.mark.asyncio
async def test_report_missing_field_and_unknown_reference(client):
    assert (await client.post("/api/reports", json={"report_type": "Feedback"})).status_code == 400

    response = await client.post(
        "/api/reports", json={"report_type": "Feedback", "message": "Nice", "trip_id": 999}
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_reports_are_admin_only(client, driver_headers):
    assert (await client.get("/api/reports")).status_code == 401
    assert (await client.get("/api/reports", headers=driver_headers)).status_code == 403


@pytest.mark.asyncio
async def test_audit_trail_records_fleet_changes(client, admin_headers):
    await client.post("/api/announcements", json={"title": "T", "message": "M"}, headers=admin_headers)
    bus_id = (await client.post("/api/buses", json={"bus_no": "TMP-1"}, headers=admin_headers)).json()["bus_id"]
    await client.delete(f"/api/buses/{bus_id}", headers=admin_headers)

    response = await client.get("/api/admin/audit-logs", headers=admin_headers)
    assert response.status_code == 200
    actions = [log["action"] for log in response.json()["logs"]]
    assert "ANNOUNCEMENT_CREATED" in actions
    assert "BUS_DELETED" in actions

    filtered = (await client.get("/api/admin/audit-logs?action=BUS_DELETED", headers=admin_headers)).json()
    assert filtered["total"] == 1
    assert filtered["logs"][0]["actor_role"] == "admin"
    assert filtered["logs"][0]["meta_data"] == {"bus_id": bus_id}

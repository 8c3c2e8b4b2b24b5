"""
Driver management tests (admin-only).
"""

import pytest


@pytest.mark.asyncio
async def test_create_driver_hides_password(client, admin_headers):
    response = await client.post(
        "/api/drivers",
        json={"name": "Asha", "phone_number": "+91-9000000009", "password": "initial123"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Asha"
    assert "password" not in data
    assert "password_hash" not in data

    login = await client.post(
        "/api/auth/driver/login", json={"phone_number": "+91-9000000009", "password": "initial123"}
    )
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_duplicate_phone_conflicts(client, admin_headers, driver_account):
    response = await client.post(
        "/api/drivers",
        json={"name": "Copy", "phone_number": driver_account.phone_number},
        headers=admin_headers,
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_update_driver(client, admin_headers, driver_account):
    response = await client.put(
        f"/api/drivers/{driver_account.driver_id}", json={"name": "John D."}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["name"] == "John D."


@pytest.mark.asyncio
async def test_update_driver_rejects_null_phone(client, admin_headers, driver_account):
    response = await client.put(
        f"/api/drivers/{driver_account.driver_id}", json={"phone_number": None}, headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_driver_with_trips_cannot_be_deleted(client, admin_headers, fleet):
    response = await client.delete(f"/api/drivers/{fleet['driver_id']}", headers=admin_headers)
    assert response.status_code == 409
    assert (await client.get(f"/api/drivers/{fleet['driver_id']}", headers=admin_headers)).status_code == 200


@pytest.mark.asyncio
async def test_drivers_require_admin(client, driver_headers):
    assert (await client.get("/api/drivers")).status_code == 401
    assert (await client.get("/api/drivers", headers=driver_headers)).status_code == 403


@pytest.mark.asyncio
async def test_unknown_driver_is_404(client, admin_headers):
    response = await client.get("/api/drivers/777", headers=admin_headers)
    assert response.status_code == 404

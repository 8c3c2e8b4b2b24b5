"""
Live location relay tests.

The hub is exercised directly with in-memory sockets, and end to end through
the /ws endpoint with Starlette's TestClient.
"""

import pytest
from fastapi.testclient import TestClient

from bus_backend.app.main import app
from bus_backend.app.services.realtime import (
    ANNOUNCEMENTS_CHANNEL, FrameError, TripChannelHub, handle_frame, parse_trip_id,
)


class FakeSocket:
    def __init__(self, fail=False):
        self.frames = []
        self.fail = fail

    async def send_json(self, frame):
        if self.fail:
            raise RuntimeError("connection closed")
        self.frames.append(frame)


@pytest.mark.asyncio
async def test_location_reaches_other_listeners_of_same_trip_only():
    hub = TripChannelHub()
    driver, passenger_a, passenger_b, other_trip = FakeSocket(), FakeSocket(), FakeSocket(), FakeSocket()

    for socket in (driver, passenger_a, passenger_b):
        await handle_frame(hub, socket, {"event": "join-trip", "data": 7})
    await handle_frame(hub, other_trip, {"event": "join-trip", "data": {"tripId": 8}})

    update = {"tripId": 7, "latitude": 12.3, "longitude": 76.64, "speed": 28}
    reply = await handle_frame(hub, driver, {"event": "location-update", "data": update})
    assert reply is None

    expected = {"event": "bus-location", "data": update}
    assert passenger_a.frames == [expected]
    assert passenger_b.frames == [expected]
    assert driver.frames == []
    assert other_trip.frames == []


@pytest.mark.asyncio
async def test_failing_listener_is_dropped_without_affecting_others():
    hub = TripChannelHub()
    healthy, broken = FakeSocket(), FakeSocket(fail=True)
    hub.join(healthy, "trip-1")
    hub.join(broken, "trip-1")

    delivered = await hub.publish_location(1, {"tripId": 1, "latitude": 0, "longitude": 0})

    assert delivered == 1
    assert len(healthy.frames) == 1
    assert hub.listeners("trip-1") == {healthy}
    assert hub.channels_of(broken) == set()


@pytest.mark.asyncio
async def test_leave_and_disconnect():
    hub = TripChannelHub()
    socket = FakeSocket()
    await handle_frame(hub, socket, {"event": "join-trip", "data": "3"})
    await handle_frame(hub, socket, {"event": "join-announcements"})
    assert hub.channels_of(socket) == {"trip-3", ANNOUNCEMENTS_CHANNEL}

    reply = await handle_frame(hub, socket, {"event": "leave-trip", "data": 3})
    assert reply == {"event": "left", "data": {"channel": "trip-3"}}

    hub.disconnect(socket)
    assert hub.channels_of(socket) == set()
    assert hub.listeners(ANNOUNCEMENTS_CHANNEL) == set()


@pytest.mark.asyncio
async def test_bad_frames_raise():
    hub = TripChannelHub()
    socket = FakeSocket()
    with pytest.raises(FrameError):
        await handle_frame(hub, socket, {"event": "teleport"})
    with pytest.raises(FrameError):
        await handle_frame(hub, socket, {"data": 1})
    with pytest.raises(FrameError):
        await handle_frame(hub, socket, {"event": "location-update", "data": {"latitude": 1}})


def test_parse_trip_id_forms():
    assert parse_trip_id(5) == 5
    assert parse_trip_id("5") == 5
    assert parse_trip_id({"trip_id": 5}) == 5
    assert parse_trip_id({"tripId": 5}) == 5
    with pytest.raises(FrameError):
        parse_trip_id(True)
    with pytest.raises(FrameError):
        parse_trip_id("five")


def test_websocket_relay_end_to_end(hub):
    client = TestClient(app)
    with client.websocket_connect("/ws") as driver, \
            client.websocket_connect("/ws") as passenger, \
            client.websocket_connect("/ws") as bystander:
        driver.send_json({"event": "join-trip", "data": 12})
        assert driver.receive_json() == {"event": "joined", "data": {"channel": "trip-12"}}
        passenger.send_json({"event": "join-trip", "data": {"trip_id": 12}})
        assert passenger.receive_json()["event"] == "joined"
        bystander.send_json({"event": "join-trip", "data": 13})
        assert bystander.receive_json()["event"] == "joined"

        update = {"tripId": 12, "latitude": 12.31, "longitude": 76.65}
        driver.send_json({"event": "location-update", "data": update})
        assert passenger.receive_json() == {"event": "bus-location", "data": update}

        # The next frame each of the others sees is the reply to its own request
        driver.send_json({"event": "join-announcements"})
        assert driver.receive_json() == {"event": "joined", "data": {"channel": "announcements"}}
        bystander.send_json({"event": "join-announcements"})
        assert bystander.receive_json()["event"] == "joined"


def test_websocket_error_keeps_connection_open(hub):
    client = TestClient(app)
    with client.websocket_connect("/ws") as socket:
        socket.send_text("not json")
        assert socket.receive_json()["event"] == "error"

        socket.send_json({"event": "unknown"})
        error = socket.receive_json()
        assert error["event"] == "error"
        assert "unknown" in error["data"]["message"]

        socket.send_json({"event": "join-trip", "data": 1})
        assert socket.receive_json()["event"] == "joined"

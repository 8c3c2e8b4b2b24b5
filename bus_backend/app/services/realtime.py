"""
Real-time fan-out for live bus locations and announcements.

Listeners join named channels ("trip-<id>", "announcements"); a published
frame is sent, in arrival order, to every socket in the channel except the
publisher. Delivery is best effort: there is no buffering, ordering across
publishers, deduplication or backpressure. A listener whose send fails is
dropped without affecting the others.
"""

import logging
from collections import defaultdict
from typing import Any, Dict, Optional, Set

from pydantic import ValidationError

from bus_backend.app.schemas.realtime import RealtimeFrame, TripJoin, LocationUpdatePayload

logger = logging.getLogger(__name__)

ANNOUNCEMENTS_CHANNEL = "announcements"


class RealtimeEvent:
    """Event names used on the wire."""
    JOIN_TRIP = "join-trip"
    LEAVE_TRIP = "leave-trip"
    JOIN_ANNOUNCEMENTS = "join-announcements"
    LOCATION_UPDATE = "location-update"

    # Server to client
    JOINED = "joined"
    LEFT = "left"
    BUS_LOCATION = "bus-location"
    ANNOUNCEMENT = "announcement"
    ERROR = "error"


def trip_channel(trip_id: int) -> str:
    return f"trip-{trip_id}"


class FrameError(ValueError):
    """Raised for a frame the relay cannot act on."""


class TripChannelHub:
    """
    In-process channel registry.

    Sockets only need an async send_json(dict) method, so Starlette
    WebSockets and test doubles both work.
    """

    def __init__(self):
        self._channels: Dict[str, Set[Any]] = defaultdict(set)
        self._memberships: Dict[Any, Set[str]] = defaultdict(set)

    def join(self, socket, channel: str) -> None:
        self._channels[channel].add(socket)
        self._memberships[socket].add(channel)
        logger.info("socket %s joined %s", id(socket), channel)

    def leave(self, socket, channel: str) -> None:
        members = self._channels.get(channel)
        if members is not None:
            members.discard(socket)
            if not members:
                del self._channels[channel]
        channels = self._memberships.get(socket)
        if channels is not None:
            channels.discard(channel)
            if not channels:
                del self._memberships[socket]

    def disconnect(self, socket) -> None:
        """Remove a socket from every channel it joined."""
        for channel in list(self._memberships.get(socket, ())):
            self.leave(socket, channel)
        self._memberships.pop(socket, None)

    def listeners(self, channel: str) -> Set[Any]:
        return set(self._channels.get(channel, ()))

    def channels_of(self, socket) -> Set[str]:
        return set(self._memberships.get(socket, ()))

    async def publish(self, channel: str, event: str, data: Any, exclude=None) -> int:
        """
        Send {"event", "data"} to every listener of `channel` except `exclude`.

        Returns the number of listeners the frame was handed to.
        """
        frame = {"event": event, "data": data}
        delivered = 0
        for socket in self.listeners(channel):
            if socket is exclude:
                continue
            try:
                await socket.send_json(frame)
                delivered += 1
            except Exception as exc:
                logger.warning("dropping listener %s on %s: %s", id(socket), channel, exc)
                self.disconnect(socket)
        return delivered

    async def publish_location(self, trip_id: int, data: Any, exclude=None) -> int:
        return await self.publish(trip_channel(trip_id), RealtimeEvent.BUS_LOCATION, data, exclude=exclude)

    async def publish_announcement(self, data: Any) -> int:
        return await self.publish(ANNOUNCEMENTS_CHANNEL, RealtimeEvent.ANNOUNCEMENT, data)


def parse_trip_id(data: Any) -> int:
    """Accept 12, "12", {"trip_id": 12} or {"tripId": 12}."""
    if isinstance(data, bool):
        raise FrameError("trip id must be an integer")
    if isinstance(data, int):
        return data
    if isinstance(data, str) and data.strip().isdigit():
        return int(data)
    if isinstance(data, dict):
        try:
            return TripJoin.model_validate(data).trip_id
        except ValidationError as exc:
            raise FrameError("trip id must be an integer") from exc
    raise FrameError("trip id must be an integer")


async def handle_frame(hub: TripChannelHub, socket, raw: Any) -> Optional[dict]:
    """
    Act on one client frame.

    Returns the reply to send back to the sender, or None when the frame
    needs no reply. Raises FrameError for frames the relay cannot act on.
    """
    try:
        frame = RealtimeFrame.model_validate(raw)
    except ValidationError as exc:
        raise FrameError("frame must be an object with an 'event' field") from exc

    if frame.event == RealtimeEvent.JOIN_TRIP:
        channel = trip_channel(parse_trip_id(frame.data))
        hub.join(socket, channel)
        return {"event": RealtimeEvent.JOINED, "data": {"channel": channel}}

    if frame.event == RealtimeEvent.LEAVE_TRIP:
        channel = trip_channel(parse_trip_id(frame.data))
        hub.leave(socket, channel)
        return {"event": RealtimeEvent.LEFT, "data": {"channel": channel}}

    if frame.event == RealtimeEvent.JOIN_ANNOUNCEMENTS:
        hub.join(socket, ANNOUNCEMENTS_CHANNEL)
        return {"event": RealtimeEvent.JOINED, "data": {"channel": ANNOUNCEMENTS_CHANNEL}}

    if frame.event == RealtimeEvent.LOCATION_UPDATE:
        try:
            location = LocationUpdatePayload.model_validate(frame.data)
        except ValidationError as exc:
            raise FrameError("location-update needs tripId, latitude and longitude") from exc
        await hub.publish_location(location.trip_id, frame.data, exclude=socket)
        return None

    raise FrameError(f"unknown event '{frame.event}'")


# Process-wide hub shared by the WebSocket endpoint and REST handlers
trip_hub = TripChannelHub()


def get_hub() -> TripChannelHub:
    """FastAPI dependency returning the shared hub."""
    return trip_hub

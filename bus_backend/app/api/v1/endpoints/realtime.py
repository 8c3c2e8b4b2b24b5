"""
Real-time WebSocket endpoint.

Passenger and driver apps connect to /ws, join trip channels and relay
location updates through the shared TripChannelHub.
"""

import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from bus_backend.app.services.realtime import (
    FrameError, RealtimeEvent, TripChannelHub, handle_frame, get_hub
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


@router.websocket("/ws")
async def realtime_socket(websocket: WebSocket, hub: TripChannelHub = Depends(get_hub)):
    """
    Relay loop for one client.

    Malformed frames are answered with an error event; the connection stays
    open. On disconnect the socket leaves every channel it joined.
    """
    await websocket.accept()
    client = f"{websocket.client.host}:{websocket.client.port}" if websocket.client else "unknown"
    logger.info("socket connected: %s", client)

    try:
        while True:
            try:
                raw = await websocket.receive_json()
            except ValueError:
                await websocket.send_json({"event": RealtimeEvent.ERROR, "data": {"message": "frame is not valid JSON"}})
                continue

            try:
                reply = await handle_frame(hub, websocket, raw)
            except FrameError as exc:
                reply = {"event": RealtimeEvent.ERROR, "data": {"message": str(exc)}}

            if reply is not None:
                await websocket.send_json(reply)
    except WebSocketDisconnect:
        logger.info("socket disconnected: %s", client)
    finally:
        hub.disconnect(websocket)

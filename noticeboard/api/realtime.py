"""
Websocket endpoint for real-time updates.

Clients connect to ``/ws``, optionally passing their access token as the
``token`` query parameter, and may then send
``{"event": "join-room", "data": <their user id>}`` to receive events
targeted at them. Anonymous sockets only get broadcast events.
"""

import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from noticeboard.auth.dependencies import load_active_user
from noticeboard.services.broadcaster import JOIN_ROOM, Broadcaster, Connection

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


def _parse_user_id(value: Any) -> Optional[int]:
    if isinstance(value, dict):
        value = value.get("userId", value.get("user_id"))
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_client_frame(frame: dict) -> Optional[Any]:
    """Decode a raw ASGI receive message. Binary and malformed frames yield None."""
    text = frame.get("text")
    if text is None:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None


def handle_client_event(broadcaster: Broadcaster, connection: Connection, message: Any) -> bool:
    """
    Apply one inbound frame.

    Only ``join-room`` is understood, and a socket may only join the room of
    the user it authenticated as.

    Returns:
        True if the connection joined a room
    """
    if not isinstance(message, dict) or message.get("event") != JOIN_ROOM:
        logger.debug(f"Ignoring client frame on {connection.id}: {message!r}")
        return False

    user_id = _parse_user_id(message.get("data"))
    if user_id is None:
        return False

    if connection.user_id != user_id:
        logger.warning(f"Connection {connection.id} (user={connection.user_id}) tried to join room user-{user_id}")
        return False

    return broadcaster.join(connection, user_id)


@router.websocket("/ws")
async def realtime_socket(websocket: WebSocket, token: Optional[str] = Query(None)):
    broadcaster: Broadcaster = websocket.app.state.broadcaster

    user_id = None
    if token:
        async with websocket.app.state.session_factory() as db:
            user = await load_active_user(db, token)
        if not user:
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return
        user_id = user.id

    connection = await broadcaster.connect(websocket, user_id=user_id)
    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break
            message = parse_client_frame(frame)
            if message is None:
                logger.debug(f"Ignoring non-JSON frame on {connection.id}")
                continue
            handle_client_event(broadcaster, connection, message)
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.disconnect(connection)

"""
Real-time push over websockets.

One ``Broadcaster`` is created per application and handed to whatever needs
to emit. Every connected socket gets an outbound queue drained by its own
writer task, so emitting never waits on a client and frames reach each
client in the order they were emitted. Delivery is best effort: a socket
that fails a send is dropped.

Frames are JSON objects ``{"event": <name>, "data": <payload or null>}``.
"""

import asyncio
import logging
import uuid
from typing import Any, Optional

from fastapi import WebSocket

logger = logging.getLogger(__name__)

# Outbound event names
NOTICE_UPDATE = "notice-update"
NEW_NOTICE = "new-notice"
NOTIFICATION_UPDATE = "notification-update"
NEW_COMMENT = "new-comment"
COMMENT_EDITED = "comment-edited"
COMMENT_DELETED = "comment-deleted"

# Inbound event names
JOIN_ROOM = "join-room"


class Connection:
    """A connected socket plus the user rooms it has joined."""

    def __init__(self, websocket: WebSocket, user_id: Optional[int] = None, max_pending: int = 100):
        self.id = uuid.uuid4().hex
        self.websocket = websocket
        # Identity established at handshake, None for anonymous sockets
        self.user_id = user_id
        self.rooms: set[int] = set()
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=max_pending)
        self.writer: Optional[asyncio.Task] = None

    def __repr__(self) -> str:
        return f"<Connection(id={self.id}, user_id={self.user_id}, rooms={sorted(self.rooms)})>"


class Broadcaster:
    """Registry of live connections and per-user rooms."""

    def __init__(self, send_timeout: float = 5.0, max_pending: int = 100):
        self.connections: dict[str, Connection] = {}
        self.rooms: dict[int, set[str]] = {}
        self._send_timeout = send_timeout
        self._max_pending = max_pending
        self._closed = False

    # ── Connection lifecycle ─────────────────────────────

    async def connect(self, websocket: WebSocket, user_id: Optional[int] = None) -> Connection:
        """Accept the socket and start its writer."""
        await websocket.accept()
        connection = Connection(websocket, user_id=user_id, max_pending=self._max_pending)
        connection.writer = asyncio.get_running_loop().create_task(self._writer(connection))
        self.connections[connection.id] = connection
        logger.info(f"Client connected: {connection.id} (user={user_id})")
        return connection

    def disconnect(self, connection: Connection) -> None:
        """Forget the connection and stop its writer. Safe to call twice."""
        self._forget(connection)
        writer = connection.writer
        if writer and not writer.done() and writer is not asyncio.current_task():
            writer.cancel()
        self._drain(connection)

    def join(self, connection: Connection, user_id: Optional[int]) -> bool:
        """
        Subscribe a connection to one user's room.

        Idempotent. Returns False (and does nothing) when ``user_id`` is
        missing or the connection is no longer registered.
        """
        if user_id is None or connection.id not in self.connections:
            return False
        self.rooms.setdefault(user_id, set()).add(connection.id)
        connection.rooms.add(user_id)
        logger.debug(f"Connection {connection.id} joined room user-{user_id}")
        return True

    async def close(self) -> None:
        """Drop every connection. Called on application shutdown."""
        self._closed = True
        connections = list(self.connections.values())
        for connection in connections:
            self.disconnect(connection)
            try:
                await connection.websocket.close()
            except Exception as e:
                logger.debug(f"Closing {connection.id} failed: {e}")
        logger.info(f"Broadcaster closed ({len(connections)} connections dropped)")

    async def flush(self) -> None:
        """Wait until every frame queued so far has been handled."""
        await asyncio.gather(
            *(c.queue.join() for c in list(self.connections.values())),
            return_exceptions=True,
        )

    def room_size(self, user_id: int) -> int:
        return len(self.rooms.get(user_id, ()))

    # ── Emission ─────────────────────────────────────────

    def emit(self, event: str, data: Any = None, *, room: Optional[int] = None) -> int:
        """
        Queue an event for every connection, or only for one user's room.

        Never blocks and never raises because of a client.

        Returns:
            Number of connections the frame was queued for
        """
        if self._closed:
            return 0

        if room is None:
            targets = list(self.connections.values())
        else:
            targets = [self.connections[cid] for cid in self.rooms.get(room, ()) if cid in self.connections]

        frame = {"event": event, "data": data}
        queued = 0
        for connection in targets:
            try:
                connection.queue.put_nowait(frame)
                queued += 1
            except asyncio.QueueFull:
                logger.warning(f"Dropping {event} for slow connection {connection.id}")
        return queued

    def notify_user(self, user_id: Optional[int], event: str, data: Any = None) -> int:
        """Targeted event for one user's room."""
        if user_id is None:
            return 0
        return self.emit(event, data, room=user_id)

    # ── Domain events ────────────────────────────────────

    def notice_created(self, notice: dict) -> None:
        self.emit(NOTICE_UPDATE)
        self.emit(NEW_NOTICE, {
            "notice": notice,
            "message": f"New {notice['category']} notice posted",
        })

    def notice_updated(self, notice: dict) -> None:
        # Clients re-fetch; the list signal carries no detail
        self.emit(NOTICE_UPDATE)

    def notice_deleted(self, notice_id: int) -> None:
        self.emit(NOTICE_UPDATE)

    def comment_created(self, comment: dict, notice: dict, target_user_id: Optional[int] = None) -> None:
        self.emit(NOTIFICATION_UPDATE)
        if target_user_id is not None:
            self.notify_user(target_user_id, NEW_COMMENT, {
                "comment": comment,
                "notice": notice,
                "message": f"New comment on your notice: {notice['title']}",
            })
        self.emit(NEW_COMMENT)

    def comment_edited(self, comment: dict) -> None:
        self.emit(NOTIFICATION_UPDATE)
        self.emit(COMMENT_EDITED, {"comment": comment})

    def comment_deleted(self, comment_id: int) -> None:
        self.emit(NOTIFICATION_UPDATE)
        self.emit(COMMENT_DELETED, {"comment_id": comment_id})

    # ── Internals ────────────────────────────────────────

    def _forget(self, connection: Connection) -> None:
        if self.connections.pop(connection.id, None) is None:
            return
        for user_id in connection.rooms:
            members = self.rooms.get(user_id)
            if not members:
                continue
            members.discard(connection.id)
            if not members:
                self.rooms.pop(user_id, None)
        connection.rooms.clear()
        logger.info(f"Client disconnected: {connection.id}")

    @staticmethod
    def _drain(connection: Connection) -> None:
        # Mark unsent frames done so flush() never waits on a dead socket
        while True:
            try:
                connection.queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            connection.queue.task_done()

    async def _writer(self, connection: Connection) -> None:
        while True:
            frame = await connection.queue.get()
            try:
                await asyncio.wait_for(
                    connection.websocket.send_json(frame),
                    timeout=self._send_timeout,
                )
            except Exception as e:
                logger.warning(f"Send {frame['event']} to {connection.id} failed: {e}")
                self.disconnect(connection)
                return
            finally:
                connection.queue.task_done()

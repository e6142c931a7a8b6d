import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

from fastapi import WebSocket

from app.config import Settings
from app.schemas.ws import (
    ConnectedPayload,
    MessageType,
    WSCloseCode,
    WSServerMessage,
)

logger = logging.getLogger(__name__)


@dataclass
class Connection:
    """Represents an active WebSocket connection."""

    connection_id: str
    websocket: WebSocket
    user_id: str
    user_name: str
    connected_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_heartbeat: datetime = field(default_factory=lambda: datetime.now(UTC))
    room_code: str | None = None


class ConnectionManager:
    """Manages WebSocket connections and their room subscriptions.

    Local storage:
        - _connections: connection_id -> Connection
        - _user_connections: user_id -> set of connection_ids
        - _room_connections: room_code -> set of connection_ids

    Implements the room publisher used by the match coordinator.
    """

    def __init__(self, settings: Settings):
        self._settings = settings

        self._connections: dict[str, Connection] = {}
        self._user_connections: dict[str, set[str]] = {}
        self._room_connections: dict[str, set[str]] = {}

        # Cleanup task
        self._cleanup_task: asyncio.Task | None = None

        logger.info("ConnectionManager initialized")

    async def connect(self, websocket: WebSocket, user_id: str, user_name: str) -> Connection:
        """Register a new, already accepted WebSocket connection.

        Args:
            websocket: The WebSocket instance.
            user_id: The authenticated user's ID.
            user_name: The authenticated user's name.

        Returns:
            The created Connection object.
        """
        connection_id = str(uuid.uuid4())
        now = datetime.now(UTC)

        connection = Connection(
            connection_id=connection_id,
            websocket=websocket,
            user_id=user_id,
            user_name=user_name,
            connected_at=now,
            last_heartbeat=now,
        )

        self._connections[connection_id] = connection
        self._user_connections.setdefault(user_id, set()).add(connection_id)

        logger.info("Connection %s established for user %s", connection_id, user_id[:8])

        # Send connected acknowledgment
        await self.send_to_connection(
            connection_id,
            WSServerMessage(
                type=MessageType.CONNECTED,
                payload=ConnectedPayload(
                    connection_id=connection_id,
                    user_id=user_id,
                    name=user_name,
                ).model_dump(),
            ),
        )

        return connection

    async def disconnect(self, connection_id: str) -> None:
        """Remove a WebSocket connection from local storage.

        The Connection keeps its room_code so the caller can still leave the room.

        Args:
            connection_id: The connection to remove.
        """
        connection = self._connections.pop(connection_id, None)
        if connection is None:
            logger.debug("Connection %s not found for disconnect", connection_id)
            return

        user_id = connection.user_id

        if connection.room_code:
            self._unsubscribe_from_room_internal(connection_id, connection.room_code)

        if user_id in self._user_connections:
            self._user_connections[user_id].discard(connection_id)
            if not self._user_connections[user_id]:
                del self._user_connections[user_id]

        logger.info("Connection %s disconnected for user %s", connection_id, user_id[:8])

    async def heartbeat(self, connection_id: str) -> None:
        """Update the last heartbeat timestamp for a connection.

        Args:
            connection_id: The connection to update.
        """
        connection = self._connections.get(connection_id)
        if connection:
            connection.last_heartbeat = datetime.now(UTC)
            logger.debug("Heartbeat updated for connection %s", connection_id)

    async def cleanup_stale_connections(self) -> None:
        """Remove connections that have exceeded the timeout period."""
        now = datetime.now(UTC)
        timeout = self._settings.WS_CONNECTION_TIMEOUT
        stale_connections = []

        # Snapshot the connections to avoid RuntimeError if dict is modified during iteration
        for conn_id, connection in list(self._connections.items()):
            elapsed = (now - connection.last_heartbeat).total_seconds()
            if elapsed > timeout:
                stale_connections.append(conn_id)
                logger.warning(
                    "Connection %s for user %s is stale (%.1fs since heartbeat)",
                    conn_id,
                    connection.user_id[:8],
                    elapsed,
                )

        for conn_id in stale_connections:
            connection = self._connections.get(conn_id)
            if connection:
                try:
                    await connection.websocket.close(code=WSCloseCode.GOING_AWAY)
                except Exception as e:
                    logger.debug("Error closing stale websocket %s: %s", conn_id, e)
            await self.disconnect(conn_id)

        if stale_connections:
            logger.info("Cleaned up %d stale connections", len(stale_connections))

    async def start_cleanup_task(self) -> None:
        """Start the periodic cleanup task for stale connections."""
        if self._cleanup_task is not None:
            logger.warning("Cleanup task already running")
            return

        async def cleanup_loop():
            interval = self._settings.WS_HEARTBEAT_INTERVAL
            logger.info("Starting cleanup task with interval %ds", interval)
            while True:
                try:
                    await asyncio.sleep(interval)
                    await self.cleanup_stale_connections()
                except asyncio.CancelledError:
                    logger.info("Cleanup task cancelled")
                    break
                except Exception as e:
                    logger.error("Error in cleanup task: %s", e)

        self._cleanup_task = asyncio.create_task(cleanup_loop())

    async def stop_cleanup_task(self) -> None:
        """Stop the periodic cleanup task."""
        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None
            logger.info("Cleanup task stopped")

    async def close_all_connections(self) -> None:
        """Close all active WebSocket connections gracefully."""
        logger.info("Closing all %d connections", len(self._connections))
        for conn_id in list(self._connections.keys()):
            connection = self._connections.get(conn_id)
            if connection:
                try:
                    await connection.websocket.close(code=WSCloseCode.GOING_AWAY)
                except Exception as e:
                    logger.debug("Error closing websocket %s: %s", conn_id, e)
            await self.disconnect(conn_id)

    async def send_to_connection(self, connection_id: str, message: WSServerMessage) -> bool:
        """Send a message to a specific connection.

        Args:
            connection_id: The target connection.
            message: The message to send.

        Returns:
            True if sent successfully, False otherwise.
        """
        connection = self._connections.get(connection_id)
        if connection is None:
            logger.debug("Connection %s not found for sending", connection_id)
            return False

        try:
            await connection.websocket.send_json(message.model_dump(mode="json", exclude_none=True))
            return True
        except Exception as e:
            logger.warning("Failed to send to connection %s: %s", connection_id, e)
            await self.disconnect(connection_id)
            return False

    async def subscribe_to_room(self, connection_id: str, room_code: str) -> None:
        """Subscribe a connection to a room for receiving room messages.

        Args:
            connection_id: The connection to subscribe.
            room_code: The room to subscribe to.
        """
        connection = self._connections.get(connection_id)
        if connection is None:
            logger.warning("Connection %s not found for room subscription", connection_id)
            return

        # Unsubscribe from current room if any
        if connection.room_code and connection.room_code != room_code:
            self._unsubscribe_from_room_internal(connection_id, connection.room_code)

        connection.room_code = room_code
        self._room_connections.setdefault(room_code, set()).add(connection_id)

        logger.info("Connection %s subscribed to room %s", connection_id, room_code)

    async def unsubscribe_from_room(self, connection_id: str) -> None:
        """Unsubscribe a connection from its current room.

        Args:
            connection_id: The connection to unsubscribe.
        """
        connection = self._connections.get(connection_id)
        if connection is None or connection.room_code is None:
            return

        self._unsubscribe_from_room_internal(connection_id, connection.room_code)
        connection.room_code = None

    def _unsubscribe_from_room_internal(self, connection_id: str, room_code: str) -> None:
        """Remove a connection from room tracking.

        Does not modify connection.room_code - caller is responsible for that.
        """
        if room_code in self._room_connections:
            self._room_connections[room_code].discard(connection_id)
            if not self._room_connections[room_code]:
                del self._room_connections[room_code]
        logger.debug("Connection %s unsubscribed from room %s", connection_id, room_code)

    async def send_to_room(
        self, room_id: str, message: WSServerMessage, exclude_connection: str | None = None
    ) -> int:
        """Send a message to all connections in a room.

        Args:
            room_id: The target room code.
            message: The message to send.
            exclude_connection: Optional connection ID to exclude from sending.

        Returns:
            Number of connections the message was sent to.
        """
        sent = 0
        for conn_id in list(self._room_connections.get(room_id, set())):
            if conn_id == exclude_connection:
                continue
            if await self.send_to_connection(conn_id, message):
                sent += 1
        return sent

    def get_connection(self, connection_id: str) -> Connection | None:
        """Get a connection by ID."""
        return self._connections.get(connection_id)

    def get_room_connection_count(self, room_code: str) -> int:
        """Get the number of connections subscribed to a room."""
        return len(self._room_connections.get(room_code, set()))

    def get_total_connection_count(self) -> int:
        """Get the total number of connections."""
        return len(self._connections)

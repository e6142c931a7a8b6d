import json
import logging
import time
from collections import defaultdict

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from starlette.websockets import WebSocketState

from app.schemas.ws import (
    ErrorPayload,
    MessageType,
    WSClientMessage,
    WSCloseCode,
    WSServerMessage,
)
from app.services.websocket.handlers import HandlerContext, dispatch
from app.services.websocket.handlers.leave import leave_room_and_notify

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])

RATE_LIMIT_WINDOW = 1.0  # seconds


class RateLimiter:
    """Simple sliding window rate limiter per connection."""

    def __init__(self, max_tokens: int, window: float = RATE_LIMIT_WINDOW):
        self.max_tokens = max_tokens
        self.window = window
        self._tokens: dict[str, list[float]] = defaultdict(list)

    def is_allowed(self, connection_id: str) -> bool:
        """Check if a message is allowed under rate limiting."""
        now = time.time()
        cutoff = now - self.window

        # Remove expired timestamps
        self._tokens[connection_id] = [t for t in self._tokens[connection_id] if t > cutoff]

        # Check if under limit
        if len(self._tokens[connection_id]) >= self.max_tokens:
            return False

        # Record this message
        self._tokens[connection_id].append(now)
        return True

    def remove(self, connection_id: str) -> None:
        """Remove rate limit tracking for a connection."""
        self._tokens.pop(connection_id, None)


def _error_message(error_code: str, message: str) -> WSServerMessage:
    return WSServerMessage(
        type=MessageType.ERROR,
        payload=ErrorPayload(error_code=error_code, message=message).model_dump(),
    )


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    token: str = Query(..., description="Session credential"),
):
    """WebSocket endpoint for real-time rooms and matches.

    Clients connect with: ws://host/api/v1/ws?token=<credential>

    The credential is verified before the connection is accepted; an
    expired one closes with AUTH_EXPIRED so the client can log in again.
    On success the server sends a 'connected' message. Rooms are created
    and joined with messages over the open socket. Disconnecting leaves
    the current room.
    """
    services = websocket.app.state.services
    settings = services.settings
    manager = services.manager

    # Validate credential BEFORE accepting connection
    auth_result = services.identity.verify(token)
    if not auth_result.success or auth_result.user_id is None:
        logger.warning("WS connection rejected: %s", auth_result.error_message)
        close_code = WSCloseCode.AUTH_EXPIRED if auth_result.expired else WSCloseCode.AUTH_FAILED
        await websocket.close(code=close_code)
        return

    user_id = auth_result.user_id
    user_name = auth_result.name or ""

    await websocket.accept()
    logger.info("WS connection accepted for user %s", user_id[:8])

    # Register with connection manager (sends "connected" message to user)
    connection = await manager.connect(websocket, user_id, user_name)
    rate_limiter: RateLimiter = websocket.app.state.rate_limiter

    try:
        while True:
            # Check if connection is still open
            if websocket.client_state != WebSocketState.CONNECTED:
                logger.debug("WebSocket no longer connected, exiting loop")
                break

            # Receive raw message with size limit check
            try:
                message_data = await websocket.receive()
            except Exception as e:
                logger.debug("Error receiving message: %s", e)
                break

            # Handle disconnect message
            if message_data.get("type") == "websocket.disconnect":
                break

            # Get raw bytes/text for size check
            raw_text = message_data.get("text")
            raw_bytes = message_data.get("bytes")

            if raw_text:
                message_size = len(raw_text.encode("utf-8"))
            elif raw_bytes:
                message_size = len(raw_bytes)
            else:
                continue

            # Check message size limit
            if message_size > settings.WS_MAX_MESSAGE_SIZE:
                logger.warning(
                    "Message too large from connection %s: %d bytes (max %d)",
                    connection.connection_id,
                    message_size,
                    settings.WS_MAX_MESSAGE_SIZE,
                )
                await manager.send_to_connection(
                    connection.connection_id,
                    _error_message(
                        "MESSAGE_TOO_LARGE",
                        f"Message exceeds maximum size of {settings.WS_MAX_MESSAGE_SIZE} bytes",
                    ),
                )
                continue

            # Check rate limit
            if not rate_limiter.is_allowed(connection.connection_id):
                logger.warning(
                    "Rate limit exceeded for connection %s",
                    connection.connection_id,
                )
                await manager.send_to_connection(
                    connection.connection_id,
                    _error_message("RATE_LIMITED", "Too many messages, please slow down"),
                )
                continue

            # Parse JSON from raw text
            if not raw_text:
                continue

            try:
                data = json.loads(raw_text)
            except json.JSONDecodeError:
                logger.warning("Invalid JSON from connection %s", connection.connection_id)
                await manager.send_to_connection(
                    connection.connection_id,
                    _error_message("INVALID_JSON", "Invalid JSON format"),
                )
                continue

            # Parse and validate message
            try:
                message = WSClientMessage.model_validate(data)
            except ValidationError as e:
                logger.warning(
                    "Invalid message from connection %s: %s",
                    connection.connection_id,
                    e,
                )
                await manager.send_to_connection(
                    connection.connection_id,
                    _error_message("INVALID_MESSAGE", "Invalid message format"),
                )
                continue

            # Dispatch message to handler
            ctx = HandlerContext(
                connection_id=connection.connection_id,
                user_id=user_id,
                user_name=user_name,
                message=message,
                manager=manager,
                services=services,
            )

            result = await dispatch(ctx)

            if result is None:
                logger.debug(
                    "Unhandled message type %s from connection %s",
                    message.type,
                    connection.connection_id,
                )
                await manager.send_to_connection(
                    connection.connection_id,
                    _error_message("UNSUPPORTED_MESSAGE", f"Unsupported message type: {message.type.value}"),
                )
                continue

            # Send response to requester
            if result.response:
                await manager.send_to_connection(connection.connection_id, result.response)

            # Broadcast to room if needed
            if result.broadcast and result.room_id:
                await manager.send_to_room(
                    result.room_id,
                    result.broadcast,
                    exclude_connection=connection.connection_id,
                )

    except WebSocketDisconnect as e:
        logger.info(
            "WS disconnected: connection %s, code %s",
            connection.connection_id,
            e.code,
        )
    except Exception:
        logger.exception("WS error for connection %s", connection.connection_id)
    finally:
        rate_limiter.remove(connection.connection_id)
        await manager.disconnect(connection.connection_id)

        # No resume: a dropped connection leaves its room
        await leave_room_and_notify(services, manager, connection)

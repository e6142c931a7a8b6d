from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from app.schemas.game_engine import Color


class MessageType(str, Enum):
    """WebSocket message types."""

    # Core
    PING = "ping"
    PONG = "pong"
    CONNECTED = "connected"
    ERROR = "error"

    # Rooms
    CREATE_ROOM = "create_room"
    CREATE_ROOM_OK = "create_room_ok"
    CREATE_ROOM_ERROR = "create_room_error"
    JOIN_ROOM = "join_room"
    JOIN_ROOM_OK = "join_room_ok"
    JOIN_ROOM_ERROR = "join_room_error"
    LEAVE_ROOM = "leave_room"
    LEAVE_ROOM_OK = "leave_room_ok"
    LEAVE_ROOM_ERROR = "leave_room_error"
    ROOM_UPDATED = "room_updated"
    START_GAME = "start_game"
    START_GAME_OK = "start_game_ok"
    START_GAME_ERROR = "start_game_error"

    # Game
    GAME_ACTION = "game_action"
    GAME_EVENTS = "game_events"
    GAME_STATE = "game_state"
    GAME_ERROR = "game_error"
    GAME_CAPTURE = "game_capture"
    GAME_WON = "game_won"

    # Chat
    CHAT_SEND = "chat_send"
    CHAT_MESSAGE = "chat_message"
    CHAT_ERROR = "chat_error"


class WSCloseCode:
    """WebSocket close codes (RFC 6455 + custom)."""

    # Standard RFC 6455 codes
    NORMAL = 1000
    GOING_AWAY = 1001
    POLICY_VIOLATION = 1008
    INTERNAL_ERROR = 1011

    # Custom application codes (4000-4999)
    AUTH_FAILED = 4001
    AUTH_EXPIRED = 4002


class WSClientMessage(BaseModel):
    """Message sent from client to server."""

    type: MessageType
    request_id: str | None = None
    payload: dict[str, Any] | None = None


class WSServerMessage(BaseModel):
    """Message sent from server to client."""

    type: MessageType
    request_id: str | None = None
    payload: dict[str, Any] | None = None


# --- Payload schemas ---


class ConnectedPayload(BaseModel):
    """Payload for the 'connected' message."""

    connection_id: str
    user_id: str
    name: str


class PongPayload(BaseModel):
    """Payload for the 'pong' message."""

    server_time: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ErrorPayload(BaseModel):
    """Payload for error messages (ERROR and every *_ERROR type)."""

    error_code: str
    message: str


class JoinRoomPayload(BaseModel):
    """Payload for the 'join_room' message from client."""

    room_code: str = Field(..., min_length=6, max_length=6, pattern="^[A-Za-z0-9]{6}$")


class ChatSendPayload(BaseModel):
    """Payload for the 'chat_send' message from client.

    Trimming and the length cap are applied by the room service.
    """

    message: str = Field(..., max_length=2000)


# --- Game payload schemas ---


class GameActionPayload(BaseModel):
    """Payload for GAME_ACTION messages from client.

    The die is rolled by the server, so a roll carries no value.
    """

    action_type: Literal["roll", "move"] = Field(..., description="Action type: 'roll' or 'move'")
    token_id: int | None = Field(None, ge=0, le=3, description="Token slot for move action")


class GameEventsPayload(BaseModel):
    """Payload for GAME_EVENTS messages to clients.

    Contains a list of events that occurred during action processing.
    Events are broadcast to all room members for animation/UI updates.
    """

    events: list[dict[str, Any]] = Field(
        ..., description="List of game events (serialized)"
    )


class GameStatePayload(BaseModel):
    """Payload for GAME_STATE messages to clients.

    Contains the full match snapshot for rendering.
    """

    state: dict[str, Any] = Field(..., description="Match snapshot (serialized)")


class GameCapturePayload(BaseModel):
    """Out-of-band notice that a capture happened on the last move."""

    capturing_color: Color
    captured_colors: list[Color]


class GameWonPayload(BaseModel):
    """Out-of-band notice that the match was won."""

    winner_id: str
    winner_name: str
    winner_color: Color

"""Pydantic schemas for room operations."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from app.schemas.game_engine import Color

ROOM_CODE_LENGTH = 6
ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


class RoomStatus(str, Enum):
    WAITING = "waiting"
    IN_GAME = "in_game"
    FINISHED = "finished"


class RoomMemberView(BaseModel):
    """A member as shown in the room roster."""

    user_id: str
    name: str
    color: Color | None = Field(None, description="Assigned when the match starts")
    is_host: bool = False


class ChatMessage(BaseModel):
    """A single chat line. System lines have no sender id."""

    sender_id: str | None = None
    sender_name: str
    color: Color | None = None
    message: str
    timestamp: datetime
    is_system: bool = False


class RoomRoster(BaseModel):
    """Room view for lobby rendering (distinct from the match snapshot).

    Used as payload for CREATE_ROOM_OK, JOIN_ROOM_OK, and ROOM_UPDATED messages.
    """

    code: str = Field(
        ...,
        min_length=ROOM_CODE_LENGTH,
        max_length=ROOM_CODE_LENGTH,
        description="6-character room code",
    )
    host_id: str
    status: RoomStatus
    max_players: int
    members: list[RoomMemberView]
    chat: list[ChatMessage] = Field(
        default_factory=list, description="Most recent chat lines, oldest first"
    )

"""In-memory room registry."""

import asyncio
import logging
import secrets
from collections import deque
from dataclasses import dataclass, field

from app.schemas.game_engine import MAX_PLAYERS, Color, GameState
from app.schemas.room import (
    ROOM_CODE_ALPHABET,
    ROOM_CODE_LENGTH,
    ChatMessage,
    RoomStatus,
)

logger = logging.getLogger(__name__)

# Collisions are astronomically unlikely; bound the retries anyway
MAX_CODE_ATTEMPTS = 100


@dataclass
class RoomMember:
    """A member of a room, in join order."""

    user_id: str
    name: str
    color: Color | None = None


@dataclass
class Room:
    """A room and its embedded match state.

    Owned by the room service and the match coordinator; every mutation
    happens while holding ``lock``.
    """

    code: str
    host_id: str
    members: list[RoomMember]
    chat: deque[ChatMessage]
    status: RoomStatus = RoomStatus.WAITING
    max_players: int = MAX_PLAYERS
    game_state: GameState | None = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def get_member(self, user_id: str) -> RoomMember | None:
        return next((m for m in self.members if m.user_id == user_id), None)

    def is_member(self, user_id: str) -> bool:
        return self.get_member(user_id) is not None

    @property
    def is_full(self) -> bool:
        return len(self.members) >= self.max_players


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


class RoomStore:
    """Rooms keyed by their (upper-case) code."""

    def __init__(self, chat_history_limit: int = 100):
        self._rooms: dict[str, Room] = {}
        self._chat_history_limit = chat_history_limit

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, code: str) -> bool:
        return normalize_code(code) in self._rooms

    def _generate_code(self) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = "".join(
                secrets.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH)
            )
            if code not in self._rooms:
                return code
            logger.debug("Room code collision: %s", code)
        raise RuntimeError("Could not allocate a unique room code")

    def create(self, host_id: str, host_name: str) -> Room:
        """Allocate a fresh code and seed a waiting room with its host."""
        code = self._generate_code()
        room = Room(
            code=code,
            host_id=host_id,
            members=[RoomMember(user_id=host_id, name=host_name)],
            chat=deque(maxlen=self._chat_history_limit),
        )
        self._rooms[code] = room
        return room

    def get(self, code: str) -> Room | None:
        return self._rooms.get(normalize_code(code))

    def delete(self, code: str) -> None:
        self._rooms.pop(normalize_code(code), None)

"""Room service for managing game rooms."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from app.config import Settings
from app.schemas.game_engine import (
    COLOR_ORDER,
    MIN_PLAYERS,
    GameState,
    PlayerAttributes,
)
from app.schemas.room import ChatMessage, RoomMemberView, RoomRoster, RoomStatus
from app.services.game.engine import AnyGameEvent
from app.services.game.start_game import start_game

from .store import Room, RoomMember, RoomStore

logger = logging.getLogger(__name__)

SYSTEM_SENDER = "System"


@dataclass
class RoomResult:
    """Result of create_room and join_room operations."""

    success: bool
    room: Room | None = None
    roster: RoomRoster | None = None
    error_code: str | None = None
    error_message: str | None = None


@dataclass
class LeaveRoomResult:
    """Result of leave_room operation.

    ``roster`` is None when the room was destroyed.
    """

    success: bool
    room_deleted: bool = False
    new_host_id: str | None = None
    roster: RoomRoster | None = None
    system_message: ChatMessage | None = None
    error_code: str | None = None
    error_message: str | None = None


@dataclass
class StartMatchResult:
    """Result of start_match operation."""

    success: bool
    roster: RoomRoster | None = None
    state: GameState | None = None
    events: list[AnyGameEvent] = field(default_factory=list)
    error_code: str | None = None
    error_message: str | None = None


@dataclass
class ChatResult:
    """Result of send_chat operation."""

    success: bool
    message: ChatMessage | None = None
    error_code: str | None = None
    error_message: str | None = None


class RoomService:
    """Service for managing game rooms.

    Handles the room lifecycle (create, join, leave, start) and the room
    chat. Every mutation of an existing room runs under that room's lock.
    """

    def __init__(self, store: RoomStore, settings: Settings):
        self._store = store
        self._settings = settings

    @property
    def store(self) -> RoomStore:
        return self._store

    def build_roster(self, room: Room) -> RoomRoster:
        """Build the roster view of a room with the recent chat tail."""
        tail = list(room.chat)[-self._settings.CHAT_ROSTER_TAIL :]
        return RoomRoster(
            code=room.code,
            host_id=room.host_id,
            status=room.status,
            max_players=room.max_players,
            members=[
                RoomMemberView(
                    user_id=m.user_id,
                    name=m.name,
                    color=m.color,
                    is_host=m.user_id == room.host_id,
                )
                for m in room.members
            ],
            chat=tail,
        )

    def get_roster(self, code: str) -> RoomRoster | None:
        room = self._store.get(code)
        if room is None:
            return None
        return self.build_roster(room)

    async def create_room(self, user_id: str, name: str) -> RoomResult:
        """Create a new waiting room with the caller as host and sole member.

        Args:
            user_id: The authenticated user creating the room.
            name: The user's display name.

        Returns:
            RoomResult with the new room and its roster.
        """
        room = self._store.create(user_id, name)
        logger.info("Room created: code=%s, host=%s", room.code, user_id[:8])
        return RoomResult(success=True, room=room, roster=self.build_roster(room))

    async def join_room(self, code: str, user_id: str, name: str) -> RoomResult:
        """Add the caller to a waiting room.

        Fails with ROOM_NOT_FOUND, MATCH_ALREADY_STARTED, ROOM_FULL or
        ALREADY_MEMBER.
        """
        room = self._store.get(code)
        if room is None:
            logger.warning("Join rejected: room %s not found", code)
            return RoomResult(
                success=False,
                error_code="ROOM_NOT_FOUND",
                error_message="Room not found",
            )

        async with room.lock:
            if room.status != RoomStatus.WAITING:
                return RoomResult(
                    success=False,
                    error_code="MATCH_ALREADY_STARTED",
                    error_message="Game already started",
                )
            if room.is_full:
                return RoomResult(
                    success=False,
                    error_code="ROOM_FULL",
                    error_message="Room is full",
                )
            if room.is_member(user_id):
                return RoomResult(
                    success=False,
                    error_code="ALREADY_MEMBER",
                    error_message="Already in room",
                )

            room.members.append(RoomMember(user_id=user_id, name=name))
            logger.info(
                "User %s joined room %s (%d/%d)",
                user_id[:8],
                room.code,
                len(room.members),
                room.max_players,
            )
            return RoomResult(success=True, room=room, roster=self.build_roster(room))

    async def leave_room(self, code: str, user_id: str) -> LeaveRoomResult:
        """Remove the caller from a room.

        An empty room is destroyed. When the host leaves, the earliest
        remaining member becomes host. Leaving an in-game room does not
        remove the seat from the match.
        """
        room = self._store.get(code)
        if room is None:
            return LeaveRoomResult(
                success=False,
                error_code="ROOM_NOT_FOUND",
                error_message="Room not found",
            )

        async with room.lock:
            member = room.get_member(user_id)
            if member is None:
                return LeaveRoomResult(
                    success=False,
                    error_code="NOT_IN_ROOM",
                    error_message="Not a member of this room",
                )

            room.members.remove(member)
            logger.info("User %s left room %s", user_id[:8], room.code)

            if not room.members:
                self._store.delete(room.code)
                logger.info("Room %s destroyed (empty)", room.code)
                return LeaveRoomResult(success=True, room_deleted=True)

            new_host_id = None
            if room.host_id == user_id:
                room.host_id = room.members[0].user_id
                new_host_id = room.host_id
                logger.info("Host of room %s passed to %s", room.code, new_host_id[:8])

            notice = self._system_message(f"{member.name} left the room")
            room.chat.append(notice)

            return LeaveRoomResult(
                success=True,
                new_host_id=new_host_id,
                roster=self.build_roster(room),
                system_message=notice,
            )

    async def start_match(self, code: str, user_id: str) -> StartMatchResult:
        """Start the match of a waiting room.

        Fails with ROOM_NOT_FOUND, NOT_HOST, NOT_ENOUGH_PLAYERS or
        ALREADY_STARTED. On success colors are assigned in join order and
        a fresh match is bound to the member list.
        """
        room = self._store.get(code)
        if room is None:
            return StartMatchResult(
                success=False,
                error_code="ROOM_NOT_FOUND",
                error_message="Room not found",
            )

        async with room.lock:
            if room.host_id != user_id:
                logger.warning("Start rejected: %s is not host of %s", user_id[:8], room.code)
                return StartMatchResult(
                    success=False,
                    error_code="NOT_HOST",
                    error_message="Only the host can start the game",
                )
            if len(room.members) < MIN_PLAYERS:
                return StartMatchResult(
                    success=False,
                    error_code="NOT_ENOUGH_PLAYERS",
                    error_message=f"Need at least {MIN_PLAYERS} players",
                )
            if room.status != RoomStatus.WAITING:
                return StartMatchResult(
                    success=False,
                    error_code="ALREADY_STARTED",
                    error_message="Game already started",
                )

            for member, color in zip(room.members, COLOR_ORDER):
                member.color = color

            attributes = [
                PlayerAttributes(player_id=m.user_id, name=m.name, color=m.color)
                for m in room.members
            ]
            try:
                result = start_game(attributes, self._settings.TURN_TRANSITION_DELAY_MS)
            except ValueError as e:
                for member in room.members:
                    member.color = None
                logger.warning("Start rejected for room %s: %s", room.code, e)
                return StartMatchResult(
                    success=False,
                    error_code="VALIDATION_ERROR",
                    error_message=str(e),
                )

            room.game_state = result.state
            room.status = RoomStatus.IN_GAME
            logger.info(
                "Match started: room=%s, players=%d",
                room.code,
                len(room.members),
            )
            return StartMatchResult(
                success=True,
                roster=self.build_roster(room),
                state=result.state,
                events=result.events,
            )

    async def send_chat(self, code: str, user_id: str, text: str) -> ChatResult:
        """Append a member's chat line to the room transcript.

        The text is trimmed and capped; empty messages are rejected.
        """
        room = self._store.get(code)
        if room is None:
            return ChatResult(
                success=False,
                error_code="ROOM_NOT_FOUND",
                error_message="Room not found",
            )

        message = (text or "").strip()[: self._settings.CHAT_MESSAGE_MAX_LENGTH]
        if not message:
            return ChatResult(
                success=False,
                error_code="EMPTY_MESSAGE",
                error_message="Message cannot be empty",
            )

        async with room.lock:
            member = room.get_member(user_id)
            if member is None:
                return ChatResult(
                    success=False,
                    error_code="NOT_IN_ROOM",
                    error_message="Not a member of this room",
                )

            entry = ChatMessage(
                sender_id=member.user_id,
                sender_name=member.name,
                color=member.color,
                message=message,
                timestamp=datetime.now(UTC),
            )
            room.chat.append(entry)
            logger.debug("Chat in room %s from %s", room.code, user_id[:8])
            return ChatResult(success=True, message=entry)

    @staticmethod
    def _system_message(text: str) -> ChatMessage:
        return ChatMessage(
            sender_name=SYSTEM_SENDER,
            message=text,
            timestamp=datetime.now(UTC),
            is_system=True,
        )

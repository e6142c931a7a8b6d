"""Match coordinator: authoritative roll/move handling for networked rooms.

The coordinator owns every mutation of a room's match. It draws the die,
feeds intents through the engine under the room lock, stores the new
state, and publishes the results to every room member:

- ``game_events``: the sequenced engine events
- ``game_state``: a full match snapshot
- ``game_capture`` / ``game_won``: one-shot notices for presentation effects

Forced forfeits with a pacing delay leave the match in the transition
phase; a scheduled task resolves them under the same lock.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from app.schemas.game_engine import GamePhase, MatchSnapshot
from app.schemas.room import RoomStatus
from app.schemas.ws import (
    GameCapturePayload,
    GameEventsPayload,
    GameStatePayload,
    GameWonPayload,
    MessageType,
    WSServerMessage,
)
from app.services.game.dice import DieSource, random_die
from app.services.game.engine import (
    AnyGameEvent,
    GameAction,
    GameEnded,
    MoveAction,
    ProcessResult,
    RollAction,
    TokenCaptured,
    build_snapshot,
    process_action,
    resolve_transition,
    validate_action,
)
from app.services.room.store import Room, RoomStore

logger = logging.getLogger(__name__)


class RoomPublisher(Protocol):
    """Fan-out of server messages to every connection subscribed to a room."""

    async def send_to_room(
        self,
        room_id: str,
        message: WSServerMessage,
        exclude_connection: str | None = None,
    ) -> int: ...


@dataclass
class CoordinatorResult:
    """Result of a roll or move intent."""

    success: bool
    value: int | None = None
    snapshot: MatchSnapshot | None = None
    events: list[AnyGameEvent] = field(default_factory=list)
    error_code: str | None = None
    error_message: str | None = None


class MatchCoordinator:
    """Serializes and publishes every match transition of every room."""

    def __init__(
        self,
        store: RoomStore,
        publisher: RoomPublisher | None = None,
        die: DieSource | None = None,
    ):
        self._store = store
        self._publisher = publisher
        self._die = die or random_die
        self._pending: dict[str, asyncio.Task] = {}

    def get_snapshot(self, code: str) -> MatchSnapshot | None:
        room = self._store.get(code)
        if room is None or room.game_state is None:
            return None
        return build_snapshot(room.game_state)

    def has_pending_transition(self, code: str) -> bool:
        return code in self._pending

    async def roll_dice(self, code: str, user_id: str) -> CoordinatorResult:
        """Roll for the current player of a room's match."""
        return await self._submit(code, user_id, roll=True)

    async def move_token(self, code: str, user_id: str, token_id: int) -> CoordinatorResult:
        """Move one of the current player's tokens with the cached roll."""
        return await self._submit(code, user_id, token_id=token_id)

    async def announce_start(self, code: str, events: list[AnyGameEvent]) -> None:
        """Publish the opening events and snapshot of a freshly started match."""
        room = self._store.get(code)
        if room is None or room.game_state is None:
            return
        async with room.lock:
            await self._publish(room, events)

    async def _submit(
        self,
        code: str,
        user_id: str,
        roll: bool = False,
        token_id: int | None = None,
    ) -> CoordinatorResult:
        room = self._store.get(code)
        if room is None:
            return CoordinatorResult(
                success=False,
                error_code="ROOM_NOT_FOUND",
                error_message="Room not found",
            )

        async with room.lock:
            state = room.game_state
            if room.status != RoomStatus.IN_GAME or state is None:
                return CoordinatorResult(
                    success=False,
                    error_code="MATCH_NOT_RUNNING",
                    error_message="No match in progress for this room",
                )

            value = None
            action: GameAction
            if roll:
                # The die is only drawn for an authorized roll
                validation = validate_action(state, RollAction(value=1), user_id)
                if not validation.is_valid:
                    return self._rejected(
                        room.code, user_id, validation.error_code, validation.error_message
                    )
                value = self._die()
                action = RollAction(value=value)
            else:
                action = MoveAction(token_id=token_id)

            result: ProcessResult = process_action(state, action, user_id)
            if not result.success or result.state is None:
                return self._rejected(room.code, user_id, result.error_code, result.error_message)

            room.game_state = result.state
            if result.state.phase == GamePhase.DONE:
                room.status = RoomStatus.FINISHED
                logger.info("Room %s finished", room.code)

            await self._publish(room, result.events)

            if result.state.phase == GamePhase.TRANSITION and result.state.pending_transition:
                self._schedule_transition(room.code, result.state.pending_transition.delay_ms)

            return CoordinatorResult(
                success=True,
                value=value,
                snapshot=build_snapshot(result.state),
                events=result.events,
            )

    @staticmethod
    def _rejected(
        code: str,
        user_id: str,
        error_code: str | None,
        error_message: str | None,
    ) -> CoordinatorResult:
        logger.warning(
            "Intent rejected in room %s: user=%s, code=%s",
            code,
            user_id[:8],
            error_code,
        )
        return CoordinatorResult(
            success=False,
            error_code=error_code,
            error_message=error_message,
        )

    def _schedule_transition(self, code: str, delay_ms: int) -> None:
        if code in self._pending:
            logger.warning("Transition already scheduled for room %s", code)
            return
        task = asyncio.create_task(self._resolve_after(code, delay_ms))
        self._pending[code] = task

        def _forget(done: asyncio.Task) -> None:
            if self._pending.get(code) is done:
                del self._pending[code]

        task.add_done_callback(_forget)
        logger.debug("Transition scheduled: room=%s, delay=%dms", code, delay_ms)

    async def _resolve_after(self, code: str, delay_ms: int) -> None:
        await asyncio.sleep(delay_ms / 1000)
        await self.resolve_pending(code)

    async def resolve_pending(self, code: str) -> bool:
        """Complete a room's pending forfeit now. Returns False if none is pending."""
        room = self._store.get(code)
        if room is None:
            return False

        async with room.lock:
            if room.game_state is None:
                return False
            result = resolve_transition(room.game_state)
            if not result.success or result.state is None:
                logger.debug("Nothing to resolve in room %s: %s", code, result.error_code)
                return False

            room.game_state = result.state
            logger.info("Turn transition resolved in room %s", room.code)
            await self._publish(room, result.events)
            return True

    async def _publish(self, room: Room, events: list[AnyGameEvent]) -> None:
        if self._publisher is None or room.game_state is None:
            return

        snapshot = build_snapshot(room.game_state)
        if events:
            await self._publisher.send_to_room(
                room.code,
                WSServerMessage(
                    type=MessageType.GAME_EVENTS,
                    payload=GameEventsPayload(
                        events=[e.model_dump(mode="json") for e in events]
                    ).model_dump(),
                ),
            )
        await self._publisher.send_to_room(
            room.code,
            WSServerMessage(
                type=MessageType.GAME_STATE,
                payload=GameStatePayload(state=snapshot.model_dump(mode="json")).model_dump(),
            ),
        )

        captures = [e for e in events if isinstance(e, TokenCaptured)]
        if captures:
            await self._publisher.send_to_room(
                room.code,
                WSServerMessage(
                    type=MessageType.GAME_CAPTURE,
                    payload=GameCapturePayload(
                        capturing_color=captures[0].capturing_color,
                        captured_colors=[e.captured_color for e in captures],
                    ).model_dump(mode="json"),
                ),
            )

        for event in events:
            if isinstance(event, GameEnded):
                await self._publisher.send_to_room(
                    room.code,
                    WSServerMessage(
                        type=MessageType.GAME_WON,
                        payload=GameWonPayload(
                            winner_id=event.winner_id,
                            winner_name=event.winner_name,
                            winner_color=event.winner_color,
                        ).model_dump(mode="json"),
                    ),
                )

    async def shutdown(self) -> None:
        """Cancel every scheduled transition."""
        tasks = list(self._pending.values())
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._pending.clear()
        logger.info("Match coordinator stopped (%d pending transitions cancelled)", len(tasks))

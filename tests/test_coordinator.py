"""Tests for the match coordinator of networked rooms."""

import asyncio

import pytest

from app.config import Settings
from app.schemas.game_engine import Color, GamePhase
from app.schemas.room import RoomStatus
from app.schemas.ws import MessageType, WSServerMessage
from app.services.game.coordinator import MatchCoordinator
from app.services.game.dice import ScriptedDie
from app.services.room.service import RoomService
from app.services.room.store import RoomMember, RoomStore

from .conftest import (
    PLAYER_1_ID,
    PLAYER_2_ID,
    column_token,
    create_player,
    create_state,
    finished_token,
    ring_token,
)


class FakePublisher:
    """Records every message sent to a room."""

    def __init__(self):
        self.sent: list[tuple[str, WSServerMessage]] = []

    async def send_to_room(self, room_id, message, exclude_connection=None) -> int:
        self.sent.append((room_id, message))
        return 1

    def types(self) -> list[MessageType]:
        return [m.type for _, m in self.sent]


def _seed_room(store: RoomStore, state) -> str:
    """Put a crafted mid-match state into a fresh in-game room."""
    room = store.create(PLAYER_1_ID, "Alice")
    room.members.append(RoomMember(user_id=PLAYER_2_ID, name="Bob"))
    room.members[0].color = Color.RED
    room.members[1].color = Color.GREEN
    room.game_state = state
    room.status = RoomStatus.IN_GAME
    return room.code


@pytest.fixture
def store() -> RoomStore:
    return RoomStore()


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


async def _started_room(settings: Settings, store: RoomStore) -> str:
    service = RoomService(store, settings)
    created = await service.create_room(PLAYER_1_ID, "Alice")
    await service.join_room(created.room.code, PLAYER_2_ID, "Bob")
    started = await service.start_match(created.room.code, PLAYER_1_ID)
    assert started.success
    return created.room.code


class TestRollAndMove:
    @pytest.mark.asyncio
    async def test_roll_publishes_events_and_state(self, settings, store, publisher):
        code = await _started_room(settings, store)
        coordinator = MatchCoordinator(store, publisher, die=ScriptedDie([6]))

        result = await coordinator.roll_dice(code, PLAYER_1_ID)

        assert result.success
        assert result.value == 6
        assert result.snapshot.phase == GamePhase.MOVE
        assert publisher.types() == [MessageType.GAME_EVENTS, MessageType.GAME_STATE]
        events = publisher.sent[0][1].payload["events"]
        assert events[0]["event_type"] == "dice_rolled"
        assert events[0]["value"] == 6
        state = publisher.sent[1][1].payload["state"]
        assert state["movable_token_ids"] == [0, 1, 2, 3]
        assert store.get(code).game_state.phase == GamePhase.MOVE

    @pytest.mark.asyncio
    async def test_out_of_turn_roll_is_rejected_quietly(self, settings, store, publisher):
        code = await _started_room(settings, store)
        die = ScriptedDie([6, 2])
        coordinator = MatchCoordinator(store, publisher, die=die)
        before = store.get(code).game_state

        result = await coordinator.roll_dice(code, PLAYER_2_ID)

        assert not result.success
        assert result.error_code == "NOT_YOUR_TURN"
        assert publisher.sent == []
        assert store.get(code).game_state is before
        # The rejected roll leaves the die untouched
        assert (await coordinator.roll_dice(code, PLAYER_1_ID)).value == 6

    @pytest.mark.asyncio
    async def test_roll_in_move_phase_does_not_draw(self, settings, store, publisher):
        code = await _started_room(settings, store)
        coordinator = MatchCoordinator(store, publisher, die=ScriptedDie([6, 5]))
        await coordinator.roll_dice(code, PLAYER_1_ID)

        result = await coordinator.roll_dice(code, PLAYER_1_ID)

        assert result.error_code == "INVALID_ACTION"
        await coordinator.move_token(code, PLAYER_1_ID, 0)
        assert (await coordinator.roll_dice(code, PLAYER_1_ID)).value == 5

    @pytest.mark.asyncio
    async def test_move_after_roll(self, settings, store, publisher):
        code = await _started_room(settings, store)
        coordinator = MatchCoordinator(store, publisher, die=ScriptedDie([6]))
        await coordinator.roll_dice(code, PLAYER_1_ID)

        result = await coordinator.move_token(code, PLAYER_1_ID, 0)

        assert result.success
        red = result.snapshot.players[0]
        assert red.tokens[0].ring_position == 0
        assert result.snapshot.phase == GamePhase.ROLL
        assert result.snapshot.current_player_id == PLAYER_1_ID

    @pytest.mark.asyncio
    async def test_unknown_room(self, store, publisher):
        coordinator = MatchCoordinator(store, publisher)
        result = await coordinator.roll_dice("ABCDEF", PLAYER_1_ID)
        assert result.error_code == "ROOM_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_waiting_room_has_no_match(self, settings, store, publisher):
        service = RoomService(store, settings)
        created = await service.create_room(PLAYER_1_ID, "Alice")
        coordinator = MatchCoordinator(store, publisher)

        result = await coordinator.roll_dice(created.room.code, PLAYER_1_ID)

        assert result.error_code == "MATCH_NOT_RUNNING"
        assert coordinator.get_snapshot(created.room.code) is None


class TestNotices:
    @pytest.mark.asyncio
    async def test_capture_notice(self, store, publisher):
        state = create_state(
            [
                create_player(0, tokens=[ring_token(Color.RED, 0, 7)]),
                create_player(1, tokens=[ring_token(Color.GREEN, 1, 10)]),
            ],
            phase=GamePhase.MOVE,
            last_roll=3,
            movable_token_ids=[0],
        )
        code = _seed_room(store, state)
        coordinator = MatchCoordinator(store, publisher)

        result = await coordinator.move_token(code, PLAYER_1_ID, 0)

        assert result.success
        assert publisher.types() == [
            MessageType.GAME_EVENTS,
            MessageType.GAME_STATE,
            MessageType.GAME_CAPTURE,
        ]
        capture = publisher.sent[2][1].payload
        assert capture == {"capturing_color": "red", "captured_colors": ["green"]}

    @pytest.mark.asyncio
    async def test_win_notice_finishes_room(self, store, publisher):
        red = create_player(
            0,
            tokens=[
                finished_token(Color.RED, 0),
                finished_token(Color.RED, 1),
                finished_token(Color.RED, 2),
                column_token(Color.RED, 3, 4),
            ],
        )
        state = create_state(
            [red, create_player(1)],
            phase=GamePhase.MOVE,
            last_roll=1,
            movable_token_ids=[3],
        )
        code = _seed_room(store, state)
        coordinator = MatchCoordinator(store, publisher)

        result = await coordinator.move_token(code, PLAYER_1_ID, 3)

        assert result.success
        assert result.snapshot.winner == Color.RED
        assert publisher.types()[-1] == MessageType.GAME_WON
        assert publisher.sent[-1][1].payload["winner_name"] == "Alice"
        assert store.get(code).status == RoomStatus.FINISHED

        after = await coordinator.roll_dice(code, PLAYER_2_ID)
        assert after.error_code == "MATCH_NOT_RUNNING"

    @pytest.mark.asyncio
    async def test_announce_start(self, settings, store, publisher):
        code = await _started_room(settings, store)
        coordinator = MatchCoordinator(store, publisher)

        await coordinator.announce_start(code, [])

        assert publisher.types() == [MessageType.GAME_STATE]
        assert publisher.sent[0][1].payload["state"]["current_color"] == "red"


class TestPacedTransitions:
    @pytest.fixture
    def paced_settings(self) -> Settings:
        return Settings(
            JWT_SECRET="test-secret-with-enough-length-for-hs256",
            TURN_TRANSITION_DELAY_MS=20,
        )

    @pytest.mark.asyncio
    async def test_forfeit_resolves_after_delay(self, paced_settings, store, publisher):
        code = await _started_room(paced_settings, store)
        coordinator = MatchCoordinator(store, publisher, die=ScriptedDie([3]))

        result = await coordinator.roll_dice(code, PLAYER_1_ID)

        assert result.snapshot.phase == GamePhase.TRANSITION
        assert coordinator.has_pending_transition(code)
        blocked = await coordinator.roll_dice(code, PLAYER_2_ID)
        assert blocked.error_code == "TURN_IN_TRANSITION"

        await asyncio.sleep(0.2)

        assert not coordinator.has_pending_transition(code)
        snapshot = coordinator.get_snapshot(code)
        assert snapshot.phase == GamePhase.ROLL
        assert snapshot.current_player_id == PLAYER_2_ID
        assert publisher.types()[-1] == MessageType.GAME_STATE

    @pytest.mark.asyncio
    async def test_shutdown_cancels_pending_transitions(self, paced_settings, store, publisher):
        code = await _started_room(paced_settings, store)
        paced = store.get(code).game_state.model_copy(update={"transition_delay_ms": 60_000})
        store.get(code).game_state = paced
        coordinator = MatchCoordinator(store, publisher, die=ScriptedDie([3]))

        await coordinator.roll_dice(code, PLAYER_1_ID)
        assert coordinator.has_pending_transition(code)

        await coordinator.shutdown()

        assert not coordinator.has_pending_transition(code)
        assert coordinator.get_snapshot(code).phase == GamePhase.TRANSITION

    @pytest.mark.asyncio
    async def test_resolve_pending_without_transition(self, settings, store, publisher):
        code = await _started_room(settings, store)
        coordinator = MatchCoordinator(store, publisher)

        assert not await coordinator.resolve_pending(code)

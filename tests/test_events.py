"""Tests for event generation and sequencing.

Critical scenarios tested:
- Opening events of a new match
- Events have monotonically increasing seq numbers across actions
- Events serialize for the wire
"""

from app.schemas.game_engine import GameState
from app.services.game import start_game
from app.services.game.engine import MoveAction, RollAction, process_action
from app.services.game.engine.events import (
    DiceRolled,
    GameStarted,
    RollGranted,
    TurnStarted,
)

from .conftest import PLAYER_1_ID, PLAYER_2_ID, seat_attributes


class TestOpeningEvents:
    def test_start_emits_game_started_turn_started_roll_granted(self):
        result = start_game(seat_attributes(3))

        assert [type(e) for e in result.events] == [GameStarted, TurnStarted, RollGranted]
        started = result.events[0]
        assert started.player_order == [p.player_id for p in seat_attributes(3)]
        assert started.first_player_id == PLAYER_1_ID
        assert result.events[2].reason == "turn_start"
        assert [e.seq for e in result.events] == [0, 1, 2]
        assert result.state.event_seq == 3


class TestEventSequencing:
    """Test that events have proper sequence numbers."""

    def test_events_have_sequential_seq_numbers(self, two_player_game: GameState):
        result = process_action(two_player_game, RollAction(value=6), PLAYER_1_ID)

        assert [e.seq for e in result.events] == list(range(len(result.events)))
        assert result.state.event_seq == len(result.events)

    def test_seq_continues_across_actions(self, two_player_game: GameState):
        first = process_action(two_player_game, RollAction(value=6), PLAYER_1_ID)
        second = process_action(first.state, MoveAction(token_id=0), PLAYER_1_ID)

        assert second.events[0].seq == first.state.event_seq
        all_seqs = [e.seq for e in first.events + second.events]
        assert all_seqs == sorted(set(all_seqs))

    def test_rejected_action_emits_nothing(self, two_player_game: GameState):
        result = process_action(two_player_game, RollAction(value=6), PLAYER_2_ID)

        assert result.events == []


class TestEventSerialization:
    def test_dice_rolled_serializes_with_type_tag(self, two_player_game: GameState):
        result = process_action(two_player_game, RollAction(value=5), PLAYER_1_ID)
        rolled = result.events[0]

        assert isinstance(rolled, DiceRolled)
        data = rolled.model_dump(mode="json")
        assert data["event_type"] == "dice_rolled"
        assert data["value"] == 5
        assert data["player_id"] == PLAYER_1_ID
        assert data["seq"] == 0

    def test_token_moved_path_serializes_as_pairs(self, two_player_game: GameState):
        state = process_action(two_player_game, RollAction(value=6), PLAYER_1_ID).state
        result = process_action(state, MoveAction(token_id=0), PLAYER_1_ID)

        moved = next(e for e in result.events if e.event_type == "token_moved")
        data = moved.model_dump(mode="json")
        assert data["path"] == [[1, 1], [6, 1]]
        assert data["from_status"] == "yard"
        assert data["to_status"] == "active"

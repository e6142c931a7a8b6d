"""Tests for capture scenarios.

Critical scenarios tested:
- Landing on an opponent sends it back to its yard
- A capture grants an extra roll
- Safe cells never capture
- Own tokens and home-column tokens are never captured
- Every opponent on the landing cell is captured
"""

from app.schemas.game_engine import Color, GamePhase, TokenStatus
from app.services.game.engine import MoveAction, process_action
from app.services.game.engine.events import RollGranted, TokenCaptured, TurnEnded

from .conftest import (
    PLAYER_1_ID,
    PLAYER_2_ID,
    column_token,
    create_player,
    create_state,
    ring_token,
)


def _red_moves(red_tokens, opponents, roll: int, token_id: int = 0, extra_players=None):
    players = [create_player(0, tokens=red_tokens), create_player(1, tokens=opponents)]
    players.extend(extra_players or [])
    state = create_state(
        players,
        phase=GamePhase.MOVE,
        last_roll=roll,
        movable_token_ids=[token_id],
    )
    return process_action(state, MoveAction(token_id=token_id), PLAYER_1_ID)


class TestBasicCapture:
    """Test basic capture mechanics."""

    def test_landing_on_opponent_captures_it(self):
        """Red at 7 rolls 3 onto green's token at 10."""
        result = _red_moves(
            [ring_token(Color.RED, 0, 7)],
            [ring_token(Color.GREEN, 2, 10)],
            roll=3,
        )

        assert result.success
        green = result.state.players[1]
        captured = green.get_token(2)
        assert captured.status == TokenStatus.YARD
        assert captured.ring_position == -1
        assert result.state.players[0].get_token(0).ring_position == 10

        capture = next(e for e in result.events if isinstance(e, TokenCaptured))
        assert capture.capturing_color == Color.RED
        assert capture.captured_color == Color.GREEN
        assert capture.captured_player_id == PLAYER_2_ID
        assert capture.captured_token_id == 2
        assert capture.ring_position == 10

    def test_capture_grants_extra_roll(self):
        result = _red_moves(
            [ring_token(Color.RED, 0, 7)],
            [ring_token(Color.GREEN, 0, 10)],
            roll=3,
        )

        assert result.state.phase == GamePhase.ROLL
        assert result.state.current_player.player_id == PLAYER_1_ID
        granted = result.events[-1]
        assert isinstance(granted, RollGranted)
        assert granted.reason == "capture"
        assert not any(isinstance(e, TurnEnded) for e in result.events)

    def test_capture_on_a_six_reports_the_six(self):
        result = _red_moves(
            [ring_token(Color.RED, 0, 4)],
            [ring_token(Color.GREEN, 0, 10)],
            roll=6,
        )

        assert any(isinstance(e, TokenCaptured) for e in result.events)
        assert result.events[-1].reason == "rolled_six"


class TestCaptureExemptions:
    def test_safe_cell_never_captures(self):
        """Cell 8 is a star; both tokens share it."""
        result = _red_moves(
            [ring_token(Color.RED, 0, 5)],
            [ring_token(Color.GREEN, 0, 8)],
            roll=3,
        )

        assert not any(isinstance(e, TokenCaptured) for e in result.events)
        assert result.state.players[1].get_token(0).ring_position == 8
        assert result.state.current_player.player_id == PLAYER_2_ID

    def test_opponent_entry_cell_is_safe(self):
        result = _red_moves(
            [ring_token(Color.RED, 0, 10)],
            [ring_token(Color.GREEN, 0, 13)],
            roll=3,
        )

        assert not any(isinstance(e, TokenCaptured) for e in result.events)

    def test_own_tokens_stack_without_capture(self):
        result = _red_moves(
            [ring_token(Color.RED, 0, 7), ring_token(Color.RED, 1, 10)],
            [],
            roll=3,
        )

        red = result.state.players[0]
        assert red.get_token(0).ring_position == 10
        assert red.get_token(1).ring_position == 10
        assert not any(isinstance(e, TokenCaptured) for e in result.events)

    def test_home_column_tokens_are_out_of_reach(self):
        result = _red_moves(
            [ring_token(Color.RED, 0, 20)],
            [column_token(Color.GREEN, 0, 2)],
            roll=2,
        )

        assert result.state.players[1].get_token(0).in_home_column
        assert not any(isinstance(e, TokenCaptured) for e in result.events)


class TestMultipleCaptures:
    def test_all_opponents_on_the_cell_are_captured(self):
        yellow = create_player(2, tokens=[ring_token(Color.YELLOW, 1, 30)])
        result = _red_moves(
            [ring_token(Color.RED, 0, 27)],
            [ring_token(Color.GREEN, 0, 30), ring_token(Color.GREEN, 3, 30)],
            roll=3,
            extra_players=[yellow],
        )

        captures = [e for e in result.events if isinstance(e, TokenCaptured)]
        assert len(captures) == 3
        assert {(e.captured_color, e.captured_token_id) for e in captures} == {
            (Color.GREEN, 0),
            (Color.GREEN, 3),
            (Color.YELLOW, 1),
        }
        assert all(t.status == TokenStatus.YARD for t in result.state.players[1].tokens)
        assert result.state.players[2].get_token(1).status == TokenStatus.YARD

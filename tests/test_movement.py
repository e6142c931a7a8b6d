"""Tests for token movement on the board.

Critical scenarios tested:
- Yard release onto the entry cell with a 6
- Token advances along the ring, wrapping past index 50
- Token peels off into its home column at its home-entry cell
- Legal move calculation, including overshoot rules
- Extra roll on a 6, otherwise the turn passes
"""

from app.schemas.game_engine import NO_POSITION, Color, GamePhase, GameState, TokenStatus
from app.services.game.engine import (
    MoveAction,
    RollAction,
    apply_move,
    can_move,
    get_movable_tokens,
    process_action,
)
from app.services.game.engine.events import (
    RollGranted,
    TokenEnteredHomeColumn,
    TokenExitedYard,
    TokenMoved,
    TurnEnded,
)

from .conftest import (
    PLAYER_1_ID,
    PLAYER_2_ID,
    column_token,
    create_player,
    create_state,
    finished_token,
    ring_token,
    yard_token,
)


def _move_state(red_tokens, roll: int, movable: list[int], opponents=None) -> GameState:
    red = create_player(0, tokens=red_tokens)
    return create_state(
        [red, create_player(1, tokens=opponents)],
        phase=GamePhase.MOVE,
        last_roll=roll,
        movable_token_ids=movable,
    )


class TestYardRelease:
    """Test leaving the yard."""

    def test_six_releases_token_onto_entry_cell_and_keeps_turn(self, two_player_game: GameState):
        state = process_action(two_player_game, RollAction(value=6), PLAYER_1_ID).state

        result = process_action(state, MoveAction(token_id=0), PLAYER_1_ID)

        assert result.success
        token = result.state.players[0].get_token(0)
        assert token.status == TokenStatus.ACTIVE
        assert token.ring_position == 0
        assert token.home_progress == NO_POSITION

        exited = next(e for e in result.events if isinstance(e, TokenExitedYard))
        assert exited.ring_position == 0
        granted = result.events[-1]
        assert isinstance(granted, RollGranted)
        assert granted.reason == "rolled_six"
        assert result.state.phase == GamePhase.ROLL
        assert result.state.current_player.player_id == PLAYER_1_ID

    def test_green_releases_onto_its_own_entry(self):
        assert apply_move(yard_token(Color.GREEN, 2), 6).ring_position == 13

    def test_yard_token_needs_a_six(self):
        for roll in range(1, 6):
            assert not can_move(yard_token(Color.RED, 0), Color.RED, roll)
        assert can_move(yard_token(Color.RED, 0), Color.RED, 6)


class TestRingMovement:
    """Test advancing along the shared ring."""

    def test_token_advances_and_turn_passes(self):
        state = _move_state([ring_token(Color.RED, 0, 10)], roll=3, movable=[0])

        result = process_action(state, MoveAction(token_id=0), PLAYER_1_ID)

        assert result.success
        assert result.state.players[0].get_token(0).ring_position == 13
        moved = next(e for e in result.events if isinstance(e, TokenMoved))
        assert moved.from_ring_position == 10
        assert moved.to_ring_position == 13
        assert moved.roll_used == 3
        assert len(moved.path) == 3

        turn_ended = next(e for e in result.events if isinstance(e, TurnEnded))
        assert turn_ended.reason == "move_complete"
        assert result.state.current_player.player_id == PLAYER_2_ID
        assert result.state.phase == GamePhase.ROLL

    def test_ring_position_wraps(self):
        moved = apply_move(ring_token(Color.GREEN, 0, 49), 4)
        assert moved.on_ring
        assert moved.ring_position == 2

    def test_red_never_wraps_past_its_home_entry(self):
        moved = apply_move(ring_token(Color.RED, 0, 49), 3)
        assert moved.in_home_column
        assert moved.home_progress == 1


class TestHomeColumn:
    """Test entering and climbing the home column."""

    def test_token_enters_home_column(self):
        state = _move_state([ring_token(Color.RED, 0, 48)], roll=5, movable=[0])

        result = process_action(state, MoveAction(token_id=0), PLAYER_1_ID)

        token = result.state.players[0].get_token(0)
        assert token.in_home_column
        assert token.home_progress == 2
        assert token.ring_position == NO_POSITION
        entered = next(e for e in result.events if isinstance(e, TokenEnteredHomeColumn))
        assert entered.home_progress == 2

    def test_from_home_entry_cell_every_step_goes_up_the_column(self):
        token = ring_token(Color.BLUE, 0, 37)
        assert apply_move(token, 1).home_progress == 0
        assert apply_move(token, 5).home_progress == 4

    def test_token_cannot_reach_center_straight_from_ring(self):
        assert not can_move(ring_token(Color.RED, 0, 50), Color.RED, 6)
        assert can_move(ring_token(Color.RED, 0, 49), Color.RED, 6)
        assert apply_move(ring_token(Color.RED, 0, 49), 6).home_progress == 4

    def test_overshooting_the_center_is_illegal(self):
        token = column_token(Color.RED, 0, 3)
        assert not can_move(token, Color.RED, 4)
        assert can_move(token, Color.RED, 2)
        assert can_move(token, Color.RED, 1)

    def test_finished_token_never_moves(self):
        for roll in range(1, 7):
            assert not can_move(finished_token(Color.RED, 0), Color.RED, roll)


class TestLegalMoves:
    def test_movable_tokens_in_slot_order(self):
        red = create_player(
            0,
            tokens=[
                ring_token(Color.RED, 0, 20),
                column_token(Color.RED, 1, 4),
                finished_token(Color.RED, 2),
            ],
        )
        assert get_movable_tokens(red, 1) == [0, 1]
        assert get_movable_tokens(red, 2) == [0]
        assert get_movable_tokens(red, 6) == [0, 3]

    def test_moving_token_outside_movable_cache_is_rejected(self):
        state = _move_state(
            [ring_token(Color.RED, 0, 10), column_token(Color.RED, 1, 3)],
            roll=4,
            movable=[0],
        )

        result = process_action(state, MoveAction(token_id=1), PLAYER_1_ID)

        assert not result.success
        assert result.error_code == "ILLEGAL_MOVE"
        assert result.state is None

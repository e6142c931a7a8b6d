"""Tests for finishing tokens and winning the match.

Critical scenarios tested:
- Exact roll moves a token from the home column to the center
- Finishing the fourth token wins and ends the match
- No intents are accepted after the match is won
"""

from app.schemas.game_engine import Color, GamePhase, TokenStatus
from app.services.game.engine import (
    MoveAction,
    RollAction,
    check_win_condition,
    process_action,
)
from app.services.game.engine.events import (
    GameEnded,
    RollGranted,
    TokenFinished,
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
)


class TestTokenFinishing:
    """Test a token reaching the center."""

    def test_exact_roll_finishes_token(self):
        red = create_player(0, tokens=[column_token(Color.RED, 0, 3)])
        state = create_state(
            [red, create_player(1)],
            phase=GamePhase.MOVE,
            last_roll=2,
            movable_token_ids=[0],
        )

        result = process_action(state, MoveAction(token_id=0), PLAYER_1_ID)

        assert result.success
        token = result.state.players[0].get_token(0)
        assert token.status == TokenStatus.FINISHED
        assert token.home_progress == 5
        assert result.state.players[0].finished_count == 1

        finished = next(e for e in result.events if isinstance(e, TokenFinished))
        assert finished.finished_count == 1
        # Finishing alone does not grant another roll
        assert any(isinstance(e, TurnEnded) for e in result.events)
        assert result.state.current_player.player_id == PLAYER_2_ID

    def test_overshooting_roll_is_not_offered(self):
        red = create_player(0, tokens=[column_token(Color.RED, 0, 3)])
        state = create_state([red, create_player(1)])

        result = process_action(state, RollAction(value=4), PLAYER_1_ID)

        # Token 0 cannot move 4 and the rest are in the yard
        assert result.success
        assert result.state.current_player.player_id == PLAYER_2_ID
        assert result.events[-1].player_id == PLAYER_2_ID


class TestWinning:
    """Test the match ending."""

    def _three_home_one_close(self):
        red = create_player(
            0,
            tokens=[
                finished_token(Color.RED, 0),
                finished_token(Color.RED, 1),
                finished_token(Color.RED, 2),
                column_token(Color.RED, 3, 1),
            ],
        )
        green = create_player(1, tokens=[ring_token(Color.GREEN, 0, 20)])
        return create_state(
            [red, green],
            phase=GamePhase.MOVE,
            last_roll=4,
            movable_token_ids=[3],
        )

    def test_fourth_token_home_wins(self):
        result = process_action(self._three_home_one_close(), MoveAction(token_id=3), PLAYER_1_ID)

        assert result.success
        state = result.state
        assert state.phase == GamePhase.DONE
        assert state.winner == Color.RED
        assert state.players[0].finished_count == 4

        ended = result.events[-1]
        assert isinstance(ended, GameEnded)
        assert ended.winner_id == PLAYER_1_ID
        assert ended.winner_name == "Alice"
        assert ended.winner_color == Color.RED
        assert not any(isinstance(e, (TurnEnded, RollGranted)) for e in result.events)
        assert check_win_condition(state) == Color.RED

    def test_no_intents_after_win(self):
        won = process_action(self._three_home_one_close(), MoveAction(token_id=3), PLAYER_1_ID).state

        for player_id in (PLAYER_1_ID, PLAYER_2_ID):
            result = process_action(won, RollAction(value=6), player_id)
            assert not result.success
            assert result.error_code == "GAME_FINISHED"

    def test_no_winner_mid_match(self, two_player_game):
        assert check_win_condition(two_player_game) is None

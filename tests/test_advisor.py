"""Tests for the computer move advisor."""

from app.schemas.game_engine import Color, GamePhase
from app.services.game.advisor import (
    CAPTURE_SCORE,
    FINISH_SCORE,
    choose_token,
    score_token,
    token_progress,
)

from .conftest import (
    column_token,
    create_player,
    create_state,
    finished_token,
    ring_token,
    yard_token,
)


def _advise(red_tokens, roll: int, movable: list[int], green_tokens=None):
    red = create_player(0, tokens=red_tokens, is_computer=True)
    state = create_state(
        [red, create_player(1, tokens=green_tokens)],
        phase=GamePhase.MOVE,
        last_roll=roll,
        movable_token_ids=movable,
    )
    return state, choose_token(state)


class TestTokenProgress:
    def test_progress_ordering(self):
        assert token_progress(yard_token(Color.GREEN, 0)) == 0
        assert token_progress(ring_token(Color.GREEN, 0, 13)) == 0
        assert token_progress(ring_token(Color.GREEN, 0, 11)) == 49
        assert token_progress(column_token(Color.GREEN, 0, 0)) > 49
        assert token_progress(finished_token(Color.GREEN, 0)) > token_progress(
            column_token(Color.GREEN, 0, 4)
        )


class TestChooseToken:
    def test_nothing_movable(self):
        _, choice = _advise([], roll=3, movable=[])
        assert choice is None

    def test_single_movable_token_is_returned(self):
        _, choice = _advise([ring_token(Color.RED, 2, 40)], roll=3, movable=[2])
        assert choice == 2

    def test_finishing_beats_everything(self):
        state, choice = _advise(
            [ring_token(Color.RED, 0, 20), column_token(Color.RED, 1, 3)],
            roll=2,
            movable=[0, 1],
        )
        assert choice == 1
        player = state.current_player
        assert score_token(state, player, player.get_token(1), 2) >= FINISH_SCORE

    def test_capture_beats_release(self):
        state, choice = _advise(
            [ring_token(Color.RED, 0, 4)],
            roll=6,
            movable=[0, 1, 2, 3],
            green_tokens=[ring_token(Color.GREEN, 0, 10)],
        )
        assert choice == 0
        player = state.current_player
        assert score_token(state, player, player.get_token(0), 6) >= CAPTURE_SCORE

    def test_no_capture_on_safe_cell(self):
        state, _ = _advise(
            [ring_token(Color.RED, 0, 2)],
            roll=6,
            movable=[0, 1],
            green_tokens=[ring_token(Color.GREEN, 0, 8)],
        )
        player = state.current_player
        assert score_token(state, player, player.get_token(0), 6) < CAPTURE_SCORE

    def test_release_beats_plain_advance(self):
        _, choice = _advise(
            [ring_token(Color.RED, 0, 10)],
            roll=6,
            movable=[0, 1, 2, 3],
        )
        assert choice == 1

    def test_safe_landing_beats_danger(self):
        """Token 0 would land two cells ahead of a green token; token 1 reaches a star."""
        _, choice = _advise(
            [ring_token(Color.RED, 0, 30), ring_token(Color.RED, 1, 10)],
            roll=3,
            movable=[0, 1],
            green_tokens=[ring_token(Color.GREEN, 0, 31)],
        )
        assert choice == 1

    def test_furthest_token_advances_when_nothing_else_differs(self):
        _, choice = _advise(
            [ring_token(Color.RED, 0, 2), ring_token(Color.RED, 1, 30)],
            roll=1,
            movable=[0, 1],
        )
        assert choice == 1

    def test_ties_go_to_first_movable_token(self):
        _, choice = _advise(
            [],
            roll=6,
            movable=[0, 1, 2, 3],
        )
        assert choice == 0

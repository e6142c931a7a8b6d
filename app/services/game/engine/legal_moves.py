"""Legal move calculation for tokens."""

from app.schemas.game_engine import (
    HOME_COLUMN_LENGTH,
    HOME_FINISH_INDEX,
    Color,
    Player,
    Token,
    TokenStatus,
)
from app.services.game.board import HOME_ENTRY_CELL, ring_distance

RELEASE_ROLL = 6


def can_move(token: Token, color: Color, roll: int) -> bool:
    """Determine whether a token may move with the given roll.

    A move is legal if:
    - Token in the yard and the roll is a 6
    - Token in its home column and it does not overshoot the center
    - Token on the ring and, if the roll carries it into the home column,
      the landing cell is one of the five column cells (a token can never
      reach the center straight from the ring)
    """
    if token.status == TokenStatus.FINISHED:
        return False

    if token.status == TokenStatus.YARD:
        return roll == RELEASE_ROLL

    if token.in_home_column:
        return token.home_progress + roll <= HOME_FINISH_INDEX

    distance = ring_distance(token.ring_position, HOME_ENTRY_CELL[color])
    if distance == 0:
        # Sitting on the home-entry cell; any step goes into the column
        return roll <= HOME_COLUMN_LENGTH
    if roll > distance:
        return roll - distance - 1 <= HOME_COLUMN_LENGTH - 1
    return True


def get_movable_tokens(player: Player, roll: int) -> list[int]:
    """Return the slot ids of the player's tokens that can move with this roll."""
    return [
        token.token_id for token in player.tokens if can_move(token, player.color, roll)
    ]

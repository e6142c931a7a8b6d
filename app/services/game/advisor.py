"""Move advisory for computer-controlled seats.

Scores every movable token of the current player with an additive
heuristic and picks the best one:

- finishing the token beats everything
- then capturing an opponent
- then releasing a new token from the yard
- then advancing the token that has travelled furthest
- landing on a safe cell is rewarded, landing within reach of an
  opposing token is penalized
"""

import logging

from app.schemas.game_engine import (
    RING_LENGTH,
    GameState,
    Player,
    Token,
    TokenStatus,
)
from app.services.game.board import is_safe_cell, progress_from_entry
from app.services.game.engine import apply_move

logger = logging.getLogger(__name__)

FINISH_SCORE = 1000
CAPTURE_SCORE = 500
RELEASE_SCORE = 100
SAFE_LANDING_SCORE = 80
DANGER_PENALTY = 60
HOME_COLUMN_BASE_PROGRESS = 52
HOME_COLUMN_STEP_PROGRESS = 10
MAX_DIE_VALUE = 6


def token_progress(token: Token) -> int:
    """Distance-travelled metric used only to compare tokens."""
    if token.status == TokenStatus.YARD:
        return 0
    if token.in_home_column or token.status == TokenStatus.FINISHED:
        return HOME_COLUMN_BASE_PROGRESS + token.home_progress * HOME_COLUMN_STEP_PROGRESS
    return progress_from_entry(token.color, token.ring_position)


def _opponent_ring_tokens(state: GameState, player: Player) -> list[Token]:
    return [
        token
        for other in state.players
        if other.color != player.color
        for token in other.tokens
        if token.on_ring
    ]


def _would_capture(landing: Token, opponents: list[Token]) -> bool:
    if not landing.on_ring or is_safe_cell(landing.ring_position):
        return False
    return any(t.ring_position == landing.ring_position for t in opponents)


def _in_danger(ring_position: int, opponents: list[Token]) -> bool:
    """Could any opposing ring token reach this cell with a single die value."""
    return any(
        (t.ring_position + d) % RING_LENGTH == ring_position
        for t in opponents
        for d in range(1, MAX_DIE_VALUE + 1)
    )


def score_token(state: GameState, player: Player, token: Token, roll: int) -> int:
    """Score moving one token with this roll. Assumes the move is legal."""
    landing = apply_move(token, roll)
    opponents = _opponent_ring_tokens(state, player)
    score = 0

    if landing.status == TokenStatus.FINISHED:
        score += FINISH_SCORE
    if _would_capture(landing, opponents):
        score += CAPTURE_SCORE
    if token.status == TokenStatus.YARD:
        score += RELEASE_SCORE

    score += token_progress(token)

    # Safety only matters for tokens already on the ring that stay on it
    if token.on_ring and landing.on_ring:
        if is_safe_cell(landing.ring_position):
            score += SAFE_LANDING_SCORE
        elif _in_danger(landing.ring_position, opponents):
            score -= DANGER_PENALTY

    return score


def choose_token(state: GameState) -> int | None:
    """Pick the token the current player should move for the cached roll.

    Returns None when nothing is movable. Ties go to the first token in
    movable order.
    """
    movable = state.movable_token_ids
    if not movable or state.last_roll is None:
        return None
    if len(movable) == 1:
        return movable[0]

    player = state.current_player
    best_id: int | None = None
    best_score: int | None = None
    for token_id in movable:
        token = player.get_token(token_id)
        if token is None:
            continue
        score = score_token(state, player, token, state.last_roll)
        logger.debug(
            "Advisor score: color=%s, token=%d, roll=%d, score=%d",
            player.color.value,
            token_id,
            state.last_roll,
            score,
        )
        if best_score is None or score > best_score:
            best_id, best_score = token_id, score

    return best_id

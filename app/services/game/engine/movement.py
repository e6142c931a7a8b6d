"""Token movement: applying a roll to a token and resolving its consequences."""

import logging

from app.schemas.game_engine import (
    HOME_FINISH_INDEX,
    RING_LENGTH,
    TOKENS_PER_PLAYER,
    GamePhase,
    GameState,
    Token,
    TokenStatus,
)
from app.services.game.board import (
    ENTRY_CELL,
    HOME_ENTRY_CELL,
    move_path,
    ring_distance,
)

from .captures import apply_captures
from .events import (
    AnyGameEvent,
    GameEnded,
    RollGranted,
    TokenEnteredHomeColumn,
    TokenExitedYard,
    TokenFinished,
    TokenMoved,
)
from .rolling import SIX, end_turn
from .validation import ProcessResult

logger = logging.getLogger(__name__)


def _place_in_home_column(token: Token, home_progress: int) -> Token:
    if home_progress >= HOME_FINISH_INDEX:
        return Token(
            token_id=token.token_id,
            color=token.color,
            status=TokenStatus.FINISHED,
            home_progress=HOME_FINISH_INDEX,
        )
    return Token(
        token_id=token.token_id,
        color=token.color,
        status=TokenStatus.ACTIVE,
        home_progress=home_progress,
    )


def apply_move(token: Token, roll: int) -> Token:
    """Return the token as it stands after moving with this roll.

    Pure function; legality is the caller's concern (see can_move).
    """
    color = token.color

    if token.status == TokenStatus.YARD:
        return Token(
            token_id=token.token_id,
            color=color,
            status=TokenStatus.ACTIVE,
            ring_position=ENTRY_CELL[color],
        )

    if token.in_home_column:
        return _place_in_home_column(token, token.home_progress + roll)

    distance = ring_distance(token.ring_position, HOME_ENTRY_CELL[color])
    if roll > distance:
        return _place_in_home_column(token, roll - distance - 1)

    return Token(
        token_id=token.token_id,
        color=color,
        status=TokenStatus.ACTIVE,
        ring_position=(token.ring_position + roll) % RING_LENGTH,
    )


def process_move(state: GameState, token_id: int, player_id: str) -> ProcessResult:
    """Move a token with the current roll and return updated state with events.

    Handles:
    - Yard release, ring advance, home column entry and finishing
    - Capturing opposing tokens on the landing cell
    - Win detection (ends the match immediately)
    - Extra turn on a 6 or a capture, otherwise passing the turn

    Args:
        state: Current game state (phase MOVE, validated).
        token_id: Slot id of the token to move.
        player_id: The player moving.

    Returns:
        ProcessResult with new state and events.
    """
    roll = state.last_roll
    player = state.current_player
    token = player.get_token(token_id)
    if token is None or roll is None:
        logger.error("process_move called without token or roll: token=%s", token_id)
        return ProcessResult.failure("ILLEGAL_MOVE", f"Token {token_id} cannot move")

    moved = apply_move(token, roll)
    path = move_path(token, roll)
    events: list[AnyGameEvent] = []

    logger.info(
        "Processing move: player=%s, token=%d, roll=%d, %s -> %s",
        player_id[:8],
        token_id,
        roll,
        token.status.value,
        moved.status.value,
    )

    if token.status == TokenStatus.YARD:
        events.append(
            TokenExitedYard(
                player_id=player_id,
                color=player.color,
                token_id=token_id,
                ring_position=moved.ring_position,
            )
        )

    events.append(
        TokenMoved(
            player_id=player_id,
            color=player.color,
            token_id=token_id,
            from_status=token.status,
            to_status=moved.status,
            from_ring_position=token.ring_position,
            to_ring_position=moved.ring_position,
            from_home_progress=token.home_progress,
            to_home_progress=moved.home_progress,
            roll_used=roll,
            path=path,
        )
    )

    if token.on_ring and not moved.on_ring:
        events.append(
            TokenEnteredHomeColumn(
                player_id=player_id,
                color=player.color,
                token_id=token_id,
                home_progress=moved.home_progress,
            )
        )

    tokens = [moved if t.token_id == token_id else t for t in player.tokens]
    finished_count = sum(1 for t in tokens if t.status == TokenStatus.FINISHED)
    moving_player = player.model_copy(
        update={"tokens": tokens, "finished_count": finished_count}
    )

    if moved.status == TokenStatus.FINISHED:
        events.append(
            TokenFinished(
                player_id=player_id,
                color=player.color,
                token_id=token_id,
                finished_count=finished_count,
            )
        )

    players = list(state.players)
    players[state.current_player_index] = moving_player
    players, capture_events = apply_captures(players, moving_player, moved)
    events.extend(capture_events)
    captured = bool(capture_events)

    moved_state = state.model_copy(
        update={
            "players": players,
            "movable_token_ids": [],
        }
    )

    if finished_count == TOKENS_PER_PLAYER:
        events.append(
            GameEnded(
                winner_id=player_id,
                winner_name=player.name,
                winner_color=player.color,
            )
        )
        new_state = moved_state.model_copy(
            update={"phase": GamePhase.DONE, "winner": player.color}
        )
        logger.info("Winner detected: player=%s, color=%s", player_id[:8], player.color.value)
        return ProcessResult.ok(new_state, events)

    if roll == SIX or captured:
        reason = "rolled_six" if roll == SIX else "capture"
        events.append(RollGranted(player_id=player_id, reason=reason))
        new_state = moved_state.model_copy(update={"phase": GamePhase.ROLL})
        logger.info("Extra roll granted (%s): player=%s", reason, player_id[:8])
        return ProcessResult.ok(new_state, events)

    new_state, turn_events = end_turn(moved_state, "move_complete")
    return ProcessResult.ok(new_state, events + turn_events)

"""Capture detection and resolution logic."""

import logging

from app.schemas.game_engine import Player, Token, TokenStatus
from app.services.game.board import is_safe_cell

from .events import TokenCaptured

logger = logging.getLogger(__name__)


def send_to_yard(token: Token) -> Token:
    """Return a copy of the token parked back in its yard slot."""
    return Token(token_id=token.token_id, color=token.color, status=TokenStatus.YARD)


def detect_captures(
    players: list[Player],
    moving_player: Player,
    ring_position: int,
) -> list[tuple[Player, Token]]:
    """Find every opposing ring token sitting on the landing cell.

    Safe cells never capture, and tokens inside a home column are not on
    the ring so they can never match. Several co-located tokens are all
    returned; own tokens are never candidates.

    Args:
        players: All players of the match.
        moving_player: The player who just moved.
        ring_position: Ring index the moved token landed on.

    Returns:
        List of (player, token) tuples to send back to the yard.
    """
    if is_safe_cell(ring_position):
        logger.debug("Safe cell: no capture at ring index %d", ring_position)
        return []

    captures: list[tuple[Player, Token]] = []
    for player in players:
        if player.color == moving_player.color:
            continue
        for token in player.tokens:
            if token.on_ring and token.ring_position == ring_position:
                logger.debug(
                    "Capture candidate: color=%s, token=%d at %d",
                    player.color.value,
                    token.token_id,
                    ring_position,
                )
                captures.append((player, token))
    return captures


def apply_captures(
    players: list[Player],
    moving_player: Player,
    moved_token: Token,
) -> tuple[list[Player], list[TokenCaptured]]:
    """Send captured opponents back to the yard.

    Args:
        players: All players, with the moving player's token already moved.
        moving_player: The player who just moved.
        moved_token: The moved token in its landing position.

    Returns:
        Updated players and one TokenCaptured event per captured token.
    """
    if not moved_token.on_ring:
        return players, []

    captures = detect_captures(players, moving_player, moved_token.ring_position)
    if not captures:
        return players, []

    captured_keys = {(p.color, t.token_id) for p, t in captures}
    events = [
        TokenCaptured(
            capturing_player_id=moving_player.player_id,
            capturing_color=moving_player.color,
            capturing_token_id=moved_token.token_id,
            captured_player_id=player.player_id,
            captured_color=player.color,
            captured_token_id=token.token_id,
            ring_position=moved_token.ring_position,
        )
        for player, token in captures
    ]

    updated_players = []
    for player in players:
        if not any(color == player.color for color, _ in captured_keys):
            updated_players.append(player)
            continue
        tokens = [
            send_to_yard(t) if (player.color, t.token_id) in captured_keys else t
            for t in player.tokens
        ]
        updated_players.append(player.model_copy(update={"tokens": tokens}))

    logger.info(
        "Capture: %s token %d took %d token(s) at ring index %d",
        moving_player.color.value,
        moved_token.token_id,
        len(events),
        moved_token.ring_position,
    )
    return updated_players, events

"""Read-only match snapshots for publishing to clients."""

from app.schemas.game_engine import (
    GameState,
    MatchSnapshot,
    PlayerSnapshot,
    TokenSnapshot,
)
from app.services.game.board import token_cell


def build_snapshot(state: GameState) -> MatchSnapshot:
    """Freeze the current match state into an immutable snapshot."""
    current = state.current_player
    return MatchSnapshot(
        players=[
            PlayerSnapshot(
                player_id=player.player_id,
                name=player.name,
                color=player.color,
                is_computer=player.is_computer,
                finished_count=player.finished_count,
                tokens=[
                    TokenSnapshot(
                        token_id=token.token_id,
                        status=token.status,
                        ring_position=token.ring_position,
                        home_progress=token.home_progress,
                        cell=token_cell(token),
                    )
                    for token in player.tokens
                ],
            )
            for player in state.players
        ],
        current_player_index=state.current_player_index,
        current_color=current.color,
        current_player_id=current.player_id,
        last_roll=state.last_roll,
        phase=state.phase,
        winner=state.winner,
        movable_token_ids=list(state.movable_token_ids),
        turn_number=state.turn_number,
        pending_transition=state.pending_transition,
    )

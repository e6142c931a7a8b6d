import logging

from app.schemas.game_engine import (
    MAX_PLAYERS,
    MIN_PLAYERS,
    TOKENS_PER_PLAYER,
    Color,
    GamePhase,
    GameState,
    Player,
    PlayerAttributes,
    Token,
    TokenStatus,
)
from app.services.game.engine import (
    GameStarted,
    ProcessResult,
    RollGranted,
    TurnStarted,
    assign_event_sequences,
)

logger = logging.getLogger(__name__)


def validate_game_settings(player_attributes: list[PlayerAttributes]) -> None:
    """Validate the seating before initializing a game."""
    if len(player_attributes) < MIN_PLAYERS:
        raise ValueError(f"A minimum of {MIN_PLAYERS} players is required to start the game.")
    if len(player_attributes) > MAX_PLAYERS:
        raise ValueError(f"A maximum of {MAX_PLAYERS} players can play.")

    # Ensure each player has unique id, name, and color
    player_ids: set[str] = set()
    player_names: set[str] = set()
    player_colors: set[Color] = set()
    for player in player_attributes:
        if player.player_id in player_ids:
            raise ValueError(f"Duplicate player ID found: {player.player_id}")
        if player.name in player_names:
            raise ValueError(f"Duplicate player name found: {player.name}")
        if player.color in player_colors:
            raise ValueError(f"Duplicate player color found: {player.color.value}")
        player_ids.add(player.player_id)
        player_names.add(player.name)
        player_colors.add(player.color)


def _create_initial_tokens(color: Color) -> list[Token]:
    """Create the four yard tokens for a color."""
    return [
        Token(token_id=i, color=color, status=TokenStatus.YARD)
        for i in range(TOKENS_PER_PLAYER)
    ]


def _initialize_players(player_attributes: list[PlayerAttributes]) -> list[Player]:
    """Seat players in the given order, all tokens in their yards."""
    return [
        Player(
            player_id=attrs.player_id,
            name=attrs.name,
            color=attrs.color,
            is_computer=attrs.is_computer,
            tokens=_create_initial_tokens(attrs.color),
        )
        for attrs in player_attributes
    ]


def initialize_game(
    player_attributes: list[PlayerAttributes],
    transition_delay_ms: int = 0,
) -> GameState:
    """
    Validate the seating and return an initialized GameState.

    The first seat rolls first; seats take turns in list order.

    Args:
        player_attributes: Players in turn order with their colors.
        transition_delay_ms: Pacing delay for forced turn forfeits
                             (0 resolves them synchronously).

    Returns:
        An initialized GameState in the roll phase.

    Raises:
        ValueError: If the seating is invalid.
    """
    validate_game_settings(player_attributes)

    state = GameState(
        phase=GamePhase.ROLL,
        players=_initialize_players(player_attributes),
        transition_delay_ms=transition_delay_ms,
    )
    logger.info(
        "Game initialized: players=%d, colors=%s",
        len(state.players),
        [p.color.value for p in state.players],
    )
    return state


def start_game(
    player_attributes: list[PlayerAttributes],
    transition_delay_ms: int = 0,
) -> ProcessResult:
    """Initialize a game and emit its opening events.

    Returns a ProcessResult whose events are GameStarted, TurnStarted and
    RollGranted for the first seat, already sequenced.

    Raises:
        ValueError: If the seating is invalid.
    """
    state = initialize_game(player_attributes, transition_delay_ms)
    first = state.current_player
    events = [
        GameStarted(
            player_order=[p.player_id for p in state.players],
            colors=[p.color for p in state.players],
            first_player_id=first.player_id,
        ),
        TurnStarted(
            player_id=first.player_id,
            color=first.color,
            turn_number=state.turn_number,
        ),
        RollGranted(player_id=first.player_id, reason="turn_start"),
    ]
    return assign_event_sequences(state, events)

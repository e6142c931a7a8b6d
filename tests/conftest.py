"""Shared fixtures and builders for engine, service and API tests."""

import os

os.environ.setdefault("JWT_SECRET", "test-secret-with-enough-length-for-hs256")

import pytest  # noqa: E402

from app.config import Settings  # noqa: E402
from app.schemas.game_engine import (  # noqa: E402
    HOME_FINISH_INDEX,
    NO_POSITION,
    Color,
    GamePhase,
    GameState,
    Player,
    PlayerAttributes,
    Token,
    TokenStatus,
)

# Fixed ids for deterministic testing
PLAYER_1_ID = "00000000-0000-0000-0000-000000000001"
PLAYER_2_ID = "00000000-0000-0000-0000-000000000002"
PLAYER_3_ID = "00000000-0000-0000-0000-000000000003"
PLAYER_4_ID = "00000000-0000-0000-0000-000000000004"

SEATS = [
    (PLAYER_1_ID, "Alice", Color.RED),
    (PLAYER_2_ID, "Bob", Color.GREEN),
    (PLAYER_3_ID, "Carol", Color.YELLOW),
    (PLAYER_4_ID, "Dave", Color.BLUE),
]


def yard_token(color: Color, token_id: int) -> Token:
    return Token(token_id=token_id, color=color)


def ring_token(color: Color, token_id: int, ring_position: int) -> Token:
    return Token(
        token_id=token_id,
        color=color,
        status=TokenStatus.ACTIVE,
        ring_position=ring_position,
    )


def column_token(color: Color, token_id: int, home_progress: int) -> Token:
    return Token(
        token_id=token_id,
        color=color,
        status=TokenStatus.ACTIVE,
        home_progress=home_progress,
    )


def finished_token(color: Color, token_id: int) -> Token:
    return Token(
        token_id=token_id,
        color=color,
        status=TokenStatus.FINISHED,
        ring_position=NO_POSITION,
        home_progress=HOME_FINISH_INDEX,
    )


def create_player(
    seat: int,
    tokens: list[Token] | None = None,
    is_computer: bool = False,
) -> Player:
    """Helper to create a player for one of the four seats.

    Unspecified token slots are filled with yard tokens.
    """
    player_id, name, color = SEATS[seat]
    given = {t.token_id: t for t in tokens or []}
    full = [given.get(i) or yard_token(color, i) for i in range(4)]
    return Player(
        player_id=player_id,
        name=name,
        color=color,
        is_computer=is_computer,
        tokens=full,
        finished_count=sum(1 for t in full if t.status == TokenStatus.FINISHED),
    )


def create_state(
    players: list[Player],
    phase: GamePhase = GamePhase.ROLL,
    current_player_index: int = 0,
    last_roll: int | None = None,
    movable_token_ids: list[int] | None = None,
    consecutive_sixes: int = 0,
    transition_delay_ms: int = 0,
) -> GameState:
    """Helper to create a mid-match state."""
    return GameState(
        phase=phase,
        players=players,
        current_player_index=current_player_index,
        last_roll=last_roll,
        movable_token_ids=movable_token_ids or [],
        consecutive_sixes=consecutive_sixes,
        transition_delay_ms=transition_delay_ms,
    )


def seat_attributes(count: int, computer: bool = False) -> list[PlayerAttributes]:
    return [
        PlayerAttributes(player_id=pid, name=name, color=color, is_computer=computer)
        for pid, name, color in SEATS[:count]
    ]


@pytest.fixture
def settings() -> Settings:
    """Settings with forced forfeits resolved synchronously."""
    return Settings(
        JWT_SECRET="test-secret-with-enough-length-for-hs256",
        TURN_TRANSITION_DELAY_MS=0,
    )


@pytest.fixture
def two_player_game() -> GameState:
    """Fresh two-player match, red to roll."""
    return create_state([create_player(0), create_player(1)])


@pytest.fixture
def four_player_game() -> GameState:
    """Fresh four-player match, red to roll."""
    return create_state([create_player(i) for i in range(4)])

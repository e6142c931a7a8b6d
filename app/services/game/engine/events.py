"""Game event types - emitted during state transitions for WebSocket broadcasts.

Events describe what happened during a game action, enabling:
- Presentation one-shot effects (capture, finish, win) without diffing snapshots
- Move animations (TokenMoved carries the traversed cells)
- Action replay / audit logging
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from app.schemas.game_engine import Color, TokenStatus


class GameEvent(BaseModel):
    """Base class for all game events."""

    event_type: str
    seq: int = 0  # Sequence number assigned during processing


class GameStarted(GameEvent):
    """A fresh match was constructed for the seated players."""

    event_type: Literal["game_started"] = "game_started"
    player_order: list[str] = Field(..., description="Player IDs in turn order")
    colors: list[Color]
    first_player_id: str


class DiceRolled(GameEvent):
    """A player rolled the die."""

    event_type: Literal["dice_rolled"] = "dice_rolled"
    player_id: str
    value: int = Field(..., ge=1, le=6)
    consecutive_sixes: int = Field(
        ..., description="Sixes rolled in a row this turn, including this roll"
    )


class ThreeSixesPenalty(GameEvent):
    """Player rolled three consecutive sixes and forfeits the turn."""

    event_type: Literal["three_sixes_penalty"] = "three_sixes_penalty"
    player_id: str


class AwaitingChoice(GameEvent):
    """Game is waiting for the player to choose a token."""

    event_type: Literal["awaiting_choice"] = "awaiting_choice"
    player_id: str
    movable_token_ids: list[int]
    roll: int


class TurnTransitionPending(GameEvent):
    """A forced forfeit is pacing out; no intents are accepted meanwhile."""

    event_type: Literal["turn_transition_pending"] = "turn_transition_pending"
    player_id: str
    reason: str
    delay_ms: int


class TokenExitedYard(GameEvent):
    """A token left the yard onto its entry cell (rolled a 6)."""

    event_type: Literal["token_exited_yard"] = "token_exited_yard"
    player_id: str
    color: Color
    token_id: int
    ring_position: int


class TokenMoved(GameEvent):
    """A token was moved on the board."""

    event_type: Literal["token_moved"] = "token_moved"
    player_id: str
    color: Color
    token_id: int
    from_status: TokenStatus
    to_status: TokenStatus
    from_ring_position: int
    to_ring_position: int
    from_home_progress: int
    to_home_progress: int
    roll_used: int
    path: list[tuple[int, int]] = Field(
        ..., description="Grid cells traversed, ending on the landing cell"
    )


class TokenEnteredHomeColumn(GameEvent):
    """A token peeled off the ring into its private home column."""

    event_type: Literal["token_entered_home_column"] = "token_entered_home_column"
    player_id: str
    color: Color
    token_id: int
    home_progress: int


class TokenFinished(GameEvent):
    """A token reached the center."""

    event_type: Literal["token_finished"] = "token_finished"
    player_id: str
    color: Color
    token_id: int
    finished_count: int


class TokenCaptured(GameEvent):
    """An opposing token was sent back to its yard."""

    event_type: Literal["token_captured"] = "token_captured"
    capturing_player_id: str
    capturing_color: Color
    capturing_token_id: int
    captured_player_id: str
    captured_color: Color
    captured_token_id: int
    ring_position: int = Field(..., description="Ring index where the capture occurred")


class RollGranted(GameEvent):
    """The player may roll (turn start or extra roll)."""

    event_type: Literal["roll_granted"] = "roll_granted"
    player_id: str
    reason: str = Field(..., description="'turn_start', 'rolled_six' or 'capture'")


class TurnStarted(GameEvent):
    """A new turn has begun."""

    event_type: Literal["turn_started"] = "turn_started"
    player_id: str
    color: Color
    turn_number: int


class TurnEnded(GameEvent):
    """A player's turn has ended."""

    event_type: Literal["turn_ended"] = "turn_ended"
    player_id: str
    reason: str = Field(
        ...,
        description="Why turn ended: 'no_legal_moves', 'three_sixes', 'move_complete'",
    )
    next_player_id: str


class GameEnded(GameEvent):
    """The match has a winner."""

    event_type: Literal["game_ended"] = "game_ended"
    winner_id: str
    winner_name: str
    winner_color: Color


# Union of all event types for type checking
AnyGameEvent = Annotated[
    GameStarted
    | DiceRolled
    | ThreeSixesPenalty
    | AwaitingChoice
    | TurnTransitionPending
    | TokenExitedYard
    | TokenMoved
    | TokenEnteredHomeColumn
    | TokenFinished
    | TokenCaptured
    | RollGranted
    | TurnStarted
    | TurnEnded
    | GameEnded,
    Field(discriminator="event_type"),
]

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Board dimensions shared by the engine and the published snapshots
RING_LENGTH = 51
HOME_COLUMN_LENGTH = 5
HOME_FINISH_INDEX = 5  # the shared center
TOKENS_PER_PLAYER = 4
MIN_PLAYERS = 2
MAX_PLAYERS = 4

# Sentinel for "not on the ring" / "not in the home column"
NO_POSITION = -1


class Color(str, Enum):
    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"


# Seating order; colors are assigned in join order
COLOR_ORDER: tuple[Color, ...] = (Color.RED, Color.GREEN, Color.YELLOW, Color.BLUE)


# Match phases
class GamePhase(str, Enum):
    ROLL = "roll"
    MOVE = "move"
    TRANSITION = "transition"
    DONE = "done"


# Token states
class TokenStatus(str, Enum):
    YARD = "yard"
    ACTIVE = "active"
    FINISHED = "finished"


class Token(BaseModel):
    """A single token; exactly one location description is valid at a time."""

    token_id: int = Field(..., ge=0, lt=TOKENS_PER_PLAYER)
    color: Color
    status: TokenStatus = TokenStatus.YARD
    ring_position: int = NO_POSITION
    home_progress: int = NO_POSITION

    @model_validator(mode="after")
    def check_location(self) -> "Token":
        on_ring = 0 <= self.ring_position < RING_LENGTH
        in_column = 0 <= self.home_progress < HOME_FINISH_INDEX

        if self.status == TokenStatus.YARD:
            valid = self.ring_position == NO_POSITION and self.home_progress == NO_POSITION
        elif self.status == TokenStatus.FINISHED:
            valid = self.ring_position == NO_POSITION and self.home_progress == HOME_FINISH_INDEX
        else:
            valid = (on_ring and self.home_progress == NO_POSITION) or (
                in_column and self.ring_position == NO_POSITION
            )

        if not valid:
            raise ValueError(
                f"Inconsistent location for {self.color.value} token {self.token_id}: "
                f"status={self.status.value}, ring_position={self.ring_position}, "
                f"home_progress={self.home_progress}"
            )
        return self

    @property
    def on_ring(self) -> bool:
        return self.status == TokenStatus.ACTIVE and self.home_progress == NO_POSITION

    @property
    def in_home_column(self) -> bool:
        return self.status == TokenStatus.ACTIVE and self.home_progress >= 0


# Defined before the match starts from room membership / local setup
class PlayerAttributes(BaseModel):
    player_id: str
    name: str
    color: Color
    is_computer: bool = False


class Player(PlayerAttributes):
    tokens: list[Token]
    finished_count: int = Field(0, ge=0, le=TOKENS_PER_PLAYER)

    def get_token(self, token_id: int) -> Token | None:
        return next((t for t in self.tokens if t.token_id == token_id), None)


class PendingTransition(BaseModel):
    """A forced turn forfeit waiting for its pacing delay to elapse."""

    reason: str = Field(..., description="'no_legal_moves' or 'three_sixes'")
    player_id: str
    delay_ms: int = Field(..., ge=0)


class GameState(BaseModel):
    """Authoritative match state.

    Treated as an immutable value: every accepted transition produces a new
    copy, so a rejected intent can never leave a half-applied mutation.
    """

    phase: GamePhase = GamePhase.ROLL
    players: list[Player]
    current_player_index: int = 0
    last_roll: int | None = None
    consecutive_sixes: int = 0
    movable_token_ids: list[int] = []
    winner: Color | None = None
    pending_transition: PendingTransition | None = None
    turn_number: int = 1
    transition_delay_ms: int = 0
    event_seq: int = 0  # Next sequence number for events (monotonically increasing)

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    def get_player(self, player_id: str) -> Player | None:
        return next((p for p in self.players if p.player_id == player_id), None)


# Published, read-only views of a match


class TokenSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    token_id: int
    status: TokenStatus
    ring_position: int
    home_progress: int
    cell: tuple[int, int]


class PlayerSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_id: str
    name: str
    color: Color
    is_computer: bool
    finished_count: int
    tokens: list[TokenSnapshot]


class MatchSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    players: list[PlayerSnapshot]
    current_player_index: int
    current_color: Color
    current_player_id: str
    last_roll: int | None
    phase: GamePhase
    winner: Color | None
    movable_token_ids: list[int]
    turn_number: int
    pending_transition: PendingTransition | None = None

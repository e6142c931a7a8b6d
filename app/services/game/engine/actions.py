"""Game action types - explicit user inputs separated from game state."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class RollAction(BaseModel):
    """Player rolls the die; the value is drawn by the match owner."""

    action_type: Literal["roll"] = "roll"
    value: int = Field(..., ge=1, le=6, description="Die value (1-6)")


class MoveAction(BaseModel):
    """Player selects one of their tokens to move with the current roll."""

    action_type: Literal["move"] = "move"
    token_id: int = Field(..., ge=0, le=3, description="Slot id of the token to move")


# Union type for all game actions
GameAction = Annotated[
    RollAction | MoveAction,
    Field(discriminator="action_type"),
]

"""Validation layer for game actions and ProcessResult pattern.

Separates validation from processing logic:
- validate_action() checks if an action is valid given current state
- ProcessResult replaces exceptions for control flow
"""

import logging
from dataclasses import dataclass, field

from app.schemas.game_engine import GamePhase, GameState

from .actions import GameAction, MoveAction, RollAction
from .events import AnyGameEvent

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """Result of processing a game action.

    Replaces exceptions for control flow, providing explicit success/failure
    with error codes suitable for client localization.
    """

    state: GameState | None = None
    events: list[AnyGameEvent] = field(default_factory=list)
    success: bool = True
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(
        cls,
        state: GameState,
        events: list[AnyGameEvent] | None = None,
    ) -> "ProcessResult":
        """Create a successful result with new state and events."""
        return cls(
            state=state,
            events=events or [],
            success=True,
        )

    @classmethod
    def failure(cls, code: str, message: str) -> "ProcessResult":
        """Create a failure result with error details."""
        return cls(
            state=None,
            events=[],
            success=False,
            error_code=code,
            error_message=message,
        )


@dataclass
class ValidationResult:
    """Result of validating an action before processing."""

    is_valid: bool = True
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        """Create a successful validation result."""
        return cls(is_valid=True)

    @classmethod
    def error(cls, code: str, message: str) -> "ValidationResult":
        """Create a validation failure with error details."""
        return cls(
            is_valid=False,
            error_code=code,
            error_message=message,
        )


def validate_action(
    state: GameState,
    action: GameAction,
    player_id: str,
) -> ValidationResult:
    """Validate an action before processing.

    Checks:
    - The match is neither won nor pacing out a forced forfeit
    - It's the correct player's turn
    - The phase matches the action (roll vs move)
    - For moves, the chosen token is in the movable cache for this roll

    Args:
        state: Current game state.
        action: The action to validate.
        player_id: The player attempting the action.

    Returns:
        ValidationResult indicating success or failure with error details.
    """
    action_type = type(action).__name__
    logger.debug(
        "Validating action: type=%s, player=%s, phase=%s",
        action_type,
        player_id[:8],
        state.phase.value,
    )

    if state.phase == GamePhase.DONE or state.winner is not None:
        logger.warning("Validation failed: GAME_FINISHED")
        return ValidationResult.error(
            "GAME_FINISHED",
            "Game has already finished",
        )

    if state.phase == GamePhase.TRANSITION:
        logger.warning("Validation failed: TURN_IN_TRANSITION")
        return ValidationResult.error(
            "TURN_IN_TRANSITION",
            "The turn is passing to the next player",
        )

    if state.current_player.player_id != player_id:
        logger.warning(
            "Validation failed: NOT_YOUR_TURN, current=%s, attempted=%s",
            state.current_player.player_id[:8],
            player_id[:8],
        )
        return ValidationResult.error(
            "NOT_YOUR_TURN",
            "It's not your turn",
        )

    if isinstance(action, RollAction):
        if state.phase != GamePhase.ROLL:
            logger.warning(
                "Validation failed: INVALID_ACTION (roll), expected=%s, got=%s",
                GamePhase.ROLL.value,
                state.phase.value,
            )
            return ValidationResult.error(
                "INVALID_ACTION",
                "Cannot roll dice - waiting for a move",
            )

    elif isinstance(action, MoveAction):
        if state.phase != GamePhase.MOVE:
            logger.warning(
                "Validation failed: INVALID_ACTION (move), expected=%s, got=%s",
                GamePhase.MOVE.value,
                state.phase.value,
            )
            return ValidationResult.error(
                "INVALID_ACTION",
                "Cannot move - roll the dice first",
            )

        if action.token_id not in state.movable_token_ids:
            logger.warning(
                "Validation failed: ILLEGAL_MOVE, requested=%s, movable=%s",
                action.token_id,
                state.movable_token_ids,
            )
            return ValidationResult.error(
                "ILLEGAL_MOVE",
                f"Token {action.token_id} cannot move with this roll",
            )

    logger.debug("Action validated successfully: type=%s", action_type)
    return ValidationResult.ok()

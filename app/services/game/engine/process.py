"""Main entry point for game action processing.

This module provides the primary interface for processing game actions:
- process_action(): Validates and processes a roll or move
- resolve_transition(): Completes a paced turn forfeit
- Returns ProcessResult with new state and sequenced events
"""

import logging

from app.schemas.game_engine import TOKENS_PER_PLAYER, Color, GameState

from .actions import GameAction, MoveAction, RollAction
from .events import AnyGameEvent
from .movement import process_move
from .rolling import process_roll, resolve_pending_transition
from .validation import ProcessResult, validate_action

logger = logging.getLogger(__name__)


def process_action(
    state: GameState,
    action: GameAction,
    player_id: str,
) -> ProcessResult:
    """Process a game action and return the result.

    This is the main entry point for all player actions. It:
    1. Validates the action is legal given current state
    2. Dispatches to the appropriate handler
    3. Assigns sequence numbers to events
    4. Returns ProcessResult with new state and events

    A rejected action never changes anything: the input state is not
    mutated and the result carries no state.

    Args:
        state: Current game state.
        action: The action to process.
        player_id: The player attempting the action.

    Returns:
        ProcessResult containing:
        - success: Whether the action was processed successfully
        - state: The new game state (if successful)
        - events: List of events that occurred (with seq numbers)
        - error_code/error_message: Error details (if failed)

    Example:
        >>> result = process_action(state, RollAction(value=6), player_id)
        >>> if result.success:
        ...     new_state = result.state
        ...     for event in result.events:
        ...         broadcast(event)  # event.seq is set
        ... else:
        ...     send_error(result.error_code, result.error_message)
    """
    action_type = type(action).__name__
    logger.info(
        "Processing action: type=%s, player=%s, phase=%s",
        action_type,
        player_id[:8],
        state.phase.value,
    )
    logger.debug("Action details: %s", action)

    validation = validate_action(state, action, player_id)
    if not validation.is_valid:
        logger.warning(
            "Action validation failed: code=%s, message=%s, player=%s, action=%s",
            validation.error_code,
            validation.error_message,
            player_id[:8],
            action_type,
        )
        return ProcessResult.failure(
            validation.error_code or "VALIDATION_ERROR",
            validation.error_message or "Invalid action",
        )

    if isinstance(action, RollAction):
        result = process_roll(state, action.value, player_id)

    elif isinstance(action, MoveAction):
        result = process_move(state, action.token_id, player_id)

    else:
        logger.error("Unknown action type received: %s", action_type)
        return ProcessResult.failure(
            "UNKNOWN_ACTION",
            f"Unknown action type: {action_type}",
        )

    if result.success and result.state is not None:
        result = assign_event_sequences(result.state, result.events)
        logger.info(
            "Action processed successfully: type=%s, player=%s, events_generated=%d",
            action_type,
            player_id[:8],
            len(result.events),
        )
        logger.debug("Generated events: %s", [type(e).__name__ for e in result.events])
    else:
        logger.warning(
            "Action processing failed: type=%s, player=%s, error=%s",
            action_type,
            player_id[:8],
            result.error_code,
        )

    return result


def resolve_transition(state: GameState) -> ProcessResult:
    """Complete a pending turn forfeit and sequence its events."""
    result = resolve_pending_transition(state)
    if not result.success or result.state is None:
        logger.debug("No transition to resolve: %s", result.error_code)
        return result
    return assign_event_sequences(result.state, result.events)


def assign_event_sequences(state: GameState, events: list[AnyGameEvent]) -> ProcessResult:
    """Assign monotonically increasing sequence numbers to events.

    Updates each event's seq field and increments the state's event_seq counter.
    """
    if not events:
        return ProcessResult.ok(state, events)

    current_seq = state.event_seq
    for event in events:
        event.seq = current_seq
        current_seq += 1

    new_state = state.model_copy(update={"event_seq": current_seq})
    return ProcessResult.ok(new_state, events)


def check_win_condition(state: GameState) -> Color | None:
    """Check if any player has won the match.

    A player wins when all four of their tokens have finished.

    Args:
        state: Current game state.

    Returns:
        The winning color, or None if no winner yet.
    """
    for player in state.players:
        logger.debug(
            "Win check: color=%s, finished=%d/%d",
            player.color.value,
            player.finished_count,
            TOKENS_PER_PLAYER,
        )
        if player.finished_count == TOKENS_PER_PLAYER:
            return player.color
    return None

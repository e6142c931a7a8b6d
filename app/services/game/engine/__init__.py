"""Game engine module - pure functional game logic.

This module provides the core game engine with:
- Action types for explicit user inputs
- Event types for WebSocket broadcasts
- ProcessResult pattern for error handling
- Modular processing logic

Usage:
    from app.services.game.engine import (
        process_action,
        ProcessResult,
        RollAction,
        MoveAction,
    )

    # Process an action
    result = process_action(state, RollAction(value=6), player_id)

    if result.success:
        new_state = result.state
        events = result.events  # Broadcast these via WebSocket
    else:
        # Handle error
        print(f"Error: {result.error_code} - {result.error_message}")
"""

# Actions - explicit user inputs
from .actions import (
    GameAction,
    MoveAction,
    RollAction,
)

# Events - for WebSocket broadcasts
from .events import (
    AnyGameEvent,
    AwaitingChoice,
    DiceRolled,
    GameEnded,
    GameEvent,
    GameStarted,
    RollGranted,
    ThreeSixesPenalty,
    TokenCaptured,
    TokenEnteredHomeColumn,
    TokenExitedYard,
    TokenFinished,
    TokenMoved,
    TurnEnded,
    TurnStarted,
    TurnTransitionPending,
)

# Legal moves
from .legal_moves import can_move, get_movable_tokens

# Movement
from .movement import apply_move

# Main processing
from .process import (
    assign_event_sequences,
    check_win_condition,
    process_action,
    resolve_transition,
)

# Snapshots
from .snapshot import build_snapshot

# Result types
from .validation import ProcessResult, ValidationResult, validate_action

__all__ = [
    # Actions
    "GameAction",
    "RollAction",
    "MoveAction",
    # Events
    "GameEvent",
    "AnyGameEvent",
    "GameStarted",
    "DiceRolled",
    "ThreeSixesPenalty",
    "AwaitingChoice",
    "TurnTransitionPending",
    "TokenExitedYard",
    "TokenMoved",
    "TokenEnteredHomeColumn",
    "TokenFinished",
    "TokenCaptured",
    "RollGranted",
    "TurnStarted",
    "TurnEnded",
    "GameEnded",
    # Processing
    "process_action",
    "resolve_transition",
    "assign_event_sequences",
    "check_win_condition",
    "apply_move",
    "build_snapshot",
    # Validation
    "ProcessResult",
    "ValidationResult",
    "validate_action",
    # Legal moves
    "can_move",
    "get_movable_tokens",
]

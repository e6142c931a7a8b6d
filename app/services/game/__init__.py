"""Game service module.

Provides:
- Board geometry (board.py)
- Game initialization (start_game.py)
- Game engine processing (engine/)
- Move advisory for computer seats (advisor.py)
- In-process matches (local.py)
"""

# Re-export from engine for convenience
from .engine import (
    GameAction,
    MoveAction,
    ProcessResult,
    RollAction,
    build_snapshot,
    process_action,
    resolve_transition,
)
from .start_game import initialize_game, start_game, validate_game_settings

__all__ = [
    # Initialization
    "initialize_game",
    "start_game",
    "validate_game_settings",
    # Engine
    "GameAction",
    "ProcessResult",
    "RollAction",
    "MoveAction",
    "process_action",
    "resolve_transition",
    "build_snapshot",
]

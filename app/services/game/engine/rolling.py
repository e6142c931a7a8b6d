"""Dice roll processing and turn advancement."""

import logging

from app.schemas.game_engine import (
    TOKENS_PER_PLAYER,
    GamePhase,
    GameState,
    PendingTransition,
    Player,
)

from .events import (
    AnyGameEvent,
    AwaitingChoice,
    DiceRolled,
    RollGranted,
    ThreeSixesPenalty,
    TurnEnded,
    TurnStarted,
    TurnTransitionPending,
)
from .legal_moves import get_movable_tokens
from .validation import ProcessResult

logger = logging.getLogger(__name__)

SIX = 6
MAX_CONSECUTIVE_SIXES = 3


def get_next_player_index(players: list[Player], current_index: int) -> int:
    """Next seat in turn order, skipping players who already finished.

    Bounded to one lap so a degenerate board can never loop forever.
    """
    count = len(players)
    index = current_index
    for _ in range(count):
        index = (index + 1) % count
        if players[index].finished_count < TOKENS_PER_PLAYER:
            break
    logger.debug(
        "Turn order calculation: current=%d, num_players=%d, next=%d",
        current_index,
        count,
        index,
    )
    return index


def end_turn(state: GameState, reason: str) -> tuple[GameState, list[AnyGameEvent]]:
    """Pass the turn to the next eligible player and reset per-turn state."""
    current_player = state.current_player
    next_index = get_next_player_index(state.players, state.current_player_index)
    next_player = state.players[next_index]
    turn_number = state.turn_number + 1

    events: list[AnyGameEvent] = [
        TurnEnded(
            player_id=current_player.player_id,
            reason=reason,
            next_player_id=next_player.player_id,
        ),
        TurnStarted(
            player_id=next_player.player_id,
            color=next_player.color,
            turn_number=turn_number,
        ),
        RollGranted(player_id=next_player.player_id, reason="turn_start"),
    ]

    new_state = state.model_copy(
        update={
            "phase": GamePhase.ROLL,
            "current_player_index": next_index,
            "last_roll": None,
            "movable_token_ids": [],
            "consecutive_sixes": 0,
            "pending_transition": None,
            "turn_number": turn_number,
        }
    )
    logger.info(
        "Turn ended (%s): player=%s, next_player=%s",
        reason,
        current_player.player_id[:8],
        next_player.player_id[:8],
    )
    return new_state, events


def forfeit_turn(state: GameState, reason: str) -> tuple[GameState, list[AnyGameEvent]]:
    """Forfeit the current turn, either immediately or via a paced transition."""
    if state.transition_delay_ms <= 0:
        return end_turn(state, reason)

    player_id = state.current_player.player_id
    pending = PendingTransition(
        reason=reason,
        player_id=player_id,
        delay_ms=state.transition_delay_ms,
    )
    new_state = state.model_copy(
        update={
            "phase": GamePhase.TRANSITION,
            "movable_token_ids": [],
            "pending_transition": pending,
        }
    )
    logger.info(
        "Turn transition pending (%s): player=%s, delay=%dms",
        reason,
        player_id[:8],
        state.transition_delay_ms,
    )
    return new_state, [
        TurnTransitionPending(
            player_id=player_id,
            reason=reason,
            delay_ms=state.transition_delay_ms,
        )
    ]


def process_roll(state: GameState, roll_value: int, player_id: str) -> ProcessResult:
    """Process a dice roll and return updated state with events.

    Handles:
    - Consecutive sixes tracking and the three-sixes forfeit
    - Computing the movable tokens for this roll
    - Forfeiting the turn if nothing can move

    Args:
        state: Current game state (phase ROLL, validated).
        roll_value: The die value rolled (1-6).
        player_id: The player who rolled.

    Returns:
        ProcessResult with new state and events.
    """
    player = state.current_player
    consecutive_sixes = state.consecutive_sixes + 1 if roll_value == SIX else 0

    logger.info(
        "Processing roll: player=%s, value=%d, consecutive_sixes=%d",
        player_id[:8],
        roll_value,
        consecutive_sixes,
    )

    events: list[AnyGameEvent] = [
        DiceRolled(
            player_id=player_id,
            value=roll_value,
            consecutive_sixes=consecutive_sixes,
        )
    ]

    if consecutive_sixes >= MAX_CONSECUTIVE_SIXES:
        logger.info("Three sixes penalty triggered: player=%s", player_id[:8])
        events.append(ThreeSixesPenalty(player_id=player_id))
        rolled = state.model_copy(
            update={
                "last_roll": roll_value,
                "consecutive_sixes": 0,
                "movable_token_ids": [],
            }
        )
        new_state, turn_events = forfeit_turn(rolled, "three_sixes")
        return ProcessResult.ok(new_state, events + turn_events)

    movable = get_movable_tokens(player, roll_value)
    logger.debug("Movable tokens for roll %d: %s", roll_value, movable or "none")

    rolled = state.model_copy(
        update={
            "last_roll": roll_value,
            "consecutive_sixes": consecutive_sixes,
        }
    )

    if not movable:
        new_state, turn_events = forfeit_turn(rolled, "no_legal_moves")
        return ProcessResult.ok(new_state, events + turn_events)

    events.append(
        AwaitingChoice(
            player_id=player_id,
            movable_token_ids=movable,
            roll=roll_value,
        )
    )
    new_state = rolled.model_copy(
        update={
            "phase": GamePhase.MOVE,
            "movable_token_ids": movable,
        }
    )
    logger.info(
        "Awaiting player choice: player=%s, movable=%s, roll=%d",
        player_id[:8],
        movable,
        roll_value,
    )
    return ProcessResult.ok(new_state, events)


def resolve_pending_transition(state: GameState) -> ProcessResult:
    """Complete a paced forfeit, handing the turn to the next player."""
    pending = state.pending_transition
    if state.phase != GamePhase.TRANSITION or pending is None:
        return ProcessResult.failure(
            "NO_PENDING_TRANSITION",
            "There is no turn transition to resolve",
        )

    new_state, events = end_turn(state, pending.reason)
    return ProcessResult.ok(new_state, events)

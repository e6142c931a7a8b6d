"""In-process match driver for hot-seat play and computer-controlled seats.

LocalMatch owns one GameState, draws dice from an injectable source and
feeds the engine. Observers receive the fresh snapshot and the events of
every accepted transition.
"""

import logging
from collections.abc import Callable

from app.schemas.game_engine import (
    GamePhase,
    GameState,
    MatchSnapshot,
    PlayerAttributes,
)
from app.services.game.advisor import choose_token
from app.services.game.dice import DieSource, random_die
from app.services.game.engine import (
    AnyGameEvent,
    MoveAction,
    ProcessResult,
    RollAction,
    build_snapshot,
    process_action,
    resolve_transition,
)
from app.services.game.start_game import start_game

logger = logging.getLogger(__name__)

MatchObserver = Callable[[MatchSnapshot, list[AnyGameEvent]], None]

# A computer seat keeps the turn only on sixes and captures, so this is
# never reached in a well-formed match.
MAX_ROLLS_PER_TURN = 64


class LocalMatch:
    """A match played entirely in this process."""

    def __init__(
        self,
        player_attributes: list[PlayerAttributes],
        die: DieSource | None = None,
        transition_delay_ms: int = 0,
    ):
        result = start_game(player_attributes, transition_delay_ms)
        if not result.success or result.state is None:
            raise ValueError(result.error_message)
        self._state: GameState = result.state
        self._die: DieSource = die or random_die
        self._observers: list[MatchObserver] = []
        self.opening_events: list[AnyGameEvent] = result.events

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def is_done(self) -> bool:
        return self._state.phase == GamePhase.DONE

    def snapshot(self) -> MatchSnapshot:
        return build_snapshot(self._state)

    def add_observer(self, observer: MatchObserver) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: MatchObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _apply(self, result: ProcessResult) -> bool:
        if not result.success or result.state is None:
            logger.debug(
                "Local intent ignored: code=%s, message=%s",
                result.error_code,
                result.error_message,
            )
            return False

        self._state = result.state
        snapshot = build_snapshot(self._state)
        for observer in list(self._observers):
            observer(snapshot, result.events)
        return True

    def roll(self) -> int | None:
        """Roll for the current player.

        Returns the die value, or None when rolling is not allowed now.
        """
        if self._state.phase != GamePhase.ROLL:
            return None
        value = self._die()
        player_id = self._state.current_player.player_id
        if not self._apply(process_action(self._state, RollAction(value=value), player_id)):
            return None
        return value

    def move(self, token_id: int) -> bool:
        """Move one of the current player's tokens with the cached roll."""
        player_id = self._state.current_player.player_id
        return self._apply(
            process_action(self._state, MoveAction(token_id=token_id), player_id)
        )

    def resolve_transition(self) -> bool:
        """Complete a paced forfeit, if one is pending."""
        return self._apply(resolve_transition(self._state))

    def play_computer_turn(self) -> bool:
        """Play the current seat's whole turn with the move advisor.

        Keeps rolling while the seat earns extra rolls. Returns False when
        the current seat is not computer-controlled or the match is over.
        """
        player = self._state.current_player
        if self.is_done or not player.is_computer:
            return False

        logger.info("Computer turn: color=%s", player.color.value)
        for _ in range(MAX_ROLLS_PER_TURN):
            if self._state.phase == GamePhase.TRANSITION:
                self.resolve_transition()
                break

            if self.roll() is None:
                break

            if self._state.phase == GamePhase.MOVE:
                token_id = choose_token(self._state)
                if token_id is None or not self.move(token_id):
                    logger.error("Advisor produced no playable token for %s", player.color.value)
                    break
            elif self._state.phase == GamePhase.TRANSITION:
                self.resolve_transition()
                break

            if self.is_done or self._state.current_player.player_id != player.player_id:
                break

        return True

    def run_computer_turns(self, max_turns: int = 1000) -> int:
        """Play computer seats until a human is to act or the match ends.

        Returns the number of computer turns played.
        """
        played = 0
        while played < max_turns and self.play_computer_turn():
            played += 1
        return played

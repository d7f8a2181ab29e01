"""Swim-off tracking for the Poolside scorekeeper."""

import logging

from ..models import GameState
from ..utils.constants import SWIM_WINNER_US, SWIM_WINNERS
from .validation import Reason, ValidationResult, require_live

logger = logging.getLogger(__name__)


class SwimOffService:
    """
    Records who won each period's swim-off.

    A period holds at most one credited outcome for its swim-off player.
    Changing the winner takes the earlier credit back (never below zero)
    before crediting the new one; choosing the same winner again changes
    nothing.
    """

    def __init__(self, game_state: GameState):
        self.game_state = game_state

    def set_winner(self, winner: str) -> ValidationResult:
        guard = require_live(self.game_state)
        if not guard:
            return guard
        if winner not in SWIM_WINNERS:
            return ValidationResult.reject(Reason.UNKNOWN_FIELD, f"Unknown swim-off winner: {winner}")

        record = self.game_state.swim_off
        if not record.is_open_for(self.game_state.period):
            return ValidationResult.reject(Reason.NO_SWIM_OFF, "No swim-off player for this period.")
        if record.winner == winner:
            return ValidationResult.ok(winner)

        pid = record.player_id
        if record.winner is not None:
            previous = self._counter(record.winner)
            previous[pid] = max(0, previous.get(pid, 0) - 1)
        current = self._counter(winner)
        current[pid] = current.get(pid, 0) + 1
        record.winner = winner
        logger.info("Swim-off P%s won by %s", record.period, winner)
        return ValidationResult.ok(winner)

    def _counter(self, winner: str):
        if winner == SWIM_WINNER_US:
            return self.game_state.swim_wins
        return self.game_state.swim_losses

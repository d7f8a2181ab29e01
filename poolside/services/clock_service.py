"""Clock service for the Poolside scorekeeper."""

import logging
from typing import Optional

from ..models import GameState
from ..utils import parse_clock, fmt_clock, clamp_to_period
from ..utils.constants import CLOCK_NUDGE_SECONDS, MAX_PERIOD_LENGTH_MIN, MIN_PERIOD_LENGTH_MIN
from .validation import Reason, ValidationResult, require_in_progress

logger = logging.getLogger(__name__)


class ClockService:
    """
    Service for the period clock.

    The clock counts down. ``last_event_sec`` is the canonical "time
    remaining" value; the ``clock`` text on the state is only its display.
    """

    def __init__(self, game_state: GameState):
        self.game_state = game_state

    # ------------------------------------------------------------------
    # Configuration helpers
    # ------------------------------------------------------------------
    @staticmethod
    def validate_period_minutes(minutes) -> ValidationResult:
        """
        Check an operator-entered period length.

        Returns:
            Successful result carrying the length in seconds, or a rejection
        """
        try:
            value = float(minutes)
        except (TypeError, ValueError):
            value = 0.0
        if not MIN_PERIOD_LENGTH_MIN <= value <= MAX_PERIOD_LENGTH_MIN:
            return ValidationResult.reject(
                Reason.INVALID_PERIOD_LENGTH,
                f"Enter a valid period length in minutes (1-{MAX_PERIOD_LENGTH_MIN}, e.g. 8).",
            )
        return ValidationResult.ok(int(round(value * 60)))

    def reset_to_full_period(self) -> None:
        """Put the clock back to the full period length."""
        self.sync(self.game_state.period_length_sec)

    def zero(self) -> None:
        self.sync(0)

    # ------------------------------------------------------------------
    # Operator controls
    # ------------------------------------------------------------------
    def set_clock(self, text: str) -> ValidationResult:
        """Replace the clock with an operator-typed ``M:SS`` value."""
        guard = require_in_progress(self.game_state)
        if not guard:
            return guard

        seconds = parse_clock(text)
        if seconds is None:
            # Throw away the bad text and show the last confirmed time again
            self.game_state.clock = fmt_clock(self.game_state.last_event_sec)
            return ValidationResult.reject(
                Reason.INVALID_CLOCK, "Please enter time as MM:SS (e.g., 6:45)."
            )

        self.sync(clamp_to_period(seconds, self.game_state.period_length_sec))
        logger.debug("Clock set to %s", self.game_state.clock)
        return ValidationResult.ok(self.game_state.last_event_sec)

    def nudge(self, delta: int = CLOCK_NUDGE_SECONDS) -> ValidationResult:
        """Move the clock by ``delta`` seconds (the +/-10s buttons)."""
        guard = require_in_progress(self.game_state)
        if not guard:
            return guard

        base = parse_clock(self.game_state.clock)
        if base is None:
            base = self.game_state.last_event_sec
        self.sync(clamp_to_period(base + int(delta), self.game_state.period_length_sec))
        return ValidationResult.ok(self.game_state.last_event_sec)

    def set_period(self, period) -> ValidationResult:
        """Manually correct the period number."""
        guard = require_in_progress(self.game_state)
        if not guard:
            return guard
        try:
            value = int(period)
        except (TypeError, ValueError):
            value = 0
        if value < 1:
            return ValidationResult.reject(Reason.INVALID_NUMBER, "Period must be 1 or more.")
        self.game_state.period = value
        return ValidationResult.ok(value)

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    def display(self) -> str:
        return self.game_state.clock

    def parse_target(self, text: Optional[str]) -> Optional[int]:
        """Parse and clamp an operator-supplied time, None when malformed."""
        seconds = parse_clock(text)
        if seconds is None:
            return None
        return clamp_to_period(seconds, self.game_state.period_length_sec)

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------
    def sync(self, seconds: int) -> None:
        """Set the canonical time remaining and its display together."""
        self.game_state.last_event_sec = seconds
        self.game_state.clock = fmt_clock(seconds)

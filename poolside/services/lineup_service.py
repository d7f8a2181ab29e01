"""
Lineup and substitution engine for the Poolside scorekeeper.

Tracks which seven players are in the pool and accrues time played. Time
is only credited at boundaries (a substitution, the end of a period, the
end of the game), never while play runs: at each boundary every player who
was active gets the seconds between the last confirmed clock value and the
boundary.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set

from ..models import GameState
from ..utils import fmt_clock
from .clock_service import ClockService
from .validation import Reason, ValidationResult, require_live, validate_lineup

logger = logging.getLogger(__name__)


@dataclass
class PendingSubstitution:
    """Substitution being assembled by the operator."""
    time_sec: int
    out_ids: Set[str] = field(default_factory=set)
    in_ids: Set[str] = field(default_factory=set)

    def toggle_out(self, player_id: str) -> bool:
        return _toggle(self.out_ids, player_id)

    def toggle_in(self, player_id: str) -> bool:
        return _toggle(self.in_ids, player_id)

    def forget(self, player_id: str) -> None:
        self.out_ids.discard(player_id)
        self.in_ids.discard(player_id)


def _toggle(members: Set[str], player_id: str) -> bool:
    """Flip membership; returns True when the id is now a member."""
    if player_id in members:
        members.discard(player_id)
        return False
    members.add(player_id)
    return True


class LineupService:
    """Service for the active lineup, substitutions and time played."""

    def __init__(self, game_state: GameState, clock_service: Optional[ClockService] = None):
        self.game_state = game_state
        self.clock = clock_service or ClockService(game_state)
        self.pending: Optional[PendingSubstitution] = None

    @property
    def in_substitution(self) -> bool:
        return self.pending is not None

    # ------------------------------------------------------------------
    # Substitution flow
    # ------------------------------------------------------------------
    def start_substitution(self, clock_text: Optional[str]) -> ValidationResult:
        """
        Open a substitution at ``clock_text``.

        The target may not be later in the period than the last confirmed
        time: the clock counts down, so a larger value would move time back.
        """
        guard = require_live(self.game_state)
        if not guard:
            return guard

        target = self.clock.parse_target(clock_text)
        if target is None:
            return ValidationResult.reject(
                Reason.INVALID_CLOCK, "Please enter time as MM:SS (e.g., 6:45)."
            )
        last = self.game_state.last_event_sec
        if target > last:
            return ValidationResult.reject(
                Reason.TIME_BACKWARD,
                f"Time must go forward (down the clock). Last recorded: {fmt_clock(last)}.",
            )

        self.pending = PendingSubstitution(time_sec=target)
        return ValidationResult.ok(target)

    def toggle_out(self, player_id: str) -> ValidationResult:
        if self.pending is None:
            return self._no_pending()
        return ValidationResult.ok(self.pending.toggle_out(player_id))

    def toggle_in(self, player_id: str) -> ValidationResult:
        if self.pending is None:
            return self._no_pending()
        return ValidationResult.ok(self.pending.toggle_in(player_id))

    def apply_substitution(self) -> ValidationResult:
        """
        Commit the pending substitution.

        Every rule is checked before anything is written, so a rejected
        substitution leaves the lineup and time played untouched.
        """
        pending = self.pending
        if pending is None:
            return self._no_pending()
        guard = require_live(self.game_state)
        if not guard:
            return guard

        if len(pending.out_ids) != len(pending.in_ids):
            return ValidationResult.reject(
                Reason.SUBSTITUTION_COUNT_MISMATCH, "OUT count must equal IN count."
            )
        delta = self.game_state.last_event_sec - pending.time_sec
        if delta < 0:
            return ValidationResult.reject(
                Reason.TIME_BACKWARD, "Sub time must be <= last recorded time."
            )

        unknown = [pid for pid in pending.in_ids if self.game_state.player(pid) is None]
        if unknown:
            return ValidationResult.reject(
                Reason.UNKNOWN_PLAYER, "Incoming player is no longer on the roster."
            )

        tentative = [pid for pid in self.game_state.active_ids if pid not in pending.out_ids]
        tentative += [pid for pid in sorted(pending.in_ids) if pid not in tentative]
        result = validate_lineup(self.game_state, tentative)
        if not result:
            return result

        self.credit_active(delta)
        self.game_state.active_ids = tentative
        self.clock.sync(pending.time_sec)
        logger.info(
            "Substitution at %s: out=%s in=%s",
            self.game_state.clock, sorted(pending.out_ids), sorted(pending.in_ids),
        )
        self.pending = None
        return ValidationResult.ok(list(tentative))

    def cancel_substitution(self) -> ValidationResult:
        """Abandon the pending substitution without side effects."""
        self.pending = None
        return ValidationResult.ok()

    def forget_player(self, player_id: str) -> None:
        if self.pending is not None:
            self.pending.forget(player_id)

    # ------------------------------------------------------------------
    # Period boundaries
    # ------------------------------------------------------------------
    def credit_active(self, seconds: int) -> None:
        """Add ``seconds`` to the time played of every active player."""
        if seconds <= 0:
            return
        for pid in self.game_state.active_ids:
            self.game_state.time_played[pid] = self.game_state.time_played.get(pid, 0) + seconds

    def close_period(self) -> int:
        """
        Credit the rest of the period and empty the pool.

        Returns:
            Seconds credited to each player who was active
        """
        remaining = self.game_state.last_event_sec
        self.credit_active(remaining)
        self.game_state.active_ids = []
        self.clock.zero()
        self.pending = None
        return max(0, remaining)

    def seat_starters(self, starter_ids: Iterable[str]) -> List[str]:
        """Put an already validated set of starters in the pool in roster order."""
        wanted = set(starter_ids)
        ordered = [p.id for p in self.game_state.roster if p.id in wanted]
        self.game_state.active_ids = ordered
        self.clock.reset_to_full_period()
        self.pending = None
        return ordered

    def _no_pending(self) -> ValidationResult:
        return ValidationResult.reject(
            Reason.NO_PENDING_SUBSTITUTION, "Start a substitution first."
        )

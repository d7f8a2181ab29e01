"""
Situational tracker for the Poolside scorekeeper.

Man up and man down are two independent idle/active state machines; the
penalty counters and timeouts are stateless tallies.
"""
import logging

from ..models import GameState, TimeoutEntry
from ..utils.constants import TEAM_LABELS, TIMEOUT_KINDS, TIMEOUT_LABELS
from .validation import Reason, ValidationResult, require_in_progress, require_live

logger = logging.getLogger(__name__)


class SituationService:
    """Service for man up / man down, penalties and timeouts."""

    def __init__(self, game_state: GameState):
        self.game_state = game_state

    # ------------------------------------------------------------------
    # Man up (offense 6 on 5)
    # ------------------------------------------------------------------
    def start_man_up(self) -> ValidationResult:
        return self._start("man_up", "Man Up", "attempts")

    def end_man_up_scored(self) -> ValidationResult:
        return self._end("man_up", "Man Up", "goals")

    def end_man_up_stopped(self) -> ValidationResult:
        return self._end("man_up", "Man Up", "stops")

    # ------------------------------------------------------------------
    # Man down (defense 5 on 6)
    # ------------------------------------------------------------------
    def start_man_down(self) -> ValidationResult:
        return self._start("man_down", "Man Down", "defenses")

    def end_man_down_stopped(self) -> ValidationResult:
        return self._end("man_down", "Man Down", "stops")

    def end_man_down_goal_against(self) -> ValidationResult:
        return self._end("man_down", "Man Down", "goals_against")

    # ------------------------------------------------------------------
    # Penalties
    # ------------------------------------------------------------------
    def pen_for_scored(self) -> ValidationResult:
        return self._penalty("pen_for", "goals")

    def pen_for_missed(self) -> ValidationResult:
        return self._penalty("pen_for", "misses")

    def pen_against_saved(self) -> ValidationResult:
        return self._penalty("pen_against", "saves")

    def pen_against_goal(self) -> ValidationResult:
        return self._penalty("pen_against", "goals_against")

    # ------------------------------------------------------------------
    # Manual corrections
    # ------------------------------------------------------------------
    def adjust_team_stat(self, section: str, key: str, delta: int) -> ValidationResult:
        guard = require_in_progress(self.game_state)
        if not guard:
            return guard
        try:
            step = int(delta)
        except (TypeError, ValueError):
            return _bad_delta()
        try:
            value = self.game_state.team_stats.adjust(section, key, step)
        except KeyError:
            return ValidationResult.reject(Reason.UNKNOWN_FIELD, f"Unknown team stat {section}.{key}.")
        return ValidationResult.ok(value)

    # ------------------------------------------------------------------
    # Timeouts
    # ------------------------------------------------------------------
    def use_timeout(self, team: str, kind: str) -> ValidationResult:
        """Spend one timeout and log it at the current period and clock."""
        guard = require_live(self.game_state)
        if not guard:
            return guard
        counts = self._timeout_counts(team, kind)
        if counts is None:
            return ValidationResult.reject(Reason.UNKNOWN_FIELD, f"Unknown timeout {team}/{kind}.")

        remaining = getattr(counts, kind)
        if remaining <= 0:
            return ValidationResult.reject(
                Reason.TIMEOUTS_EXHAUSTED,
                f"{TEAM_LABELS[team]} has no {TIMEOUT_LABELS[kind]} timeouts left.",
            )
        setattr(counts, kind, remaining - 1)
        entry = TimeoutEntry(
            team=team, type=kind, period=self.game_state.period, clock=self.game_state.clock
        )
        self.game_state.timeout_log.append(entry)
        logger.info("%s timeout (%s) at P%s %s", TEAM_LABELS[team], kind, entry.period, entry.clock)
        return ValidationResult.ok(entry)

    def adjust_timeout(self, team: str, kind: str, delta: int) -> ValidationResult:
        """Correct a remaining-timeout count, never below zero."""
        guard = require_in_progress(self.game_state)
        if not guard:
            return guard
        counts = self._timeout_counts(team, kind)
        if counts is None:
            return ValidationResult.reject(Reason.UNKNOWN_FIELD, f"Unknown timeout {team}/{kind}.")
        try:
            step = int(delta)
        except (TypeError, ValueError):
            return _bad_delta()
        value = max(0, getattr(counts, kind) + step)
        setattr(counts, kind, value)
        return ValidationResult.ok(value)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _start(self, flag: str, label: str, counter: str) -> ValidationResult:
        guard = require_live(self.game_state)
        if not guard:
            return guard
        if getattr(self.game_state.situations, flag):
            return ValidationResult.reject(Reason.SITUATION_ACTIVE, f"{label} already active.")
        setattr(self.game_state.situations, flag, True)
        self.game_state.team_stats.adjust(flag, counter, 1)
        return ValidationResult.ok()

    def _end(self, flag: str, label: str, counter: str) -> ValidationResult:
        guard = require_live(self.game_state)
        if not guard:
            return guard
        if not getattr(self.game_state.situations, flag):
            return ValidationResult.reject(Reason.SITUATION_INACTIVE, f"No active {label}.")
        setattr(self.game_state.situations, flag, False)
        self.game_state.team_stats.adjust(flag, counter, 1)
        return ValidationResult.ok()

    def _penalty(self, section: str, outcome: str) -> ValidationResult:
        guard = require_live(self.game_state)
        if not guard:
            return guard
        stats = self.game_state.team_stats
        stats.adjust(section, "attempts", 1)
        stats.adjust(section, outcome, 1)
        return ValidationResult.ok()

    def _timeout_counts(self, team: str, kind: str):
        if kind not in TIMEOUT_KINDS:
            return None
        try:
            return self.game_state.timeouts.for_team(team)
        except KeyError:
            return None


def _bad_delta() -> ValidationResult:
    return ValidationResult.reject(Reason.INVALID_NUMBER, "Adjustment must be a whole number.")

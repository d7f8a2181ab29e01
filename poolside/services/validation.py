"""
Validation results, lineup rules and lifecycle guards.

Every operator command answers with a :class:`ValidationResult`. A rejected
command is a complete no-op; the result tells the caller which rule was
violated so it can be shown to the operator.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional

from ..models import GameState, LifecyclePhase
from ..utils.constants import LINEUP_SIZE, GOALKEEPERS_PER_LINEUP


class Reason:
    """Machine readable rejection codes."""
    NOT_LIVE = "not_live"
    NOT_STARTED = "not_started"
    ALREADY_STARTED = "already_started"
    GAME_ENDED = "game_ended"
    NOT_BETWEEN_PERIODS = "not_between_periods"
    LINEUP_TOO_LARGE = "lineup_exceeds_size"
    LINEUP_WRONG_SIZE = "lineup_wrong_size"
    LINEUP_WRONG_GK_COUNT = "lineup_wrong_gk_count"
    SWIM_OFF_MISSING = "swim_off_missing"
    SWIM_OFF_NOT_STARTER = "swim_off_not_starter"
    INVALID_PERIOD_LENGTH = "invalid_period_length"
    INVALID_CLOCK = "invalid_clock"
    INVALID_NUMBER = "invalid_number"
    TIME_BACKWARD = "time_backward"
    NO_PENDING_SUBSTITUTION = "no_pending_substitution"
    SUBSTITUTION_PENDING = "substitution_pending"
    SUBSTITUTION_COUNT_MISMATCH = "substitution_count_mismatch"
    UNKNOWN_PLAYER = "unknown_player"
    UNKNOWN_EVENT = "unknown_event"
    UNKNOWN_EVENT_TYPE = "unknown_event_type"
    UNKNOWN_FIELD = "unknown_field"
    SITUATION_ACTIVE = "situation_active"
    SITUATION_INACTIVE = "situation_inactive"
    TIMEOUTS_EXHAUSTED = "timeouts_exhausted"
    NO_SWIM_OFF = "no_swim_off"
    IMPORT_FAILED = "import_failed"
    INVALID_PLAYER = "invalid_player"
    NOT_CONFIRMED = "not_confirmed"
    CANCELLED = "cancelled"


class ValidationResult:
    """Result of a validation operation with success status and error messages."""

    def __init__(
        self,
        is_valid: bool = True,
        errors: Optional[List[str]] = None,
        reason: Optional[str] = None,
        value: Any = None,
    ):
        self.is_valid = is_valid
        self.errors = errors or []
        self.reason = reason
        self.value = value

    @classmethod
    def ok(cls, value: Any = None) -> "ValidationResult":
        return cls(value=value)

    @classmethod
    def reject(cls, reason: str, message: str) -> "ValidationResult":
        return cls(is_valid=False, errors=[message], reason=reason)

    @property
    def message(self) -> str:
        return "; ".join(self.errors)

    def __bool__(self) -> bool:
        return self.is_valid

    def __repr__(self) -> str:
        if self.is_valid:
            return "ValidationResult(ok)"
        return f"ValidationResult(reason={self.reason!r}, errors={self.errors!r})"


class ValidationRule(ABC):
    """Abstract base class for validation rules."""

    @abstractmethod
    def validate(self, *args, **kwargs) -> ValidationResult:
        """Perform validation and return result."""


class LineupSizeRule(ValidationRule):
    """A lineup holds exactly seven players."""

    def __init__(self, size: int = LINEUP_SIZE):
        self.size = size

    def validate(self, state: GameState, ids: Iterable[str]) -> ValidationResult:
        count = len(set(ids))
        if count > self.size:
            return ValidationResult.reject(
                Reason.LINEUP_TOO_LARGE, f"Lineup would exceed {self.size} players."
            )
        if count != self.size:
            return ValidationResult.reject(
                Reason.LINEUP_WRONG_SIZE,
                f"Select exactly {self.size} players (1 GK + {self.size - 1} field); got {count}.",
            )
        return ValidationResult()


class GoalkeeperCountRule(ValidationRule):
    """A lineup holds exactly one goalkeeper; unknown ids count as field players."""

    def __init__(self, goalkeepers: int = GOALKEEPERS_PER_LINEUP):
        self.goalkeepers = goalkeepers

    def validate(self, state: GameState, ids: Iterable[str]) -> ValidationResult:
        by_id = state.players_by_id()
        gk_count = sum(
            1 for pid in set(ids) if by_id.get(pid) is not None and by_id[pid].is_goalkeeper
        )
        if gk_count != self.goalkeepers:
            return ValidationResult.reject(
                Reason.LINEUP_WRONG_GK_COUNT, "Lineup must include exactly one GK."
            )
        return ValidationResult()


class SwimOffChoiceRule(ValidationRule):
    """The swim-off player is chosen and is one of the starters."""

    def validate(self, state: GameState, ids: Iterable[str], swim_off_id: Optional[str]) -> ValidationResult:
        if not swim_off_id:
            return ValidationResult.reject(
                Reason.SWIM_OFF_MISSING, "Select a swim-off player before starting."
            )
        if swim_off_id not in set(ids):
            return ValidationResult.reject(
                Reason.SWIM_OFF_NOT_STARTER, "Swim-off player must be one of the 7 starters."
            )
        return ValidationResult()


LINEUP_RULES = (LineupSizeRule(), GoalkeeperCountRule())


def validate_lineup(state: GameState, ids: Iterable[str]) -> ValidationResult:
    """Check the lineup rules in order and return the first violation."""
    ids = list(ids)
    for rule in LINEUP_RULES:
        result = rule.validate(state, ids)
        if not result:
            return result
    return ValidationResult()


def validate_starters(state: GameState, ids: Iterable[str], swim_off_id: Optional[str]) -> ValidationResult:
    """Lineup rules plus the swim-off choice, used when a game or period starts."""
    ids = list(ids)
    result = validate_lineup(state, ids)
    if not result:
        return result
    return SwimOffChoiceRule().validate(state, ids, swim_off_id)


# ----------------------------------------------------------------------
# Lifecycle guards
# ----------------------------------------------------------------------
def require_live(state: GameState) -> ValidationResult:
    """Game started, not ended and not between periods."""
    phase = state.phase
    if phase is LifecyclePhase.LIVE:
        return ValidationResult()
    if phase is LifecyclePhase.ENDED:
        return ValidationResult.reject(Reason.GAME_ENDED, "The game has ended.")
    if phase is LifecyclePhase.SETUP:
        return ValidationResult.reject(Reason.NOT_STARTED, "Start the game first.")
    return ValidationResult.reject(Reason.NOT_LIVE, "Start the next period first.")


def require_in_progress(state: GameState) -> ValidationResult:
    """Game started and not ended; between periods is allowed."""
    if state.game_ended:
        return ValidationResult.reject(Reason.GAME_ENDED, "The game has ended.")
    if not state.game_started:
        return ValidationResult.reject(Reason.NOT_STARTED, "Start the game first.")
    return ValidationResult()


def require_not_ended(state: GameState) -> ValidationResult:
    if state.game_ended:
        return ValidationResult.reject(Reason.GAME_ENDED, "The game has ended; start a new game.")
    return ValidationResult()

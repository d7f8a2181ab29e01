"""
Event log service for the Poolside scorekeeper.

The log is append-only apart from explicit operator corrections
(``update_event`` and ``remove_event``). It is the single source of truth
for every per-player offensive and defensive count.
"""
import logging
from typing import List, Optional

from ..models import EventType, GameEvent, GameState
from ..utils import fmt_clock
from .clock_service import ClockService
from .validation import Reason, ValidationResult, require_in_progress, require_live

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("player_id", "type", "period", "clock", "opp_scorer")


class EventLogService:
    """Service for recording and correcting per-player events."""

    def __init__(self, game_state: GameState, clock_service: Optional[ClockService] = None):
        self.game_state = game_state
        self.clock = clock_service or ClockService(game_state)

    def add_event(self, player_id: str, event_type, opp_scorer: Optional[str] = None) -> ValidationResult:
        """Record an event at the current period and display clock."""
        return self._append(player_id, event_type, self.game_state.period, self.game_state.clock, opp_scorer)

    def add_manual_event(
        self,
        player_id: str,
        event_type,
        clock_text: Optional[str] = None,
        period=None,
        opp_scorer: Optional[str] = None,
    ) -> ValidationResult:
        """
        Record an event with optional clock and period overrides.

        Omitted overrides default to the current clock and period. A clock
        override is parsed like any other clock entry.
        """
        clock = self.game_state.clock
        if clock_text not in (None, ""):
            seconds = self.clock.parse_target(clock_text)
            if seconds is None:
                return _bad_clock()
            clock = fmt_clock(seconds)

        event_period = self.game_state.period
        if period not in (None, ""):
            event_period = _parse_period(period)
            if event_period is None:
                return _bad_period()

        return self._append(player_id, event_type, event_period, clock, opp_scorer)

    def update_event(self, event_id: str, **fields) -> ValidationResult:
        """
        Merge ``fields`` into an existing event.

        Every value is checked before anything is written, using the same
        rules as a manual entry, so a corrected event always survives a
        snapshot reload. Unknown field names are ignored, and a scorer is
        only kept while the event is a goal against.
        """
        guard = require_in_progress(self.game_state)
        if not guard:
            return guard
        event = self.get_event(event_id)
        if event is None:
            return ValidationResult.reject(Reason.UNKNOWN_EVENT, "Event not found.")

        ignored = sorted(set(fields) - set(EDITABLE_FIELDS))
        if ignored:
            logger.debug("Ignoring unknown event fields: %s", ignored)

        changes = {}
        if "type" in fields:
            parsed = EventType.parse(fields["type"])
            if parsed is None:
                return ValidationResult.reject(Reason.UNKNOWN_EVENT_TYPE, f"Unknown event type: {fields['type']}")
            changes["type"] = parsed
        if "player_id" in fields:
            player = self.game_state.player(fields["player_id"])
            if player is None:
                return ValidationResult.reject(Reason.UNKNOWN_PLAYER, "Player not found.")
            changes["player_id"] = player.id
        if "period" in fields:
            period = _parse_period(fields["period"])
            if period is None:
                return _bad_period()
            changes["period"] = period
        if "clock" in fields:
            seconds = self.clock.parse_target(fields["clock"])
            if seconds is None:
                return _bad_clock()
            changes["clock"] = fmt_clock(seconds)
        if "opp_scorer" in fields:
            scorer = fields["opp_scorer"]
            if scorer is not None:
                scorer = str(scorer).strip() or None
            changes["opp_scorer"] = scorer

        for name, value in changes.items():
            setattr(event, name, value)
        if event.type is not EventType.GOAL_AGAINST:
            event.opp_scorer = None
        return ValidationResult.ok(event)

    def remove_event(self, event_id: str) -> ValidationResult:
        guard = require_in_progress(self.game_state)
        if not guard:
            return guard
        before = len(self.game_state.log)
        self.game_state.log = [e for e in self.game_state.log if e.id != event_id]
        if len(self.game_state.log) == before:
            return ValidationResult.reject(Reason.UNKNOWN_EVENT, "Event not found.")
        return ValidationResult.ok()

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    def get_event(self, event_id: str) -> Optional[GameEvent]:
        for event in self.game_state.log:
            if event.id == event_id:
                return event
        return None

    def events_for_player(self, player_id: str) -> List[GameEvent]:
        return [e for e in self.game_state.log if e.player_id == player_id]

    def recent(self, limit: int = 10) -> List[GameEvent]:
        """Newest events first."""
        return list(reversed(self.game_state.log))[:limit]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _append(self, player_id, event_type, period: int, clock: str, opp_scorer) -> ValidationResult:
        guard = require_live(self.game_state)
        if not guard:
            return guard

        kind = EventType.parse(event_type)
        if kind is None:
            return ValidationResult.reject(Reason.UNKNOWN_EVENT_TYPE, f"Unknown event type: {event_type}")
        player = self.game_state.player(player_id)
        if player is None:
            return ValidationResult.reject(Reason.UNKNOWN_PLAYER, "Player not found.")

        event = GameEvent(
            player_id=player.id,
            type=kind,
            period=period,
            clock=clock,
            opp_scorer=opp_scorer,
        )
        self.game_state.log.append(event)
        logger.info("P%s %s %s: %s", period, clock, player.label(), kind.label)
        return ValidationResult.ok(event)


def _parse_period(value) -> Optional[int]:
    """Period number typed by the operator, None unless it is 1 or more."""
    try:
        period = int(value)
    except (TypeError, ValueError):
        return None
    return period if period >= 1 else None


def _bad_period() -> ValidationResult:
    return ValidationResult.reject(Reason.INVALID_NUMBER, "Period must be 1 or more.")


def _bad_clock() -> ValidationResult:
    return ValidationResult.reject(Reason.INVALID_CLOCK, "Please enter time as MM:SS (e.g., 6:45).")

"""
Event models for the Poolside water polo scorekeeper.

Events form the append-only game log that every per-player statistic is
derived from. Timeout usage is logged separately as :class:`TimeoutEntry`.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .player import new_id
from ..utils import now_ts, parse_clock


class EventType(Enum):
    """Closed set of per-player actions the operator can record."""
    GOAL = "goal"
    ATTEMPT = "attempt"
    ASSIST = "assist"
    STEAL = "steal"
    TURNOVER = "turnover"
    EXCLUSION = "exclusion"
    FORCED_EXCLUSION = "forced_exclusion"
    BLOCK = "block"
    SAVE = "save"
    GOAL_AGAINST = "goal_against"
    PENALTY_BLOCK = "penalty_block"

    @property
    def label(self) -> str:
        return EVENT_LABELS[self]

    @classmethod
    def parse(cls, value: Any) -> Optional["EventType"]:
        """Return the matching event type, or None for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return None


EVENT_LABELS = {
    EventType.GOAL: "Goal",
    EventType.ATTEMPT: "Attempt",
    EventType.ASSIST: "Assist",
    EventType.STEAL: "Steal",
    EventType.TURNOVER: "Turnover",
    EventType.EXCLUSION: "Exclusion",
    EventType.FORCED_EXCLUSION: "Forced Excl",
    EventType.BLOCK: "Block",
    EventType.SAVE: "Save",
    EventType.GOAL_AGAINST: "Goal Against",
    EventType.PENALTY_BLOCK: "Penalty Block",
}

# Quick-entry buttons offered per position
FIELD_ACTIONS = (
    EventType.GOAL, EventType.ATTEMPT, EventType.ASSIST, EventType.STEAL,
    EventType.TURNOVER, EventType.EXCLUSION, EventType.FORCED_EXCLUSION, EventType.BLOCK,
)
GOALIE_ACTIONS = (
    EventType.SAVE, EventType.GOAL_AGAINST, EventType.PENALTY_BLOCK, EventType.ASSIST,
    EventType.STEAL, EventType.TURNOVER, EventType.EXCLUSION, EventType.FORCED_EXCLUSION,
)


@dataclass
class GameEvent:
    """
    A single timestamped action credited to one player.

    Attributes:
        player_id: Roster id of the player (weak reference)
        type: What happened
        period: Period number the event belongs to
        clock: Display clock (time remaining) when it happened
        opp_scorer: Opposing scorer's cap number; only kept for goals against
        ts: Wall-clock time the event was recorded (epoch seconds)
        id: Opaque unique identifier
    """
    player_id: str
    type: EventType
    period: int
    clock: str
    opp_scorer: Optional[str] = None
    ts: float = field(default_factory=now_ts)
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        if not isinstance(self.type, EventType):
            parsed = EventType.parse(self.type)
            if parsed is None:
                raise ValueError(f"Unknown event type: {self.type!r}")
            self.type = parsed
        if self.type is not EventType.GOAL_AGAINST:
            self.opp_scorer = None
        elif self.opp_scorer is not None:
            self.opp_scorer = str(self.opp_scorer).strip() or None

    @property
    def clock_seconds(self) -> Optional[int]:
        return parse_clock(self.clock)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "ts": self.ts,
            "period": self.period,
            "clock": self.clock,
            "player_id": self.player_id,
            "type": self.type.value,
        }
        if self.opp_scorer:
            data["opp_scorer"] = self.opp_scorer
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameEvent":
        return cls(
            id=str(data.get("id") or new_id()),
            ts=float(data.get("ts") or 0),
            period=int(data.get("period") or 1),
            clock=str(data.get("clock") or "0:00"),
            player_id=str(data.get("player_id") or data.get("playerId") or ""),
            type=data.get("type"),
            opp_scorer=data.get("opp_scorer", data.get("oppScorer")),
        )


@dataclass(frozen=True)
class TimeoutEntry:
    """Immutable record of a timeout being called."""
    team: str
    type: str
    period: int
    clock: str
    ts: float = field(default_factory=now_ts)
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "ts": self.ts,
            "period": self.period,
            "clock": self.clock,
            "team": self.team,
            "type": self.type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimeoutEntry":
        return cls(
            id=str(data.get("id") or new_id()),
            ts=float(data.get("ts") or 0),
            period=int(data.get("period") or 1),
            clock=str(data.get("clock") or "0:00"),
            team=str(data.get("team") or ""),
            type=str(data.get("type") or ""),
        )

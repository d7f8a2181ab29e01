"""
GameState model for the Poolside water polo scorekeeper.

This module contains the GameState dataclass, the single aggregate root that
every service mutates, together with the small team-level records it owns
(team situational stats, situations, timeouts and the swim-off record).
"""
from dataclasses import dataclass, field, fields, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from .player import Player
from .event import GameEvent, TimeoutEntry
from ..utils import fmt_clock
from ..utils.constants import (
    DEFAULT_PERIOD_LENGTH_MIN, DEFAULT_ROSTER, DEFAULT_TIMEOUTS, SNAPSHOT_VERSION,
    TEAM_US, TEAM_THEM, SWIM_WINNERS,
)


class LifecyclePhase(Enum):
    """Coarse game lifecycle derived from the game state flags."""
    SETUP = "setup"
    LIVE = "live"
    BETWEEN_PERIODS = "between_periods"
    ENDED = "ended"


def _clamped_counts(cls, data: Optional[Dict[str, Any]]):
    """Build a counter dataclass from a dict, ignoring junk and negatives."""
    values = {}
    for f in fields(cls):
        try:
            values[f.name] = max(0, int((data or {}).get(f.name, f.default)))
        except (TypeError, ValueError):
            values[f.name] = 0
    return cls(**values)


@dataclass
class ManUpStats:
    """Offense 6 on 5."""
    attempts: int = 0
    goals: int = 0
    stops: int = 0


@dataclass
class ManDownStats:
    """Defense 5 on 6."""
    defenses: int = 0
    stops: int = 0
    goals_against: int = 0


@dataclass
class PenaltyForStats:
    attempts: int = 0
    goals: int = 0
    misses: int = 0


@dataclass
class PenaltyAgainstStats:
    attempts: int = 0
    saves: int = 0
    goals_against: int = 0


@dataclass
class TeamStats:
    """Team situational counters; every counter is clamped at zero."""
    man_up: ManUpStats = field(default_factory=ManUpStats)
    man_down: ManDownStats = field(default_factory=ManDownStats)
    pen_for: PenaltyForStats = field(default_factory=PenaltyForStats)
    pen_against: PenaltyAgainstStats = field(default_factory=PenaltyAgainstStats)

    SECTIONS = ("man_up", "man_down", "pen_for", "pen_against")

    def section(self, name: str):
        if name not in self.SECTIONS:
            raise KeyError(f"Unknown team stat section: {name}")
        return getattr(self, name)

    def get(self, section: str, key: str) -> int:
        return getattr(self.section(section), key)

    def adjust(self, section: str, key: str, delta: int) -> int:
        """
        Add ``delta`` to one counter, never going below zero.

        Raises:
            KeyError: If the section or counter does not exist
        """
        target = self.section(section)
        if key not in {f.name for f in fields(target)}:
            raise KeyError(f"Unknown counter {key!r} in {section}")
        value = max(0, getattr(target, key) + int(delta))
        setattr(target, key, value)
        return value

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        return {name: asdict(getattr(self, name)) for name in self.SECTIONS}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TeamStats":
        data = data or {}
        return cls(
            man_up=_clamped_counts(ManUpStats, data.get("man_up")),
            man_down=_clamped_counts(ManDownStats, data.get("man_down")),
            pen_for=_clamped_counts(PenaltyForStats, data.get("pen_for")),
            pen_against=_clamped_counts(PenaltyAgainstStats, data.get("pen_against")),
        )


@dataclass
class Situations:
    """In-progress flags; man up and man down are independent."""
    man_up: bool = False
    man_down: bool = False


@dataclass
class TeamTimeouts:
    short: int = DEFAULT_TIMEOUTS["short"]
    full: int = DEFAULT_TIMEOUTS["full"]


@dataclass
class Timeouts:
    """Remaining timeouts per team."""
    msu: TeamTimeouts = field(default_factory=TeamTimeouts)
    opp: TeamTimeouts = field(default_factory=TeamTimeouts)

    def for_team(self, team: str) -> TeamTimeouts:
        if team not in (TEAM_US, TEAM_THEM):
            raise KeyError(f"Unknown team: {team}")
        return getattr(self, team)

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        return {TEAM_US: asdict(self.msu), TEAM_THEM: asdict(self.opp)}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Timeouts":
        data = data or {}
        return cls(
            msu=_clamped_counts(TeamTimeouts, data.get(TEAM_US, asdict(TeamTimeouts()))),
            opp=_clamped_counts(TeamTimeouts, data.get(TEAM_THEM, asdict(TeamTimeouts()))),
        )


@dataclass
class SwimOffRecord:
    """Swim-off assignment and outcome for one period."""
    period: Optional[int] = None
    player_id: Optional[str] = None
    winner: Optional[str] = None

    def is_open_for(self, period: int) -> bool:
        return self.period == period and bool(self.player_id)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SwimOffRecord":
        data = data or {}
        winner = data.get("winner")
        return cls(
            period=data.get("period"),
            player_id=data.get("player_id") or None,
            winner=winner if winner in SWIM_WINNERS else None,
        )


def default_roster() -> List[Player]:
    """Roster used on first launch."""
    return [Player(number=n, name=name, position=pos) for n, name, pos in DEFAULT_ROSTER]


@dataclass
class GameState:
    """
    Represents the complete state of one water polo game.

    Attributes:
        roster: Ordered list of known players (persists across games)
        opponent: Opponent name
        period: Current period number (1-based)
        period_length_sec: Configured period length in seconds
        game_started: Whether the game has been started
        game_ended: Whether the game has been ended (terminal)
        between_periods: Whether play is paused between two periods
        clock: Display clock (time remaining in the period)
        last_event_sec: Latest time remaining confirmed by an event or clock edit
        log: Per-player event log in insertion order
        active_ids: Ids of the players currently in the pool
        time_played: Accumulated seconds per player id
        swim_wins: Swim-off wins per player id
        swim_losses: Swim-off losses per player id
        swim_off: Swim-off record for the current period
        starter_selection: Starters picked for the next game or period start
        swim_off_selection: Swim-off player picked for the next start
        team_stats: Team situational counters
        situations: Man up / man down in-progress flags
        timeouts: Remaining timeouts per team
        timeout_log: Timeouts used, in order
        notes: Free-text game notes
    """
    roster: List[Player] = field(default_factory=list)
    opponent: str = ""
    period: int = 1
    period_length_sec: int = DEFAULT_PERIOD_LENGTH_MIN * 60
    game_started: bool = False
    game_ended: bool = False
    between_periods: bool = False
    clock: str = ""
    last_event_sec: Optional[int] = None
    log: List[GameEvent] = field(default_factory=list)
    active_ids: List[str] = field(default_factory=list)
    time_played: Dict[str, int] = field(default_factory=dict)
    swim_wins: Dict[str, int] = field(default_factory=dict)
    swim_losses: Dict[str, int] = field(default_factory=dict)
    swim_off: SwimOffRecord = field(default_factory=SwimOffRecord)
    starter_selection: Set[str] = field(default_factory=set)
    swim_off_selection: Optional[str] = None
    team_stats: TeamStats = field(default_factory=TeamStats)
    situations: Situations = field(default_factory=Situations)
    timeouts: Timeouts = field(default_factory=Timeouts)
    timeout_log: List[TimeoutEntry] = field(default_factory=list)
    notes: str = ""

    def __post_init__(self) -> None:
        if self.last_event_sec is None:
            self.last_event_sec = self.period_length_sec
        if not self.clock:
            self.clock = fmt_clock(self.last_event_sec)

    @classmethod
    def fresh(cls) -> "GameState":
        """A brand new state carrying the default roster."""
        return cls(roster=default_roster())

    # ------------------------------------------------------------------
    # Lifecycle helpers
    # ------------------------------------------------------------------
    @property
    def phase(self) -> LifecyclePhase:
        if self.game_ended:
            return LifecyclePhase.ENDED
        if not self.game_started:
            return LifecyclePhase.SETUP
        if self.between_periods:
            return LifecyclePhase.BETWEEN_PERIODS
        return LifecyclePhase.LIVE

    # ------------------------------------------------------------------
    # Roster lookups
    # ------------------------------------------------------------------
    def player(self, player_id: Optional[str]) -> Optional[Player]:
        """Return the roster entry for ``player_id`` or None if it is gone."""
        for p in self.roster:
            if p.id == player_id:
                return p
        return None

    def players_by_id(self) -> Dict[str, Player]:
        return {p.id: p for p in self.roster}

    def active_players(self) -> List[Player]:
        return [p for p in self.roster if p.id in self.active_ids]

    def bench_players(self) -> List[Player]:
        return [p for p in self.roster if p.id not in self.active_ids]

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_json(self) -> dict:
        """
        Convert GameState to JSON-serializable dictionary.

        Returns:
            Versioned snapshot suitable for JSON serialization
        """
        return {
            "version": SNAPSHOT_VERSION,
            "opponent": self.opponent,
            "period": self.period,
            "period_length_sec": self.period_length_sec,
            "game_started": self.game_started,
            "game_ended": self.game_ended,
            "between_periods": self.between_periods,
            "clock": self.clock,
            "last_event_sec": self.last_event_sec,
            "roster": [p.to_dict() for p in self.roster],
            "log": [e.to_dict() for e in self.log],
            "active_ids": list(self.active_ids),
            "time_played": dict(self.time_played),
            "swim_wins": dict(self.swim_wins),
            "swim_losses": dict(self.swim_losses),
            "swim_off": asdict(self.swim_off),
            "setup_starters": sorted(self.starter_selection),
            "setup_swim_off_id": self.swim_off_selection,
            "team_stats": self.team_stats.to_dict(),
            "situations": asdict(self.situations),
            "timeouts": self.timeouts.to_dict(),
            "timeout_log": [t.to_dict() for t in self.timeout_log],
            "notes": self.notes,
        }

    @staticmethod
    def from_json(data: dict) -> "GameState":
        """
        Create GameState from a snapshot dictionary.

        Unknown or missing keys fall back to their defaults; malformed
        entries in the roster, log or timeout log are skipped.

        Args:
            data: Dictionary with game state data

        Returns:
            New GameState instance
        """
        period_length = int(data.get("period_length_sec") or DEFAULT_PERIOD_LENGTH_MIN * 60)
        gs = GameState(period_length_sec=max(60, period_length))

        if "roster" in data:
            gs.roster = _load_items(Player.from_dict, data.get("roster"))
        else:
            gs.roster = default_roster()
        gs.opponent = str(data.get("opponent") or "")
        gs.period = max(1, int(data.get("period") or 1))
        gs.game_started = bool(data.get("game_started", False))
        gs.game_ended = bool(data.get("game_ended", False))
        gs.between_periods = bool(data.get("between_periods", False))

        last = data.get("last_event_sec")
        gs.last_event_sec = int(last) if last is not None else gs.period_length_sec
        gs.clock = str(data.get("clock") or fmt_clock(gs.last_event_sec))

        gs.log = _load_items(GameEvent.from_dict, data.get("log"))
        gs.active_ids = [str(i) for i in data.get("active_ids") or []]
        gs.time_played = _int_map(data.get("time_played"))
        gs.swim_wins = _int_map(data.get("swim_wins"))
        gs.swim_losses = _int_map(data.get("swim_losses"))
        gs.swim_off = SwimOffRecord.from_dict(data.get("swim_off"))
        gs.starter_selection = {str(i) for i in data.get("setup_starters") or []}
        gs.swim_off_selection = data.get("setup_swim_off_id") or None
        gs.team_stats = TeamStats.from_dict(data.get("team_stats"))
        situations = data.get("situations") or {}
        gs.situations = Situations(
            man_up=bool(situations.get("man_up", False)),
            man_down=bool(situations.get("man_down", False)),
        )
        gs.timeouts = Timeouts.from_dict(data.get("timeouts"))
        gs.timeout_log = _load_items(TimeoutEntry.from_dict, data.get("timeout_log"))
        gs.notes = str(data.get("notes") or "")
        return gs


def _load_items(factory, raw) -> list:
    items = []
    for entry in raw or []:
        try:
            items.append(factory(entry))
        except (AttributeError, TypeError, ValueError):
            continue  # malformed entry, skip
    return items


def _int_map(raw) -> Dict[str, int]:
    result = {}
    for key, value in (raw or {}).items():
        try:
            result[str(key)] = int(value)
        except (TypeError, ValueError):
            continue
    return result

"""Dataclasses representing derived box-score rows."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .player import Position


@dataclass
class PlayerBoxScore:
    """Per-player statistics folded from the event log."""

    player_id: str
    number: int
    name: str
    position: Position
    active: bool = False
    time_played_sec: int = 0
    swim_wins: int = 0
    swim_losses: int = 0
    goals: int = 0
    attempts: int = 0
    shot_pct: str = "0.0%"
    assists: int = 0
    steals: int = 0
    turnovers: int = 0
    exclusions: int = 0
    forced_exclusions: int = 0
    blocks: int = 0
    saves: int = 0
    goals_against: int = 0
    penalty_blocks: int = 0
    save_pct: str = "0.0%"

    @property
    def is_goalkeeper(self) -> bool:
        return self.position is Position.GK

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["position"] = self.position.value
        return data


@dataclass
class GoalsAgainstEntry:
    """Goals conceded to one opposing cap number."""

    scorer: str
    goals: int
    number: Optional[int] = None

"""
Player model for the Poolside water polo scorekeeper.

This module contains the Player dataclass which represents a roster entry
and the Position enumeration used to tell goalkeepers from field players.
"""
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from ..utils.constants import GOALKEEPER_ALIASES


class Position(Enum):
    """Playing position in the pool."""
    GK = "GK"
    FP = "FP"

    @classmethod
    def normalize(cls, value: Any) -> "Position":
        """
        Normalize free text into a position.

        ``gk``, ``goalkeeper``, ``keeper`` and ``goalie`` (any case) map to
        :attr:`GK`; everything else, including blank text, is a field player.
        """
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        if text in GOALKEEPER_ALIASES:
            return cls.GK
        return cls.FP


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


@dataclass
class Player:
    """
    Represents a water polo player on the roster.

    Attributes:
        number: Jersey number (merge key for CSV imports, not guaranteed unique)
        name: Display name
        position: Goalkeeper or field player
        id: Opaque unique identifier referenced by events and the lineup
    """
    number: int
    name: str
    position: Position = Position.FP
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        self.position = Position.normalize(self.position)

    @property
    def is_goalkeeper(self) -> bool:
        return self.position is Position.GK

    def label(self) -> str:
        """Short label used in messages, e.g. ``#7 Smith``."""
        return f"#{self.number} {self.name}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert player to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "number": self.number,
            "name": self.name,
            "position": self.position.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        """Create player from dictionary for JSON deserialization."""
        try:
            number = int(data.get("number", 0))
        except (TypeError, ValueError):
            number = 0
        return cls(
            id=str(data.get("id") or new_id()),
            number=number,
            name=str(data.get("name", "")),
            position=Position.normalize(data.get("position", data.get("pos"))),
        )

"""
Models package for the Poolside scorekeeper.

This package contains the core data models used throughout the application.
"""
from .player import Player, Position
from .event import EventType, GameEvent, TimeoutEntry, FIELD_ACTIONS, GOALIE_ACTIONS
from .game_state import (
    GameState, LifecyclePhase, TeamStats, Situations, Timeouts, TeamTimeouts, SwimOffRecord
)
from .box_score import PlayerBoxScore, GoalsAgainstEntry

__all__ = [
    "Player", "Position", "EventType", "GameEvent", "TimeoutEntry",
    "FIELD_ACTIONS", "GOALIE_ACTIONS",
    "GameState", "LifecyclePhase", "TeamStats", "Situations", "Timeouts",
    "TeamTimeouts", "SwimOffRecord", "PlayerBoxScore", "GoalsAgainstEntry"
]

"""
Services package for the Poolside scorekeeper.

This package contains service classes that handle business logic. The
factory wires them around one game state; the session drives the game
lifecycle on top of them.
"""
from .validation import Reason, ValidationResult
from .persistence_service import PersistenceService
from .clock_service import ClockService
from .roster_service import (
    RosterService, PlayerValidator, RosterCSVHandler, PlayerValidationError,
    RosterImportError, ImportMode
)
from .lineup_service import LineupService, PendingSubstitution
from .event_log_service import EventLogService
from .situation_service import SituationService
from .swim_off_service import SwimOffService
from .stats_service import StatsAggregator, BoxScoreExporter, export_filename
from .service_factory import ServiceFactory
from .game_session import GameSession, OperatorPrompts, DeclinePrompts, StaticPrompts

__all__ = [
    "Reason", "ValidationResult", "PersistenceService", "ClockService",
    "RosterService", "PlayerValidator", "RosterCSVHandler", "PlayerValidationError",
    "RosterImportError", "ImportMode", "LineupService", "PendingSubstitution",
    "EventLogService", "SituationService", "SwimOffService",
    "StatsAggregator", "BoxScoreExporter", "export_filename",
    "ServiceFactory", "GameSession", "OperatorPrompts", "DeclinePrompts", "StaticPrompts"
]

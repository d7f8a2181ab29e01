"""
Service factory for wiring services around a single game state.

Every service receives the same :class:`GameState` instance and the clock
service is shared, so lineup, event log and clock always agree on time.
"""
from typing import Optional

from ..models import GameState
from ..utils.constants import DEFAULT_STATE_FILE
from .clock_service import ClockService
from .event_log_service import EventLogService
from .lineup_service import LineupService
from .persistence_service import PersistenceService
from .roster_service import PlayerValidator, RosterCSVHandler, RosterService
from .situation_service import SituationService
from .stats_service import BoxScoreExporter, ExportServiceInterface, StatsAggregator
from .swim_off_service import SwimOffService


class ServiceFactory:
    """
    Factory for creating service instances with their dependencies injected.
    """

    def __init__(self):
        self._validator: Optional[PlayerValidator] = None
        self._csv_handler: Optional[RosterCSVHandler] = None
        self._exporter: Optional[ExportServiceInterface] = None

    def create_persistence_service(self, file_path: Optional[str] = DEFAULT_STATE_FILE) -> PersistenceService:
        return PersistenceService(file_path)

    def create_roster_service(self, game_state: GameState) -> RosterService:
        return RosterService(
            game_state,
            validator=self._get_validator(),
            csv_handler=self._get_csv_handler(),
        )

    def create_service_suite(self, game_state: GameState) -> dict:
        """
        Create a complete suite of services sharing ``game_state``.

        Returns:
            Dictionary containing all configured services
        """
        clock = ClockService(game_state)
        return {
            "clock": clock,
            "roster": self.create_roster_service(game_state),
            "lineup": LineupService(game_state, clock),
            "events": EventLogService(game_state, clock),
            "situations": SituationService(game_state),
            "swim_off": SwimOffService(game_state),
            "stats": StatsAggregator(game_state),
            "exporter": self._get_exporter(),
        }

    def _get_validator(self) -> PlayerValidator:
        if self._validator is None:
            self._validator = PlayerValidator()
        return self._validator

    def _get_csv_handler(self) -> RosterCSVHandler:
        if self._csv_handler is None:
            self._csv_handler = RosterCSVHandler()
        return self._csv_handler

    def _get_exporter(self) -> ExportServiceInterface:
        if self._exporter is None:
            self._exporter = BoxScoreExporter()
        return self._exporter

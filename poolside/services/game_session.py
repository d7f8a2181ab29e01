"""
Game lifecycle for the Poolside scorekeeper.

:class:`GameSession` is the one entry point operator surfaces talk to. It
owns the :class:`GameState`, wires the services around it, checks the
lifecycle phase before every transition and saves a snapshot after every
accepted change.

Phases::

    SETUP --start_game--> LIVE --end_period--> BETWEEN_PERIODS
                           ^                        |
                           +-----start_period-------+
    LIVE / BETWEEN_PERIODS --end_game--> ENDED
    any phase --new_game (confirmed)--> SETUP
"""
import datetime as dt
import logging
from typing import Iterable, List, Optional, Protocol

from ..models import EventType, GameState, LifecyclePhase, Player, SwimOffRecord
from ..models.game_state import Situations, TeamStats, Timeouts, default_roster
from .persistence_service import PersistenceService
from .roster_service import ImportMode, PlayerValidationError, RosterImportError
from .service_factory import ServiceFactory
from .stats_service import export_filename
from .validation import (
    Reason, ValidationResult, require_in_progress, require_live, require_not_ended,
    validate_starters,
)

logger = logging.getLogger(__name__)

NEW_GAME_PROMPT = "Start a new game? This clears the event log and all game stats."
SUB_TIME_PROMPT = "Substitution time (MM:SS remaining):"
SCORER_PROMPT = "Enter opposing player number (leave blank if unknown):"


class OperatorPrompts(Protocol):
    """Questions the session may need to ask the operator."""

    def confirm(self, message: str) -> bool:
        ...

    def prompt_text(self, message: str, default: Optional[str] = None) -> Optional[str]:
        ...


class DeclinePrompts:
    """Answers no to everything; used when nobody is there to ask."""

    def confirm(self, message: str) -> bool:
        return False

    def prompt_text(self, message: str, default: Optional[str] = None) -> Optional[str]:
        return None


class StaticPrompts:
    """Gives the same canned answers every time (API calls and tests)."""

    def __init__(self, confirm: bool = True, text: Optional[str] = None):
        self._confirm = confirm
        self._text = text

    def confirm(self, message: str) -> bool:
        return self._confirm

    def prompt_text(self, message: str, default: Optional[str] = None) -> Optional[str]:
        return self._text if self._text is not None else default


class GameSession:
    """
    Operator commands for one game.

    Every command returns a :class:`ValidationResult`; a rejected command
    leaves the state exactly as it was.
    """

    def __init__(
        self,
        state: Optional[GameState] = None,
        persistence: Optional[PersistenceService] = None,
        prompts: Optional[OperatorPrompts] = None,
        factory: Optional[ServiceFactory] = None,
    ):
        self.persistence = persistence
        self.prompts = prompts or DeclinePrompts()
        self.factory = factory or ServiceFactory()
        if state is None:
            state = persistence.load() if persistence is not None else GameState.fresh()
        self._bind(state)

    def _bind(self, state: GameState) -> None:
        self.state = state
        services = self.factory.create_service_suite(state)
        self.clock = services["clock"]
        self.roster = services["roster"]
        self.lineup = services["lineup"]
        self.events = services["events"]
        self.situations = services["situations"]
        self.swim_off = services["swim_off"]
        self.stats = services["stats"]
        self.exporter = services["exporter"]

    @property
    def phase(self) -> LifecyclePhase:
        return self.state.phase

    def _commit(self, result: ValidationResult) -> ValidationResult:
        if result:
            if self.persistence is not None:
                self.persistence.save(self.state)
        else:
            logger.info("Rejected (%s): %s", result.reason, result.message)
        return result

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------
    def set_opponent(self, name: str) -> ValidationResult:
        guard = require_not_ended(self.state)
        if not guard:
            return self._commit(guard)
        self.state.opponent = str(name or "").strip()
        return self._commit(ValidationResult.ok(self.state.opponent))

    def set_notes(self, text: str) -> ValidationResult:
        self.state.notes = str(text or "")
        return self._commit(ValidationResult.ok())

    def set_period_minutes(self, minutes) -> ValidationResult:
        """Change the period length; only before the game starts."""
        if self.phase is not LifecyclePhase.SETUP:
            return self._commit(self._not_in_setup())
        result = self.clock.validate_period_minutes(minutes)
        if result:
            self.state.period_length_sec = result.value
            self.clock.reset_to_full_period()
        return self._commit(result)

    def toggle_starter(self, player_id: str) -> ValidationResult:
        """Add or remove a player from the starters picked for the next start."""
        guard = self._selection_guard(player_id)
        if not guard:
            return self._commit(guard)
        selection = self.state.starter_selection
        if player_id in selection:
            selection.discard(player_id)
            if self.state.swim_off_selection == player_id:
                self.state.swim_off_selection = None
            return self._commit(ValidationResult.ok(False))
        selection.add(player_id)
        return self._commit(ValidationResult.ok(True))

    def select_swim_off(self, player_id: str) -> ValidationResult:
        """Pick the swim-off player; picking the same player again clears it."""
        guard = self._selection_guard(player_id)
        if not guard:
            return self._commit(guard)
        if self.state.swim_off_selection == player_id:
            self.state.swim_off_selection = None
        else:
            self.state.swim_off_selection = player_id
        return self._commit(ValidationResult.ok(self.state.swim_off_selection))

    def _selection_guard(self, player_id: str) -> ValidationResult:
        if self.phase not in (LifecyclePhase.SETUP, LifecyclePhase.BETWEEN_PERIODS):
            return ValidationResult.reject(
                Reason.NOT_BETWEEN_PERIODS, "Starters are picked before the game or between periods."
            )
        if self.state.player(player_id) is None:
            return ValidationResult.reject(Reason.UNKNOWN_PLAYER, "Player not found.")
        return ValidationResult()

    # ------------------------------------------------------------------
    # Roster
    # ------------------------------------------------------------------
    def add_player(self, number=0, name: str = "New", position="FP") -> ValidationResult:
        guard = require_not_ended(self.state)
        if not guard:
            return self._commit(guard)
        try:
            player = self.roster.add_player(number, name, position)
        except PlayerValidationError as e:
            return self._commit(ValidationResult.reject(Reason.INVALID_PLAYER, str(e)))
        return self._commit(ValidationResult.ok(player))

    def update_player(self, player_id: str, number=None, name=None, position=None) -> ValidationResult:
        guard = require_not_ended(self.state)
        if not guard:
            return self._commit(guard)
        try:
            player = self.roster.update_player(player_id, number=number, name=name, position=position)
        except KeyError:
            return self._commit(ValidationResult.reject(Reason.UNKNOWN_PLAYER, "Player not found."))
        except PlayerValidationError as e:
            return self._commit(ValidationResult.reject(Reason.INVALID_PLAYER, str(e)))
        return self._commit(ValidationResult.ok(player))

    def remove_player(self, player_id: str) -> ValidationResult:
        """Remove a player along with their events, minutes and selections."""
        guard = require_not_ended(self.state)
        if not guard:
            return self._commit(guard)
        if not self.roster.remove_player(player_id):
            return self._commit(ValidationResult.reject(Reason.UNKNOWN_PLAYER, "Player not found."))
        self.lineup.forget_player(player_id)
        return self._commit(ValidationResult.ok())

    def import_roster(self, text: str, mode=ImportMode.MERGE) -> ValidationResult:
        guard = require_not_ended(self.state)
        if not guard:
            return self._commit(guard)
        try:
            roster = self.roster.import_csv(text, ImportMode(mode))
        except RosterImportError as e:
            return self._commit(ValidationResult.reject(Reason.IMPORT_FAILED, str(e)))
        except ValueError:
            return self._commit(ValidationResult.reject(Reason.IMPORT_FAILED, f"Unknown import mode: {mode}"))
        return self._commit(ValidationResult.ok(list(roster)))

    def export_roster(self) -> str:
        return self.roster.export_csv()

    # ------------------------------------------------------------------
    # Lifecycle transitions
    # ------------------------------------------------------------------
    def start_game(self, minutes=None, starter_ids: Optional[Iterable[str]] = None,
                   swim_off_id: Optional[str] = None) -> ValidationResult:
        """
        SETUP -> LIVE.

        Starters and swim-off player default to the current selection. On
        success team stats, situations and timeouts start from zero and the
        clock shows a full period 1.
        """
        state = self.state
        if self.phase is not LifecyclePhase.SETUP:
            return self._commit(self._not_in_setup())

        period_length = state.period_length_sec
        if minutes is not None:
            length = self.clock.validate_period_minutes(minutes)
            if not length:
                return self._commit(length)
            period_length = length.value

        starters, swim_off_id = self._starters(starter_ids, swim_off_id)
        check = validate_starters(state, starters, swim_off_id)
        if not check:
            return self._commit(check)

        state.period_length_sec = period_length
        state.period = 1
        self.lineup.seat_starters(starters)
        state.game_started = True
        state.game_ended = False
        state.between_periods = False
        state.team_stats = TeamStats()
        state.situations = Situations()
        state.timeouts = Timeouts()
        state.timeout_log = []
        state.swim_off = SwimOffRecord(period=1, player_id=swim_off_id)
        self._clear_selection()
        logger.info("Game started vs %s, %s per period", state.opponent or "opponent", state.clock)
        return self._commit(ValidationResult.ok(list(state.active_ids)))

    def end_period(self) -> ValidationResult:
        """LIVE -> BETWEEN_PERIODS, crediting the rest of the period."""
        guard = require_live(self.state)
        if not guard:
            return self._commit(guard)
        credited = self.lineup.close_period()
        self.state.between_periods = True
        self.state.swim_off = SwimOffRecord()
        logger.info("End of period %s", self.state.period)
        return self._commit(ValidationResult.ok(credited))

    def start_period(self, starter_ids: Optional[Iterable[str]] = None,
                     swim_off_id: Optional[str] = None) -> ValidationResult:
        """BETWEEN_PERIODS -> LIVE with the next period number."""
        state = self.state
        if self.phase is not LifecyclePhase.BETWEEN_PERIODS:
            guard = require_not_ended(state)
            if not guard:
                return self._commit(guard)
            return self._commit(ValidationResult.reject(
                Reason.NOT_BETWEEN_PERIODS, "End the current period first."
            ))

        starters, swim_off_id = self._starters(starter_ids, swim_off_id)
        check = validate_starters(state, starters, swim_off_id)
        if not check:
            return self._commit(check)

        state.period += 1
        self.lineup.seat_starters(starters)
        state.swim_off = SwimOffRecord(period=state.period, player_id=swim_off_id)
        state.between_periods = False
        self._clear_selection()
        logger.info("Period %s started", state.period)
        return self._commit(ValidationResult.ok(state.period))

    def end_game(self) -> ValidationResult:
        """
        End the game for good.

        From LIVE the remaining time is credited exactly like the end of a
        period; between periods it was already credited.
        """
        state = self.state
        guard = require_in_progress(state)
        if not guard:
            return self._commit(guard)
        credited = 0
        if not state.between_periods:
            credited = self.lineup.close_period()
        self.clock.zero()
        state.active_ids = []
        self.lineup.cancel_substitution()
        state.between_periods = False
        state.swim_off = SwimOffRecord()
        state.game_ended = True
        logger.info("Game ended vs %s", state.opponent or "opponent")
        return self._commit(ValidationResult.ok(credited))

    def new_game(self, clear_roster: bool = False, roster: Optional[List[Player]] = None) -> ValidationResult:
        """
        Reset every per-game record after the operator confirms.

        The roster is kept unless ``clear_roster`` asks for the default
        roster or ``roster`` supplies a replacement. The period length is
        kept, rounded to whole minutes.
        """
        if not self.prompts.confirm(NEW_GAME_PROMPT):
            return self._commit(ValidationResult.reject(Reason.NOT_CONFIRMED, "New game cancelled."))

        minutes = max(1, round(self.state.period_length_sec / 60))
        if roster is not None:
            players = list(roster)
        elif clear_roster:
            players = default_roster()
        else:
            players = self.state.roster
        self._bind(GameState(roster=players, period_length_sec=minutes * 60))
        logger.info("New game, %s min periods", minutes)
        return self._commit(ValidationResult.ok())

    def _starters(self, starter_ids, swim_off_id):
        ids = self.state.starter_selection if starter_ids is None else starter_ids
        if swim_off_id is None:
            swim_off_id = self.state.swim_off_selection
        known = self.state.players_by_id()
        return [pid for pid in ids if pid in known], swim_off_id

    def _clear_selection(self) -> None:
        self.state.starter_selection = set()
        self.state.swim_off_selection = None

    def _not_in_setup(self) -> ValidationResult:
        if self.state.game_ended:
            return ValidationResult.reject(Reason.GAME_ENDED, "The game has ended; start a new game.")
        return ValidationResult.reject(Reason.ALREADY_STARTED, "The game has already started.")

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------
    def set_clock(self, text: str) -> ValidationResult:
        return self._commit(self.clock.set_clock(text))

    def nudge_clock(self, delta: int) -> ValidationResult:
        return self._commit(self.clock.nudge(delta))

    def set_period(self, period) -> ValidationResult:
        return self._commit(self.clock.set_period(period))

    # ------------------------------------------------------------------
    # Substitutions
    # ------------------------------------------------------------------
    def start_substitution(self, clock_text: Optional[str] = None) -> ValidationResult:
        """Open a substitution, asking for the time when none is given."""
        if clock_text is None:
            guard = require_live(self.state)
            if not guard:
                return self._commit(guard)
            clock_text = self.prompts.prompt_text(SUB_TIME_PROMPT, self.state.clock)
            if clock_text is None:
                return self._commit(ValidationResult.reject(Reason.CANCELLED, "Substitution cancelled."))
        return self._commit(self.lineup.start_substitution(clock_text))

    def toggle_out(self, player_id: str) -> ValidationResult:
        return self.lineup.toggle_out(player_id)

    def toggle_in(self, player_id: str) -> ValidationResult:
        return self.lineup.toggle_in(player_id)

    def apply_substitution(self) -> ValidationResult:
        return self._commit(self.lineup.apply_substitution())

    def cancel_substitution(self) -> ValidationResult:
        return self.lineup.cancel_substitution()

    @property
    def pending_substitution(self):
        return self.lineup.pending

    # ------------------------------------------------------------------
    # Event log
    # ------------------------------------------------------------------
    def add_event(self, player_id: str, event_type, opp_scorer: Optional[str] = None) -> ValidationResult:
        """
        Quick-entry event at the current clock.

        Blocked while a substitution is being picked. A goal against with no
        scorer asks the operator for the opposing cap number.
        """
        if self.lineup.in_substitution:
            return self._commit(ValidationResult.reject(
                Reason.SUBSTITUTION_PENDING, "Finish or cancel the substitution first."
            ))
        guard = require_live(self.state)
        if not guard:
            return self._commit(guard)
        if EventType.parse(event_type) is EventType.GOAL_AGAINST and not opp_scorer:
            answer = self.prompts.prompt_text(SCORER_PROMPT, "")
            opp_scorer = (answer or "").strip() or None
        return self._commit(self.events.add_event(player_id, event_type, opp_scorer))

    def add_manual_event(self, player_id: str, event_type, clock_text: Optional[str] = None,
                         period=None, opp_scorer: Optional[str] = None) -> ValidationResult:
        return self._commit(
            self.events.add_manual_event(player_id, event_type, clock_text, period, opp_scorer)
        )

    def update_event(self, event_id: str, **fields) -> ValidationResult:
        return self._commit(self.events.update_event(event_id, **fields))

    def remove_event(self, event_id: str) -> ValidationResult:
        return self._commit(self.events.remove_event(event_id))

    # ------------------------------------------------------------------
    # Situations, timeouts, swim-off
    # ------------------------------------------------------------------
    def situation(self, action: str) -> ValidationResult:
        """Run one of the named situation buttons (``start_man_up`` and so on)."""
        handler = getattr(self.situations, action, None) if action in SITUATION_ACTIONS else None
        if handler is None:
            return self._commit(ValidationResult.reject(Reason.UNKNOWN_FIELD, f"Unknown situation: {action}"))
        return self._commit(handler())

    def adjust_team_stat(self, section: str, key: str, delta: int) -> ValidationResult:
        return self._commit(self.situations.adjust_team_stat(section, key, delta))

    def use_timeout(self, team: str, kind: str) -> ValidationResult:
        return self._commit(self.situations.use_timeout(team, kind))

    def adjust_timeout(self, team: str, kind: str, delta: int) -> ValidationResult:
        return self._commit(self.situations.adjust_timeout(team, kind, delta))

    def set_swim_winner(self, winner: str) -> ValidationResult:
        return self._commit(self.swim_off.set_winner(winner))

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------
    def box_scores(self):
        return self.stats.player_rows()

    def goalies(self):
        return self.stats.goalies()

    def field_players(self):
        return self.stats.field_players()

    def goals_against_by_scorer(self):
        return self.stats.goals_against_by_scorer()

    def export(self, kind: str, day: Optional[dt.date] = None) -> str:
        """
        Render one of the CSV exports.

        Raises:
            KeyError: If ``kind`` is not players, goalies or team
        """
        if kind == "players":
            return self.exporter.players_csv(self.state)
        if kind == "goalies":
            return self.exporter.goalies_csv(self.state)
        if kind == "team":
            return self.exporter.team_csv(self.state, day)
        raise KeyError(kind)

    def export_filename(self, kind: str, day: Optional[dt.date] = None) -> str:
        return export_filename(kind, self.state.opponent, day)


SITUATION_ACTIONS = (
    "start_man_up", "end_man_up_scored", "end_man_up_stopped",
    "start_man_down", "end_man_down_stopped", "end_man_down_goal_against",
    "pen_for_scored", "pen_for_missed", "pen_against_saved", "pen_against_goal",
)

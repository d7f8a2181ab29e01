"""
Roster service for the Poolside scorekeeper.

This module provides business logic for managing the roster: validation,
add/update/remove with cascading clean-up of per-game data, and CSV
import in replace or merge mode.
"""
import csv
import io
import logging
from enum import Enum
from typing import List, Optional, Tuple

from ..models import GameState, Player, Position

logger = logging.getLogger(__name__)


class PlayerValidationError(Exception):
    """Custom exception for player validation errors."""
    pass


class RosterImportError(Exception):
    """Raised when a roster file yields no usable players."""
    pass


class ImportMode(Enum):
    """How imported rows combine with the existing roster."""
    REPLACE = "replace"
    MERGE = "merge"


class PlayerValidator:
    """Validates roster entries entered by the operator."""

    MAX_NAME_LENGTH = 60
    MAX_NUMBER = 99

    def validate(self, player: Player) -> None:
        """
        Validate a player.

        Raises:
            PlayerValidationError: If the player data is invalid
        """
        errors = self.errors_for(player)
        if errors:
            raise PlayerValidationError(f"Player validation failed: {'; '.join(errors)}")

    def errors_for(self, player: Player) -> List[str]:
        errors = []
        if not player.name or not player.name.strip():
            errors.append("Player name is required")
        elif len(player.name.strip()) > self.MAX_NAME_LENGTH:
            errors.append(f"Player name must be at most {self.MAX_NAME_LENGTH} characters")
        if not isinstance(player.number, int) or isinstance(player.number, bool):
            errors.append("Player number must be numeric")
        elif not 0 <= player.number <= self.MAX_NUMBER:
            errors.append(f"Player number must be between 0 and {self.MAX_NUMBER}")
        return errors


class RosterCSVHandler:
    """
    Reads and writes the ``number,name,position`` roster format.

    A first line containing "number" or "name" is treated as a header.
    Rows with an unparseable number or an empty name are skipped.
    """

    HEADER = ["number", "name", "pos"]

    def parse(self, text: str) -> List[Tuple[int, str, Position]]:
        """
        Parse roster text into ``(number, name, position)`` rows.

        Raises:
            RosterImportError: If the text is empty or has no valid rows
        """
        lines = [line.strip() for line in (text or "").splitlines()]
        lines = [line for line in lines if line]
        if not lines:
            raise RosterImportError("CSV is empty.")

        start = 0
        first = lines[0].lower()
        if "number" in first or "name" in first:
            start = 1

        rows = []
        skipped = 0
        for parts in csv.reader(lines[start:]):
            parts = [c.strip() for c in parts]
            number = _leading_int(parts[0] if parts else "")
            name = parts[1] if len(parts) > 1 else ""
            pos = parts[2] if len(parts) > 2 else ""
            if number is None or not name:
                skipped += 1
                continue
            rows.append((number, name, Position.normalize(pos)))

        if skipped:
            logger.info("Skipped %d invalid roster row(s)", skipped)
        if not rows:
            raise RosterImportError("No valid players found in CSV.")
        return rows

    def format(self, roster: List[Player]) -> str:
        """Write the roster back out in the import format."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(self.HEADER)
        for player in roster:
            writer.writerow([player.number, player.name, player.position.value])
        return buffer.getvalue()


def _leading_int(text: str) -> Optional[int]:
    """Parse a leading integer the lenient way operators type cap numbers."""
    text = text.strip()
    digits = ""
    for i, ch in enumerate(text):
        if ch.isdigit() or (i == 0 and ch in "+-"):
            digits += ch
        else:
            break
    try:
        return int(digits)
    except ValueError:
        return None


class RosterService:
    """
    Service for managing the roster stored on the game state.

    Removing a player cascades through every per-player map on the state;
    pending substitution selections are cleaned up by the caller.
    """

    def __init__(
        self,
        game_state: GameState,
        validator: Optional[PlayerValidator] = None,
        csv_handler: Optional[RosterCSVHandler] = None,
    ):
        self.game_state = game_state
        self.validator = validator or PlayerValidator()
        self.csv_handler = csv_handler or RosterCSVHandler()

    def get_player(self, player_id: str) -> Optional[Player]:
        return self.game_state.player(player_id)

    def add_player(self, number: int = 0, name: str = "New", position="FP") -> Player:
        """
        Append a new player.

        Raises:
            PlayerValidationError: If player data is invalid
        """
        player = Player(number=_coerce_number(number), name=str(name or "").strip(), position=position)
        self.validator.validate(player)
        self.game_state.roster.append(player)
        logger.info("Added player %s", player.label())
        return player

    def update_player(self, player_id: str, number=None, name=None, position=None) -> Player:
        """
        Edit a player in place.

        Raises:
            KeyError: If the player does not exist
            PlayerValidationError: If the edited data is invalid
        """
        player = self.get_player(player_id)
        if player is None:
            raise KeyError(player_id)
        candidate = Player(
            id=player.id,
            number=player.number if number is None else _coerce_number(number),
            name=player.name if name is None else str(name).strip(),
            position=player.position if position is None else position,
        )
        self.validator.validate(candidate)
        player.number = candidate.number
        player.name = candidate.name
        player.position = candidate.position
        return player

    def remove_player(self, player_id: str) -> bool:
        """Remove a player and every per-game trace of them."""
        state = self.game_state
        before = len(state.roster)
        state.roster = [p for p in state.roster if p.id != player_id]
        if len(state.roster) == before:
            return False

        state.log = [e for e in state.log if e.player_id != player_id]
        state.active_ids = [pid for pid in state.active_ids if pid != player_id]
        state.time_played.pop(player_id, None)
        state.swim_wins.pop(player_id, None)
        state.swim_losses.pop(player_id, None)
        state.starter_selection.discard(player_id)
        if state.swim_off_selection == player_id:
            state.swim_off_selection = None
        if state.swim_off.player_id == player_id:
            state.swim_off.player_id = None
            state.swim_off.winner = None
        logger.info("Removed player %s", player_id)
        return True

    def import_csv(self, text: str, mode: ImportMode = ImportMode.MERGE) -> List[Player]:
        """
        Import roster rows.

        In replace mode the roster is discarded and rebuilt with new ids. In
        merge mode players are matched by jersey number, updated in place or
        appended, and the roster is sorted by number. Starter and swim-off
        selections are cleared either way.

        Raises:
            RosterImportError: If nothing valid was found; the roster is untouched
        """
        rows = self.csv_handler.parse(text)
        state = self.game_state

        if ImportMode(mode) is ImportMode.REPLACE:
            state.roster = [Player(number=n, name=name, position=pos) for n, name, pos in rows]
        else:
            by_number = {}
            for player in state.roster:
                by_number.setdefault(player.number, player)
            merged = list(state.roster)
            for number, name, pos in rows:
                existing = by_number.get(number)
                if existing is not None:
                    existing.name = name or existing.name
                    existing.position = pos
                else:
                    player = Player(number=number, name=name, position=pos)
                    by_number[number] = player
                    merged.append(player)
            state.roster = sorted(merged, key=lambda p: p.number)

        state.starter_selection = set()
        state.swim_off_selection = None
        logger.info("Imported %d roster row(s) (%s)", len(rows), ImportMode(mode).value)
        return state.roster

    def export_csv(self) -> str:
        return self.csv_handler.format(self.game_state.roster)


def _coerce_number(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise PlayerValidationError("Player validation failed: Player number must be numeric") from None

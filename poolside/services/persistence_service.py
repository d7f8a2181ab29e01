"""
Persistence service for the Poolside scorekeeper.

This module saves and loads the full game snapshot as a JSON file. Loading
never fails the caller: anything unreadable degrades to a fresh state.
"""
import json
import logging
import os
from typing import Optional

from ..models import GameState
from ..utils.constants import DEFAULT_STATE_FILE, SNAPSHOT_VERSION

logger = logging.getLogger(__name__)


class PersistenceService:
    """
    Service for persisting the game snapshot to a JSON file.

    The snapshot is written after every accepted change; it is idempotent
    and the last write wins.
    """

    def __init__(self, file_path: Optional[str] = DEFAULT_STATE_FILE):
        self.file_path = file_path

    def save(self, game_state: GameState) -> bool:
        """
        Write the snapshot, logging instead of raising on failure.

        Returns:
            True if the snapshot was written
        """
        if not self.file_path:
            return False
        try:
            self.save_game_to_file(game_state, self.file_path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Could not save game snapshot to %s: %s", self.file_path, e)
            return False

    def load(self) -> GameState:
        """
        Load the snapshot, falling back to a fresh state.

        Returns:
            The stored game state, or ``GameState.fresh()`` when the file is
            missing or unreadable
        """
        if not self.file_path or not os.path.exists(self.file_path):
            return GameState.fresh()
        try:
            return self.load_game_from_file(self.file_path)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Ignoring unreadable game snapshot %s: %s", self.file_path, e)
            return GameState.fresh()

    @staticmethod
    def save_game_to_file(game_state: GameState, file_path: str) -> None:
        """
        Save game state to a JSON file.

        Args:
            game_state: The game state to save
            file_path: Path where to save the file

        Raises:
            OSError: If the file cannot be written
        """
        directory = os.path.dirname(file_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)

        tmp_path = f"{file_path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(game_state.to_json(), f, indent=2)
        os.replace(tmp_path, file_path)

    @staticmethod
    def load_game_from_file(file_path: str) -> GameState:
        """
        Load game state from a JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If file contains invalid JSON
            ValueError: If the JSON is not a snapshot object
        """
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("Snapshot must be a JSON object")
        version = data.get("version")
        if version is not None and version != SNAPSHOT_VERSION:
            logger.info("Reading snapshot version %s (current %s)", version, SNAPSHOT_VERSION)
        return GameState.from_json(data)

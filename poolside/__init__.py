"""
Poolside Scorekeeper

Live water polo scorekeeping: per-player events against the game clock,
the seven players in the pool, substitutions with time played, and box
scores derived from the event log.

The operator surface is a Flask JSON API around one game session.
"""
from .models import Player, GameState
from .services import GameSession, PersistenceService
from .ui import create_app, run_web_app
from .utils import parse_clock, fmt_clock, APP_TITLE

__version__ = "1.0.0"

__all__ = [
    "Player", "GameState", "GameSession", "PersistenceService",
    "create_app", "run_web_app", "parse_clock", "fmt_clock", "APP_TITLE"
]

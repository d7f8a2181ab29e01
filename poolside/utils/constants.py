"""
Constants for the Poolside water polo scorekeeper.

This module contains configuration constants used throughout the application.
"""

# Application metadata
APP_TITLE = "Poolside Scorekeeper"

# Period timing defaults (minutes)
DEFAULT_PERIOD_LENGTH_MIN = 8
MIN_PERIOD_LENGTH_MIN = 1
MAX_PERIOD_LENGTH_MIN = 20

# Manual clock nudge buttons (+/- seconds)
CLOCK_NUDGE_SECONDS = 10

# Lineup rules: six field players plus one goalkeeper in the pool
LINEUP_SIZE = 7
GOALKEEPERS_PER_LINEUP = 1

# Team keys used for timeouts and swim-off outcomes
TEAM_US = "msu"
TEAM_THEM = "opp"
TEAM_LABELS = {
    TEAM_US: "MSU",
    TEAM_THEM: "Opponent",
}
SWIM_WINNER_US = "msu"
SWIM_WINNER_THEM = "opponent"
SWIM_WINNERS = (SWIM_WINNER_US, SWIM_WINNER_THEM)

# Timeouts allotted per team at the start of a game
TIMEOUT_KINDS = ("short", "full")
TIMEOUT_LABELS = {"short": "30s", "full": "Full"}
DEFAULT_TIMEOUTS = {"short": 1, "full": 2}

# Position aliases recognised when importing rosters
GOALKEEPER_ALIASES = ("gk", "goalkeeper", "keeper", "goalie")

# Snapshot format
SNAPSHOT_VERSION = 7
DEFAULT_STATE_FILE = "poolside_state.json"

# Roster used for a brand new installation (or a reset that clears the roster)
DEFAULT_ROSTER = [
    (1, "GK", "GK"),
    (2, "A", "FP"),
    (3, "B", "FP"),
    (4, "C", "FP"),
    (5, "D", "FP"),
    (6, "E", "FP"),
    (7, "F", "FP"),
    (8, "G", "FP"),
]

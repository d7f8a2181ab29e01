"""
Utilities package for the Poolside scorekeeper.

This package contains utility functions and constants used throughout the application.
"""
from .time_utils import parse_clock, fmt_clock, clamp_to_period, now_ts
from .constants import (
    APP_TITLE, DEFAULT_PERIOD_LENGTH_MIN, MAX_PERIOD_LENGTH_MIN, LINEUP_SIZE,
    GOALKEEPERS_PER_LINEUP, CLOCK_NUDGE_SECONDS, SNAPSHOT_VERSION
)
from .config import AppConfig, get_app_config
from .log import init_logging

__all__ = [
    "parse_clock", "fmt_clock", "clamp_to_period", "now_ts",
    "APP_TITLE", "DEFAULT_PERIOD_LENGTH_MIN", "MAX_PERIOD_LENGTH_MIN", "LINEUP_SIZE",
    "GOALKEEPERS_PER_LINEUP", "CLOCK_NUDGE_SECONDS", "SNAPSHOT_VERSION",
    "AppConfig", "get_app_config", "init_logging"
]

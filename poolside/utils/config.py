"""
Runtime configuration for the Poolside scorekeeper.

Uses environment variables with sensible defaults.
"""
import os

from .constants import DEFAULT_STATE_FILE


class AppConfig:
    """Configuration for the operator web server."""

    # Server
    HOST = os.getenv("POOLSIDE_HOST", "127.0.0.1")
    PORT = int(os.getenv("POOLSIDE_PORT", "7122"))

    # Snapshot file written after every accepted change
    STATE_PATH = os.getenv("POOLSIDE_STATE_PATH", DEFAULT_STATE_FILE)

    # Logging
    LOG_LEVEL = os.getenv("POOLSIDE_LOG_LEVEL", "INFO")


def get_app_config():
    """Get configuration for the web server."""
    return AppConfig

"""
Logging configuration for the Poolside scorekeeper.

Provides Rich-based console logging with a program name prefix.
"""
import logging

from rich.logging import RichHandler


def init_logging(program_name: str, level: str = "INFO", color: str = "dim cyan") -> logging.Logger:
    """
    Configure Rich logging for the application.

    Args:
        program_name: Name shown in front of every record (e.g. "web")
        level: Root log level name
        color: Rich color used for the program name

    Returns:
        The logger for ``poolside.<program_name>``
    """
    padded_name = f"{program_name:<6}"

    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=f"[{color}]{padded_name}[/{color}] %(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(markup=True, rich_tracebacks=True)],
        force=True,
    )

    # Werkzeug request lines are noisy during a live game
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    logger = logging.getLogger(f"poolside.{program_name}")
    logger.info(f"Logging initialized for {program_name}")
    return logger

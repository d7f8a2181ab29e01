"""
Clock helpers for the Poolside water polo scorekeeper.

The game clock counts down, so every value handled here is "time remaining
in the period" expressed in whole seconds.
"""
import re
import time
from typing import Optional

_CLOCK_RE = re.compile(r"^(\d{1,2}):([0-5]\d)$")


def parse_clock(text: Optional[str]) -> Optional[int]:
    """
    Parse an ``M:SS`` or ``MM:SS`` clock string into seconds.

    Args:
        text: Clock text as typed by the operator

    Returns:
        Number of seconds, or None when the text is not a valid clock

    Example:
        >>> parse_clock("6:30")
        390
        >>> parse_clock("6:75") is None
        True
    """
    match = _CLOCK_RE.match((text or "").strip())
    if not match:
        return None
    return int(match.group(1)) * 60 + int(match.group(2))


def fmt_clock(seconds) -> str:
    """
    Format seconds as an ``M:SS`` string.

    Negative, missing or non-numeric values are rendered as ``0:00``.

    Example:
        >>> fmt_clock(480)
        '8:00'
        >>> fmt_clock(65)
        '1:05'
    """
    try:
        value = int(seconds)
    except (TypeError, ValueError):
        value = 0
    if value < 0:
        value = 0
    m, s = divmod(value, 60)
    return f"{m}:{s:02d}"


def clamp_to_period(seconds: int, period_length: int) -> int:
    """Bound ``seconds`` to ``[0, period_length]``."""
    return max(0, min(period_length, int(seconds)))


def now_ts() -> float:
    """
    Get current timestamp in epoch seconds.

    Returns:
        Current time as floating point epoch seconds
    """
    return time.time()

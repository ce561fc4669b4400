"""
Wall-clock time values on a 15-minute grid.

Times are stored as 24-hour ``HH:MM`` strings and displayed in 12-hour
format with a lowercase suffix, e.g. ``"09:00"`` <-> ``"9:00am"``.
"""

import re
from typing import List, Tuple

from .exceptions import InvalidTimeFormat

GRID_MINUTES = 15
MINUTES_PER_DAY = 24 * 60

_WALL_CLOCK_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_DISPLAY_RE = re.compile(r"^(\d{1,2}):([0-5]\d)\s*([ap]m)$", re.IGNORECASE)


def to_minutes(value: str) -> int:
    """Convert an ``HH:MM`` value to minutes since midnight."""
    match = _WALL_CLOCK_RE.match(value or "")
    if not match:
        raise InvalidTimeFormat(value)
    return int(match.group(1)) * 60 + int(match.group(2))


def from_minutes(minutes: int) -> str:
    """Convert minutes since midnight to an ``HH:MM`` value."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"Minutes must be within a single day, got {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def is_wall_clock(value: str) -> bool:
    """Check whether a value is a well-formed ``HH:MM`` string."""
    return bool(value) and _WALL_CLOCK_RE.match(value) is not None


def to_display(value: str) -> str:
    """
    Format an ``HH:MM`` value for display.

    Example: ``"00:15"`` -> ``"12:15am"``, ``"13:30"`` -> ``"1:30pm"``
    """
    minutes = to_minutes(value)
    hour, minute = divmod(minutes, 60)
    display_hour = 12 if hour == 0 else hour - 12 if hour > 12 else hour
    period = "am" if hour < 12 else "pm"
    return f"{display_hour}:{minute:02d}{period}"


def parse_display(text: str) -> str:
    """
    Parse a 12-hour display value back to ``HH:MM``.

    Raises:
        InvalidTimeFormat: If the text is not a 12-hour time
    """
    match = _DISPLAY_RE.match((text or "").strip())
    if not match:
        raise InvalidTimeFormat(text)

    hour = int(match.group(1))
    minute = int(match.group(2))
    period = match.group(3).lower()

    if not 1 <= hour <= 12:
        raise InvalidTimeFormat(text)

    if period == "am":
        hour = 0 if hour == 12 else hour
    else:
        hour = 12 if hour == 12 else hour + 12

    return f"{hour:02d}:{minute:02d}"


def parse_display_or_none(text: str) -> str | None:
    """Parse a display value, treating malformed input as unset."""
    try:
        return parse_display(text)
    except InvalidTimeFormat:
        return None


def enumerate_grid() -> List[str]:
    """All values from 00:00 to 23:45 in 15-minute steps."""
    return [from_minutes(m) for m in range(0, MINUTES_PER_DAY, GRID_MINUTES)]


def time_options() -> List[Tuple[str, str]]:
    """(value, label) pairs for start/end pickers."""
    return [(value, to_display(value)) for value in enumerate_grid()]


def format_range(start: str, end: str) -> str:
    """Format a slot as ``"9:00am - 5:00pm"``."""
    return f"{to_display(start)} - {to_display(end)}"

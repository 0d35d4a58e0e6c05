"""
Time grid math.

Pure conversions between time-of-day values, minutes since midnight and
vertical offsets on a fixed-hour grid. The grid composer works in minutes;
pixel offsets only matter at the presentation boundary (pointer placement).

Dependencies: None (pure domain layer)
System role: Geometry behind schedule grids and drag relocation
"""

import re
from datetime import time

from academy_scheduler.core.exceptions import InvalidTimeFormat

MINUTES_PER_DAY = 24 * 60
DEFAULT_GRANULARITY = 30

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")

TimeLike = str | time


def to_minutes(value: TimeLike) -> int:
    """
    Convert a time of day to minutes since midnight.

    Accepts "HH:MM" (seconds, if present as "HH:MM:SS", must be zero) or a
    datetime.time with no seconds.

    Args:
        value: Time of day

    Returns:
        int: Minutes since midnight in [0, 1439]

    Raises:
        InvalidTimeFormat: Malformed or out-of-range input
    """
    if isinstance(value, time):
        if value.second or value.microsecond:
            raise InvalidTimeFormat("Times must have minute precision", value=value.isoformat())
        return value.hour * 60 + value.minute

    if not isinstance(value, str):
        raise InvalidTimeFormat("Time must be an 'HH:MM' string", value=repr(value))

    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise InvalidTimeFormat(f"Malformed time {value!r}, expected HH:MM", value=value)

    hours, minutes, seconds = match.groups()
    hours, minutes = int(hours), int(minutes)
    if seconds is not None and int(seconds) != 0:
        raise InvalidTimeFormat("Times must have minute precision", value=value)
    if hours > 23 or minutes > 59:
        raise InvalidTimeFormat(f"Time {value!r} is outside 00:00-23:59", value=value)
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    """
    Format minutes since midnight as "HH:MM".

    Raises:
        InvalidTimeFormat: Minutes outside a single day
    """
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise InvalidTimeFormat(
            f"{minutes} minutes is outside 00:00-23:59", value=minutes
        )
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_time(value: TimeLike) -> time:
    """Parse a time of day into datetime.time (minute precision)."""
    minutes = to_minutes(value)
    return time(minutes // 60, minutes % 60)


def format_time(value: time) -> str:
    """Format a datetime.time as "HH:MM"."""
    return f"{value.hour:02d}:{value.minute:02d}"


def duration_minutes(start: TimeLike, end: TimeLike) -> int:
    """Minutes between two times of the same day (negative if inverted)."""
    return to_minutes(end) - to_minutes(start)


def validate_range(start: TimeLike, end: TimeLike, field: str = "end_time") -> int:
    """
    Check that start < end.

    Returns:
        int: Duration in minutes

    Raises:
        InvalidTimeFormat: Inverted or empty range
    """
    duration = duration_minutes(start, end)
    if duration <= 0:
        raise InvalidTimeFormat(
            "Start time must be before end time",
            field=field,
            details={
                "invariant": "start_before_end",
                "start_time": start if isinstance(start, str) else format_time(start),
                "end_time": end if isinstance(end, str) else format_time(end),
            },
        )
    return duration


def to_position(value: TimeLike, grid_start_hour: int, pixels_per_hour: float) -> float:
    """
    Map a time of day to a vertical offset on the grid.

    offset = (minutes - grid_start_hour * 60) / 60 * pixels_per_hour
    """
    return (to_minutes(value) - grid_start_hour * 60) / 60 * pixels_per_hour


def block_geometry(
    start: TimeLike,
    end: TimeLike,
    grid_start_hour: int,
    pixels_per_hour: float,
) -> tuple[float, float]:
    """Top offset and height of a block spanning [start, end)."""
    top = to_position(start, grid_start_hour, pixels_per_hour)
    height = duration_minutes(start, end) / 60 * pixels_per_hour
    return top, height


def snap(raw_minutes: float, granularity: int = DEFAULT_GRANULARITY) -> int:
    """
    Round minutes to the nearest multiple of granularity.

    Halves round up so that a pointer exactly between two slots picks the
    later one.
    """
    if granularity <= 0:
        raise ValueError("granularity must be positive")
    return int((raw_minutes + granularity / 2) // granularity) * granularity


def position_to_minutes(
    offset: float,
    grid_start_hour: int,
    pixels_per_hour: float,
    granularity: int = DEFAULT_GRANULARITY,
) -> int:
    """
    Inverse of to_position, snapped to granularity.

    Used when a click or drop proposes a new start time from a pointer offset.
    """
    raw = grid_start_hour * 60 + offset / pixels_per_hour * 60
    return snap(raw, granularity)

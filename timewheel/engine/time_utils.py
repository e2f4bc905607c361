"""Clock-time arithmetic for timewheel.

Times are "HH:MM" strings with no date or timezone. A range whose end is
earlier than its start crosses midnight. All overlap and duration logic is
built on the half-open segments returned by ``get_time_segments``.
"""

import re
from datetime import date
from typing import List, Optional, Tuple

from timewheel.models.constants import MINUTES_PER_DAY, MINUTES_PER_HOUR
from timewheel.models.template import Weekday, WEEKDAY_ORDER

_TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")
_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

Segment = Tuple[int, int]


def time_to_minutes(time: str) -> int:
    """Convert "HH:MM" to minutes since midnight (0..1439)."""
    hours, minutes = time.split(":")
    return int(hours) * MINUTES_PER_HOUR + int(minutes)


def time_to_hours(time: str) -> float:
    """Convert "HH:MM" to fractional hours, e.g. "14:30" -> 14.5."""
    return time_to_minutes(time) / MINUTES_PER_HOUR


def minutes_to_time(minutes: int) -> str:
    """Format a minute offset as "HH:MM", wrapping into a single day.

    Negative values wrap to the previous day: -15 -> "23:45".
    """
    normalized = minutes % MINUTES_PER_DAY
    return f"{normalized // MINUTES_PER_HOUR:02d}:{normalized % MINUTES_PER_HOUR:02d}"


def is_valid_time(time: str) -> bool:
    """Check that a value is a well-formed clock time (00:00 - 23:59)."""
    return isinstance(time, str) and bool(_TIME_RE.match(time))


def is_valid_time_range(start_time: str, end_time: str) -> bool:
    """Both times well-formed and not equal (zero-length ranges are invalid)."""
    if not is_valid_time(start_time) or not is_valid_time(end_time):
        return False
    return time_to_minutes(start_time) != time_to_minutes(end_time)


def get_time_segments(start_time: str, end_time: str) -> List[Segment]:
    """Split a range into half-open [start, end) minute segments.

    Returns:
        [] for a zero-length range, one segment for a same-day range,
        two segments ([start, 1440) and [0, end)) for a range crossing midnight
    """
    start = time_to_minutes(start_time)
    end = time_to_minutes(end_time)

    if start == end:
        return []
    if start < end:
        return [(start, end)]
    return [(start, MINUTES_PER_DAY), (0, end)]


def get_duration_minutes(start_time: str, end_time: str) -> int:
    """Duration in minutes, honoring midnight crossing."""
    return sum(end - start for start, end in get_time_segments(start_time, end_time))


def to_extended_span(start_time: str, end_time: str) -> Segment:
    """Single [start, end) span where a wrapping end is pushed past 1440."""
    start = time_to_minutes(start_time)
    end = time_to_minutes(end_time)
    if end <= start:
        end += MINUTES_PER_DAY
    return (start, end)


def is_time_in_range(minute_of_day: int, start_time: str, end_time: str) -> bool:
    """Whether a minute of the day falls inside a (possibly wrapping) range."""
    return any(
        start <= minute_of_day < end
        for start, end in get_time_segments(start_time, end_time)
    )


def parse_date_iso(value: str) -> Optional[date]:
    """Parse a strict YYYY-MM-DD string; None if malformed or impossible."""
    if not isinstance(value, str):
        return None
    match = _DATE_RE.match(value)
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def format_date_iso(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def get_weekday_id(value: str) -> Optional[Weekday]:
    """Weekday id for an ISO date (Monday first); None if the date is malformed."""
    parsed = parse_date_iso(value)
    if parsed is None:
        return None
    # Python weekday: Monday=0 ... Sunday=6
    return WEEKDAY_ORDER[parsed.weekday()]

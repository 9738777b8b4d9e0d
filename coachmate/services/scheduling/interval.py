# coachmate/services/scheduling/interval.py
"""Time-of-day ranges and the overlap rule shared by every conflict check."""
import re
from dataclasses import dataclass
from datetime import time
from typing import Optional, Union

from ...core.exceptions import ValidationError

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


@dataclass(frozen=True)
class TimeRange:
    """Half-open range [start, end) within a single day."""
    start: time
    end: time

    def overlaps(self, other: "TimeRange") -> bool:
        return overlaps(self, other)

    def __str__(self) -> str:
        return f"{format_hhmm(self.start)}-{format_hhmm(self.end)}"


def overlaps(a: TimeRange, b: TimeRange) -> bool:
    """Two ranges on the same day conflict iff each starts before the other ends.

    Back-to-back ranges (a.end == b.start) do not overlap.
    """
    return a.start < b.end and b.start < a.end


def parse_hhmm(value: Union[str, time], field: str = "time") -> time:
    """Parse a zero-padded 24-hour HH:MM string"""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if not isinstance(value, str):
        raise ValidationError("Invalid time format. Use HH:MM", field=field)
    match = HHMM_PATTERN.match(value)
    if not match:
        raise ValidationError("Invalid time format. Use HH:MM", field=field)
    return time(int(match.group(1)), int(match.group(2)))


def format_hhmm(value: Optional[time]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime("%H:%M")


def build_time_range(start: Union[str, time], end: Union[str, time]) -> TimeRange:
    start_time = parse_hhmm(start, "start_time")
    end_time = parse_hhmm(end, "end_time")
    if start_time >= end_time:
        raise ValidationError("End time must be after start time", field="end_time")
    return TimeRange(start_time, end_time)

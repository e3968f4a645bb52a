from __future__ import annotations

from datetime import time
from typing import Union

MINUTES_PER_DAY = 24 * 60

TimeLike = Union[time, str]


def _minutes_since_midnight(value: TimeLike) -> int:
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    hours, minutes = str(value).strip().split(":")[:2]
    hour_value, minute_value = int(hours), int(minutes)
    if not (0 <= hour_value < 24 and 0 <= minute_value < 60):
        raise ValueError(f"Invalid wall-clock time {value!r}")
    return hour_value * 60 + minute_value


def compute_hours_worked(start_time: TimeLike, end_time: TimeLike) -> float:
    """
    Hours between two wall-clock times, rounded to 2 decimals.

    An end time earlier than the start time is read as the next day
    (22:00 -> 02:00 is 4.0 hours). Equal times give 0.0; rejecting that is
    the caller's job.
    """
    start = _minutes_since_midnight(start_time)
    end = _minutes_since_midnight(end_time)
    diff = end - start
    if end < start:
        diff += MINUTES_PER_DAY
    return round(diff / 60, 2)

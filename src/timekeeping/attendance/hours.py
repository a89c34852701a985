from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.constants import DEFAULT_STANDARD_DAILY_HOURS
from .model import AttendanceDay


def _minutes(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 60


def compute_current_hours(
    check_in: Optional[datetime],
    break_start: Optional[datetime],
    break_end: Optional[datetime],
    now: datetime,
    *,
    break_minutes: float = 0.0,
) -> float:
    """Hours worked between check-in and ``now``, excluding breaks.

    An open break is excluded up to ``now``; a closed one by its own length.
    ``break_minutes`` covers earlier breaks of the same day. Never negative.
    """
    if check_in is None:
        return 0.0

    total = _minutes(check_in, now)
    if break_start is not None:
        if break_end is None:
            total -= _minutes(break_start, now)
        else:
            total -= _minutes(break_start, break_end)
    total -= break_minutes

    return max(total, 0.0) / 60


def split_overtime(worked_hours: float, standard_hours: float = DEFAULT_STANDARD_DAILY_HOURS) -> tuple[float, float]:
    """Cap regular hours at the standard day and book the rest as overtime."""
    worked_hours = max(worked_hours, 0.0)
    if worked_hours > standard_hours:
        return standard_hours, worked_hours - standard_hours
    return worked_hours, 0.0


def finalize_day(day: AttendanceDay, *, standard_hours: float = DEFAULT_STANDARD_DAILY_HOURS) -> AttendanceDay:
    """Freeze total and overtime hours on a clocked-out day."""
    if day.check_in is None or day.check_out is None:
        return day

    worked = compute_current_hours(
        day.check_in,
        day.break_start,
        day.break_end,
        day.check_out,
        break_minutes=day.break_minutes,
    )
    total, overtime = split_overtime(worked, standard_hours)
    return day.evolve(total_hours=round(total, 4), overtime_hours=round(overtime, 4))

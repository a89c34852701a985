from __future__ import annotations

from typing import Iterable

from ..core.enums import AttendanceStatus
from .model import AttendanceDay, AttendanceSummary

_LEAVE_STATUSES = {AttendanceStatus.SICK, AttendanceStatus.VACATION, AttendanceStatus.HOLIDAY}


def summarize_attendance(days: Iterable[AttendanceDay]) -> list[AttendanceSummary]:
    """Per-employee totals, busiest employee first."""
    summary_map: dict[str, dict] = {}

    for d in days:
        s = summary_map.get(d.employee_id)
        if not s:
            s = {
                "total_days": 0,
                "present_days": 0,
                "late_days": 0,
                "absent_days": 0,
                "leave_days": 0,
                "total_hours": 0.0,
                "overtime_hours": 0.0,
            }
            summary_map[d.employee_id] = s

        s["total_days"] += 1
        s["total_hours"] += d.total_hours
        s["overtime_hours"] += d.overtime_hours
        if d.status == AttendanceStatus.PRESENT:
            s["present_days"] += 1
        elif d.status == AttendanceStatus.LATE:
            s["late_days"] += 1
        elif d.status == AttendanceStatus.ABSENT:
            s["absent_days"] += 1
        elif d.status in _LEAVE_STATUSES:
            s["leave_days"] += 1

    out = [
        AttendanceSummary(
            employee_id=employee_id,
            average_hours_per_day=s["total_hours"] / s["total_days"] if s["total_days"] else 0.0,
            **s,
        )
        for employee_id, s in summary_map.items()
    ]
    out.sort(key=lambda x: x.total_hours, reverse=True)
    return out

from datetime import date

from timekeeping.attendance.model import AttendanceDay
from timekeeping.attendance.report import summarize_attendance
from timekeeping.core.enums import AttendanceStatus


def _day(emp: str, d: int, status: AttendanceStatus, hours: float = 0.0, overtime: float = 0.0) -> AttendanceDay:
    return AttendanceDay(
        employee_id=emp,
        work_date=date(2025, 1, d),
        status=status,
        total_hours=hours,
        overtime_hours=overtime,
    )


def test_summary_groups_by_employee_and_sorts_by_hours():
    days = [
        _day("EMP001", 1, AttendanceStatus.PRESENT, 8.0),
        _day("EMP001", 2, AttendanceStatus.SICK),
        _day("EMP002", 1, AttendanceStatus.LATE, 8.0, 1.5),
        _day("EMP002", 2, AttendanceStatus.PRESENT, 8.0),
        _day("EMP002", 3, AttendanceStatus.ABSENT),
        _day("EMP002", 4, AttendanceStatus.HALF_DAY, 4.0),
    ]

    first, second = summarize_attendance(days)

    assert first.employee_id == "EMP002"
    assert first.total_days == 4
    assert (first.present_days, first.late_days, first.absent_days, first.leave_days) == (1, 1, 1, 0)
    assert first.total_hours == 20.0
    assert first.overtime_hours == 1.5
    assert first.average_hours_per_day == 5.0

    assert second.employee_id == "EMP001"
    assert second.leave_days == 1
    assert second.average_hours_per_day == 4.0


def test_summary_of_nothing_is_empty():
    assert summarize_attendance([]) == []

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import pytest

from timekeeping.attendance.model import AttendanceDay
from timekeeping.attendance.queue import PendingActionQueue
from timekeeping.attendance.rate_limit import ActionRateLimiter
from timekeeping.attendance.service import AttendanceService
from timekeeping.common.datetime_utils import parse_timestamp
from timekeeping.core.enums import AttendanceStatus
from timekeeping.core.exceptions import RemoteRejectionError, TransientNetworkError
from timekeeping.storage.memory_store import InMemoryStore


class InMemoryAttendanceApi:
    """Stands in for the attendance endpoints; can be switched offline."""

    def __init__(self):
        self.online = True
        self.reject_with: Optional[RemoteRejectionError] = None
        self.days: dict[tuple[str, str], AttendanceDay] = {}
        self.calls: list[tuple[str, dict]] = []
        self._id = 0

    def _guard(self) -> None:
        if not self.online:
            raise TransientNetworkError("Network error: connection refused")
        if self.reject_with is not None:
            raise self.reject_with

    def get_today(self, employee_id: str) -> Optional[AttendanceDay]:
        self._guard()
        today = [d for (emp, _), d in self.days.items() if emp == employee_id]
        today.sort(key=lambda d: d.work_date, reverse=True)
        return today[0] if today else None

    def list_range(self, *, start_date: date, end_date: date, employee_id: Optional[str] = None):
        self._guard()
        return [
            d
            for d in self.days.values()
            if start_date <= d.work_date <= end_date and (employee_id is None or d.employee_id == employee_id)
        ]

    def clock_in(self, body: dict) -> Optional[str]:
        self._guard()
        self.calls.append(("clock_in", body))
        key = (body["employeeId"], body["date"])
        if key in self.days:
            raise RemoteRejectionError(409, "Already clocked in today")
        self._id += 1
        self.days[key] = AttendanceDay(
            employee_id=body["employeeId"],
            work_date=date.fromisoformat(body["date"]),
            check_in=parse_timestamp(body["checkIn"]),
            status=AttendanceStatus(body.get("status", "present")),
            record_id=f"rec{self._id}",
        )
        return f"rec{self._id}"

    def update(self, body: dict) -> Optional[str]:
        self._guard()
        self.calls.append(("update", body))
        key = (body["employeeId"], body["date"])
        day = self.days.get(key)
        if day is None:
            raise RemoteRejectionError(404, "No attendance record for today")
        changes = {}
        for wire, attr in (("checkOut", "check_out"), ("breakStart", "break_start"), ("breakEnd", "break_end")):
            if wire in body:
                changes[attr] = parse_timestamp(body[wire])
        self.days[key] = day.evolve(**changes)
        return day.record_id

    def revoke_clock_out(self, record_id: str) -> None:
        self._guard()
        self.calls.append(("revoke", {"id": record_id}))
        for key, day in self.days.items():
            if day.record_id == record_id:
                self.days[key] = day.evolve(check_out=None)
                return
        raise RemoteRejectionError(404, "Attendance record not found")

    def count(self, kind: str) -> int:
        return sum(1 for k, _ in self.calls if k == kind)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 3, 9, 0, 0)


@pytest.fixture
def api() -> InMemoryAttendanceApi:
    return InMemoryAttendanceApi()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def queue(store) -> PendingActionQueue:
    return PendingActionQueue(store, default_max_retries=3)


@pytest.fixture
def service(api, store, queue) -> AttendanceService:
    return AttendanceService(api, store, queue, rate_limiter=ActionRateLimiter())

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Optional

from ..common.datetime_utils import parse_timestamp, to_iso
from ..core.constants import DEFAULT_MAX_RETRIES
from ..core.enums import ActionType, AttendanceStatus, ClockPhase


@dataclass(frozen=True)
class AttendanceDay:
    """Domain entity: one employee's attendance on one calendar date."""

    employee_id: str
    work_date: date
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    status: AttendanceStatus = AttendanceStatus.PRESENT
    total_hours: float = 0.0
    overtime_hours: float = 0.0
    # Minutes of earlier breaks that a later break_start has superseded.
    break_minutes: float = 0.0
    record_id: Optional[str] = None
    notes: Optional[str] = None

    @property
    def is_clocked_in(self) -> bool:
        return self.check_in is not None and self.check_out is None

    @property
    def is_on_break(self) -> bool:
        return self.is_clocked_in and self.break_start is not None and self.break_end is None

    @property
    def phase(self) -> ClockPhase:
        if self.check_in is None:
            return ClockPhase.NOT_CLOCKED_IN
        if self.check_out is not None:
            return ClockPhase.CLOCKED_OUT
        if self.is_on_break:
            return ClockPhase.ON_BREAK
        return ClockPhase.WORKING

    @property
    def last_event_at(self) -> Optional[datetime]:
        events = [t for t in (self.check_in, self.break_start, self.break_end, self.check_out) if t]
        return max(events) if events else None

    def evolve(self, **changes: Any) -> "AttendanceDay":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Snapshot form used by the local store."""
        return {
            "employee_id": self.employee_id,
            "work_date": self.work_date.isoformat(),
            "check_in": to_iso(self.check_in),
            "check_out": to_iso(self.check_out),
            "break_start": to_iso(self.break_start),
            "break_end": to_iso(self.break_end),
            "status": self.status.value,
            "total_hours": self.total_hours,
            "overtime_hours": self.overtime_hours,
            "break_minutes": self.break_minutes,
            "record_id": self.record_id,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AttendanceDay":
        return cls(
            employee_id=str(data["employee_id"]),
            work_date=date.fromisoformat(data["work_date"]),
            check_in=parse_timestamp(data.get("check_in")),
            check_out=parse_timestamp(data.get("check_out")),
            break_start=parse_timestamp(data.get("break_start")),
            break_end=parse_timestamp(data.get("break_end")),
            status=AttendanceStatus(data.get("status") or AttendanceStatus.PRESENT.value),
            total_hours=float(data.get("total_hours") or 0.0),
            overtime_hours=float(data.get("overtime_hours") or 0.0),
            break_minutes=float(data.get("break_minutes") or 0.0),
            record_id=data.get("record_id"),
            notes=data.get("notes"),
        )


def dedupe_key(employee_id: str, work_date: date, action_type: ActionType, timestamp: datetime) -> str:
    """Identity of one action: replaying the same action yields the same key."""
    return f"{employee_id}:{work_date.isoformat()}:{action_type.value}:{timestamp.isoformat()}"


@dataclass
class PendingAction:
    """An attendance mutation that still has to be replayed remotely."""

    type: ActionType
    timestamp: datetime
    payload: dict
    dedupe_key: str
    retry_count: int = 0
    max_retries: int = DEFAULT_MAX_RETRIES
    failed: bool = False
    last_error: Optional[str] = None
    action_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def exhausted(self) -> bool:
        return self.retry_count > self.max_retries

    def to_dict(self) -> dict:
        return {
            "action_id": self.action_id,
            "type": self.type.value,
            "timestamp": self.timestamp.isoformat(),
            "payload": self.payload,
            "dedupe_key": self.dedupe_key,
            "retry_count": self.retry_count,
            "max_retries": self.max_retries,
            "failed": self.failed,
            "last_error": self.last_error,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PendingAction":
        return cls(
            action_id=str(data["action_id"]),
            type=ActionType(data["type"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            payload=dict(data.get("payload") or {}),
            dedupe_key=str(data["dedupe_key"]),
            retry_count=int(data.get("retry_count", 0)),
            max_retries=int(data.get("max_retries", DEFAULT_MAX_RETRIES)),
            failed=bool(data.get("failed", False)),
            last_error=data.get("last_error"),
        )


@dataclass(frozen=True)
class ClockResult:
    """Outcome of one attendance action.

    ``confirmed`` is False when the change was applied locally only and is
    waiting in the offline queue.
    """

    day: AttendanceDay
    confirmed: bool
    message: str


@dataclass(frozen=True)
class AttendanceSummary:
    """Read-model for per-employee reporting."""

    employee_id: str
    total_days: int
    present_days: int
    late_days: int
    absent_days: int
    leave_days: int
    total_hours: float
    overtime_hours: float
    average_hours_per_day: float

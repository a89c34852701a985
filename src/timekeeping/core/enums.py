from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Actor role used for authorization checks."""

    ADMIN = "admin"
    STAFF = "staff"


class AttendanceStatus(str, Enum):
    """Day status as stored by the attendance API."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half-day"
    SICK = "sick"
    VACATION = "vacation"
    HOLIDAY = "holiday"


class ClockPhase(str, Enum):
    NOT_CLOCKED_IN = "not_clocked_in"
    WORKING = "working"
    ON_BREAK = "on_break"
    CLOCKED_OUT = "clocked_out"


class ActionType(str, Enum):
    """Mutating attendance actions that can be queued for replay."""

    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"
    BREAK_START = "break_start"
    BREAK_END = "break_end"


class PayItemType(str, Enum):
    SALARY = "salary"
    OVERTIME = "overtime"
    BONUS = "bonus"
    COMMISSION = "commission"
    ALLOWANCE = "allowance"
    DEDUCTION = "deduction"


class PayrollStatus(str, Enum):
    """Payroll lifecycle: draft -> approved -> paid, or cancelled."""

    DRAFT = "draft"
    APPROVED = "approved"
    PAID = "paid"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    BANK_TRANSFER = "bank_transfer"
    CHECK = "check"
    CASH = "cash"

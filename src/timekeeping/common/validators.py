from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from ..core.constants import DEFAULT_EMPLOYEE_ID_PATTERN
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def validate_employee_id(employee_id: str, pattern: str = DEFAULT_EMPLOYEE_ID_PATTERN) -> str:
    employee_id = require_non_empty(employee_id or "", "Employee ID")
    if len(employee_id) < 4:
        raise ValidationError("Employee ID must be at least 4 characters")
    if not re.match(pattern, employee_id):
        raise ValidationError(f"Employee ID {employee_id!r} does not match the expected format")
    return employee_id


def validate_clock_sequence(
    check_in: Optional[datetime],
    check_out: Optional[datetime],
    break_start: Optional[datetime],
    break_end: Optional[datetime],
) -> None:
    """Check the ordering of one day's timestamps, raising ValidationError."""

    if check_in is None:
        if check_out or break_start or break_end:
            raise ValidationError("Clock events recorded without a clock in")
        return

    if check_out is not None and check_out < check_in:
        raise ValidationError("Clock out time must not be before clock in time")

    if break_start is not None:
        if break_start < check_in:
            raise ValidationError("Break start cannot be before clock in")
        if check_out is not None and break_start > check_out:
            raise ValidationError("Break start cannot be after clock out")

    if break_end is not None:
        if break_start is None:
            raise ValidationError("Break end recorded without a break start")
        if break_end < break_start:
            raise ValidationError("Break end must not be before break start")

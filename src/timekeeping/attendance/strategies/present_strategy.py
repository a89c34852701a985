from __future__ import annotations

from datetime import datetime, time
from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class PresentStrategy(AttendanceStrategy):
    """On-time (or unscheduled) check-in."""

    def decide_checkin(self, *, now: datetime, shift_start: Optional[time], grace_minutes: int) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

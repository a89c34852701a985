from __future__ import annotations

from datetime import datetime, time
from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, now: datetime, shift_start: Optional[time], grace_minutes: int) -> StatusDecision:
        if shift_start is None:
            return StatusDecision(status=AttendanceStatus.LATE)
        start = datetime.combine(now.date(), shift_start)
        late_minutes = int((now - start).total_seconds() // 60)
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Late by {late_minutes} min")

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceDay


class AttendanceRepository(Protocol):
    """Remote source of truth for attendance days.

    Write methods take the JSON body as sent on the wire so the very same
    body can be stored in the offline queue and replayed later.
    """

    def get_today(self, employee_id: str) -> Optional[AttendanceDay]:
        raise NotImplementedError

    def list_range(self, *, start_date: date, end_date: date, employee_id: Optional[str] = None) -> Sequence[AttendanceDay]:
        raise NotImplementedError

    def clock_in(self, body: dict) -> Optional[str]:
        """Create today's record; returns the server id when known."""

        raise NotImplementedError

    def update(self, body: dict) -> Optional[str]:
        """Apply a checkOut / breakStart / breakEnd transition."""

        raise NotImplementedError

    def revoke_clock_out(self, record_id: str) -> None:
        """Admin-only: clear checkOut so the day is open again."""

        raise NotImplementedError

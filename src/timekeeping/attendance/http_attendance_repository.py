from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional, Sequence

from ..common.datetime_utils import parse_timestamp
from ..core.enums import AttendanceStatus
from ..remote.client import ApiClient
from ..remote.schemas import AttendanceWire
from .model import AttendanceDay
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def _wire_to_day(wire: AttendanceWire) -> AttendanceDay:
    try:
        status = AttendanceStatus(wire.status)
    except ValueError:
        logger.warning("Unknown attendance status %r from server; using present", wire.status)
        status = AttendanceStatus.PRESENT

    return AttendanceDay(
        employee_id=wire.employee_id,
        work_date=wire.work_date,
        check_in=parse_timestamp(wire.check_in),
        check_out=parse_timestamp(wire.check_out),
        break_start=parse_timestamp(wire.break_start),
        break_end=parse_timestamp(wire.break_end),
        status=status,
        total_hours=max(float(wire.total_hours or 0.0), 0.0),
        overtime_hours=max(float(wire.overtime_hours or 0.0), 0.0),
        record_id=wire.record_id,
        notes=wire.notes,
    )


def _record_id(data: Any) -> Optional[str]:
    if isinstance(data, dict):
        value = data.get("_id") or data.get("id")
        return str(value) if value is not None else None
    return None


class HttpAttendanceRepository(AttendanceRepository):
    def __init__(self, client: ApiClient):
        self._client = client

    def get_today(self, employee_id: str) -> Optional[AttendanceDay]:
        envelope = self._client.get("/attendance", params={"employeeId": employee_id, "today": "true"})
        rows = envelope.data or []
        if not rows:
            return None
        return _wire_to_day(AttendanceWire.model_validate(rows[0]))

    def list_range(self, *, start_date: date, end_date: date, employee_id: Optional[str] = None) -> Sequence[AttendanceDay]:
        params = {"startDate": start_date.isoformat(), "endDate": end_date.isoformat()}
        if employee_id:
            params["employeeId"] = employee_id
        envelope = self._client.get("/attendance", params=params)
        return [_wire_to_day(AttendanceWire.model_validate(r)) for r in (envelope.data or [])]

    def clock_in(self, body: dict) -> Optional[str]:
        envelope = self._client.post("/attendance", json=body)
        return _record_id(envelope.data)

    def update(self, body: dict) -> Optional[str]:
        envelope = self._client.put("/attendance", json=body)
        return _record_id(envelope.data)

    def revoke_clock_out(self, record_id: str) -> None:
        self._client.delete(f"/attendance/{record_id}")

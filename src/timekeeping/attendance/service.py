from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Optional

from ..common.datetime_utils import now_local, require_timestamp
from ..common.validators import validate_clock_sequence, validate_employee_id
from ..core.constants import (
    CLOCK_STATE_KEY_PREFIX,
    DEFAULT_EMPLOYEE_ID_PATTERN,
    DEFAULT_LATE_GRACE_MINUTES,
    DEFAULT_STANDARD_DAILY_HOURS,
)
from ..core.enums import ActionType
from ..core.exceptions import AuthorizationError, SequenceError, TransientNetworkError, ValidationError
from ..core.session import SessionContext
from ..remote.schemas import AttendanceUpdateRequest, ClockInRequest, dump_wire
from ..storage.store import AttendanceStore
from .factory import AttendanceStrategyFactory
from .hours import compute_current_hours, finalize_day
from .model import AttendanceDay, AttendanceSummary, ClockResult, PendingAction, dedupe_key
from .queue import PendingActionQueue
from .rate_limit import ActionRateLimiter
from .report import summarize_attendance
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Daily clock-in / break / clock-out state machine for one device.

    Each action is validated locally first (employee id, timestamp, cooldown,
    state), then committed to the remote API. When the API cannot be reached
    the change is kept in the local snapshot and queued for replay, and the
    caller gets an unconfirmed ``ClockResult``. Remote rejections leave the
    local snapshot untouched.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        store: AttendanceStore,
        queue: PendingActionQueue,
        *,
        rate_limiter: ActionRateLimiter | None = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
        standard_hours: float = DEFAULT_STANDARD_DAILY_HOURS,
        employee_id_pattern: str = DEFAULT_EMPLOYEE_ID_PATTERN,
        shift_start: time | None = None,
        grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
    ):
        self._attendance = attendance
        self._store = store
        self._queue = queue
        self._rate_limiter = rate_limiter or ActionRateLimiter()
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._standard_hours = float(standard_hours)
        self._employee_id_pattern = employee_id_pattern
        self._shift_start = shift_start
        self._grace_minutes = int(grace_minutes)

    # ------------------------------------------------------------------
    # Local snapshot
    # ------------------------------------------------------------------

    @staticmethod
    def _state_key(employee_id: str) -> str:
        return f"{CLOCK_STATE_KEY_PREFIX}{employee_id}"

    def _load_snapshot(self, employee_id: str) -> Optional[AttendanceDay]:
        raw = self._store.get(self._state_key(employee_id))
        return AttendanceDay.from_dict(raw) if raw else None

    def _save_snapshot(self, day: AttendanceDay) -> None:
        self._store.set(self._state_key(day.employee_id), day.to_dict())

    def _open_day(self, employee_id: str, now: datetime) -> Optional[AttendanceDay]:
        """Today's day, or an earlier one that was never clocked out."""
        day = self._load_snapshot(employee_id)
        if day is None:
            return None
        if day.work_date == now.date() or day.is_clocked_in:
            return day
        return None

    def _has_pending(self, employee_id: str) -> bool:
        return any(a.payload.get("employeeId") == employee_id for a in self._queue.pending())

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _prepare(self, employee_id: str, action: ActionType, now: Any) -> tuple[str, datetime]:
        employee_id = validate_employee_id(employee_id, self._employee_id_pattern)
        now = now_local() if now is None else require_timestamp(now)
        self._rate_limiter.check(employee_id, action, now)
        return employee_id, now

    @staticmethod
    def _check_order(day: AttendanceDay, now: datetime) -> None:
        last = day.last_event_at
        if last is not None and now < last:
            raise ValidationError(f"Time {now:%H:%M:%S} is earlier than the last recorded event ({last:%H:%M:%S})")

    def _require_clocked_in(self, employee_id: str, now: datetime) -> AttendanceDay:
        day = self._open_day(employee_id, now)
        if day is None or day.check_in is None:
            raise SequenceError("You have not clocked in today")
        if day.check_out is not None:
            raise SequenceError("You have already clocked out today")
        self._check_order(day, now)
        return day

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    def _commit(
        self,
        day: AttendanceDay,
        action: ActionType,
        now: datetime,
        body: dict,
        *,
        message: str,
        offline_message: str,
    ) -> ClockResult:
        key = dedupe_key(day.employee_id, day.work_date, action, now)

        # Keep causal order: nothing overtakes actions still waiting in the queue.
        if self._has_pending(day.employee_id):
            return self._apply_offline(day, action, now, body, key, offline_message)

        try:
            if action == ActionType.CLOCK_IN:
                record_id = self._attendance.clock_in(body)
            else:
                record_id = self._attendance.update(body)
        except TransientNetworkError as exc:
            logger.warning("%s for %s could not reach the server: %s", action.value, day.employee_id, exc)
            return self._apply_offline(day, action, now, body, key, offline_message)

        if record_id and not day.record_id:
            day = day.evolve(record_id=record_id)
        self._save_snapshot(day)
        self._rate_limiter.record(day.employee_id, now)
        logger.info("%s confirmed for %s at %s", action.value, day.employee_id, now.isoformat())
        return ClockResult(day=day, confirmed=True, message=message)

    def _apply_offline(
        self,
        day: AttendanceDay,
        action: ActionType,
        now: datetime,
        body: dict,
        key: str,
        message: str,
    ) -> ClockResult:
        self._save_snapshot(day)
        self._queue.enqueue(action_type=action, timestamp=now, payload=body, dedupe_key=key)
        self._rate_limiter.record(day.employee_id, now)
        return ClockResult(day=day, confirmed=False, message=message)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def clock_in(self, employee_id: str, *, now: datetime | None = None) -> ClockResult:
        employee_id, now = self._prepare(employee_id, ActionType.CLOCK_IN, now)

        previous = self._load_snapshot(employee_id)
        if previous is not None:
            if previous.work_date == now.date():
                if previous.is_clocked_in:
                    raise SequenceError("You are already clocked in for today")
                if previous.check_out is not None:
                    raise SequenceError("You have already clocked out today; an administrator can reopen the day")
            elif previous.is_clocked_in:
                raise SequenceError(f"Your shift of {previous.work_date:%Y-%m-%d} is still open; clock out first")
            self._check_order(previous, now)

        strategy = self._factory.for_checkin(now=now, shift_start=self._shift_start, grace_minutes=self._grace_minutes)
        decision = strategy.decide_checkin(now=now, shift_start=self._shift_start, grace_minutes=self._grace_minutes)

        day = AttendanceDay(
            employee_id=employee_id,
            work_date=now.date(),
            check_in=now,
            status=decision.status,
            notes=decision.note,
        )
        body = dump_wire(
            ClockInRequest(employee_id=employee_id, work_date=day.work_date, check_in=now, status=decision.status.value)
        )
        return self._commit(
            day,
            ActionType.CLOCK_IN,
            now,
            body,
            message="Clocked in successfully!",
            offline_message="Clocked in offline - will sync when online",
        )

    def break_start(self, employee_id: str, *, now: datetime | None = None) -> ClockResult:
        employee_id, now = self._prepare(employee_id, ActionType.BREAK_START, now)
        day = self._require_clocked_in(employee_id, now)
        if day.is_on_break:
            raise SequenceError("You are already on a break")

        carried = day.break_minutes
        if day.break_start is not None and day.break_end is not None:
            carried += (day.break_end - day.break_start).total_seconds() / 60

        day = day.evolve(break_start=now, break_end=None, break_minutes=carried)
        body = dump_wire(AttendanceUpdateRequest(employee_id=employee_id, work_date=day.work_date, break_start=now))
        return self._commit(
            day,
            ActionType.BREAK_START,
            now,
            body,
            message="Break started!",
            offline_message="Break started offline - will sync when online",
        )

    def break_end(self, employee_id: str, *, now: datetime | None = None) -> ClockResult:
        employee_id, now = self._prepare(employee_id, ActionType.BREAK_END, now)
        day = self._require_clocked_in(employee_id, now)
        if not day.is_on_break:
            raise SequenceError("You are not on a break")

        day = day.evolve(break_end=now)
        body = dump_wire(AttendanceUpdateRequest(employee_id=employee_id, work_date=day.work_date, break_end=now))
        return self._commit(
            day,
            ActionType.BREAK_END,
            now,
            body,
            message="Break ended!",
            offline_message="Break ended offline - will sync when online",
        )

    def clock_out(self, employee_id: str, *, now: datetime | None = None) -> ClockResult:
        """Close the day. An open break is closed at the same instant."""
        employee_id, now = self._prepare(employee_id, ActionType.CLOCK_OUT, now)
        day = self._require_clocked_in(employee_id, now)

        update = AttendanceUpdateRequest(employee_id=employee_id, work_date=day.work_date, check_out=now)
        if day.is_on_break:
            day = day.evolve(break_end=now)
            update.break_end = now

        day = finalize_day(day.evolve(check_out=now), standard_hours=self._standard_hours)
        return self._commit(
            day,
            ActionType.CLOCK_OUT,
            now,
            dump_wire(update),
            message="Clocked out successfully!",
            offline_message="Clocked out offline - will sync when online",
        )

    def revoke_clock_out(self, employee_id: str, *, session: SessionContext) -> AttendanceDay:
        """Reopen a clocked-out day. Administrators only; never queued offline."""
        if not session.is_admin:
            raise AuthorizationError("Only an administrator can revoke a clock out")
        employee_id = validate_employee_id(employee_id, self._employee_id_pattern)

        day = self._load_snapshot(employee_id)
        if day is None or day.check_out is None:
            day = self._attendance.get_today(employee_id) or day
        if day is None or day.check_out is None:
            raise SequenceError("There is no clock out to revoke")
        if not day.record_id:
            raise ValidationError("The attendance record has not been synced yet")

        self._attendance.revoke_clock_out(day.record_id)

        day = day.evolve(check_out=None)
        self._save_snapshot(day)
        logger.info("Clock out of %s on %s revoked by %s", employee_id, day.work_date, session.employee_id)
        return day

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def load_today(self, employee_id: str, *, now: datetime | None = None) -> Optional[AttendanceDay]:
        """Refresh the local snapshot from the server, falling back to it offline."""
        employee_id = validate_employee_id(employee_id, self._employee_id_pattern)
        now = now_local() if now is None else require_timestamp(now)
        local = self._open_day(employee_id, now)

        try:
            remote = self._attendance.get_today(employee_id)
        except TransientNetworkError as exc:
            logger.warning("Could not load attendance for %s, using offline data: %s", employee_id, exc)
            return local

        if remote is None or self._has_pending(employee_id):
            # Local actions the server has not seen yet are ahead of it.
            return local

        # Snapshots are keyed by the id the caller knows the employee by.
        remote = _normalize_breaks(remote.evolve(employee_id=employee_id))
        validate_clock_sequence(remote.check_in, remote.check_out, remote.break_start, remote.break_end)
        if local is not None and local.work_date == remote.work_date:
            remote = remote.evolve(break_minutes=local.break_minutes)

        self._save_snapshot(remote)
        return remote

    def current_state(self, employee_id: str, *, now: datetime | None = None) -> Optional[AttendanceDay]:
        now = now_local() if now is None else require_timestamp(now)
        return self._open_day(employee_id, now)

    def current_hours(self, employee_id: str, *, now: datetime | None = None) -> float:
        """Live hours for a ticking display; frozen totals once clocked out."""
        now = now_local() if now is None else require_timestamp(now)
        day = self._open_day(employee_id, now)
        if day is None:
            return 0.0
        if day.check_out is not None:
            return day.total_hours + day.overtime_hours
        return compute_current_hours(
            day.check_in,
            day.break_start,
            day.break_end,
            now,
            break_minutes=day.break_minutes,
        )

    def attendance_summary(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[str] = None,
    ) -> list[AttendanceSummary]:
        if end_date < start_date:
            raise ValidationError("End date must not be before start date")
        days = self._attendance.list_range(start_date=start_date, end_date=end_date, employee_id=employee_id)
        return summarize_attendance(days)

    def record_synced(self, action: PendingAction, record_id: Optional[str]) -> None:
        """Adopt the server id of a day that was created while offline."""
        employee_id = action.payload.get("employeeId")
        if not record_id or not employee_id:
            return
        day = self._load_snapshot(str(employee_id))
        if day is None or day.record_id or day.work_date.isoformat() != action.payload.get("date"):
            return
        self._save_snapshot(day.evolve(record_id=record_id))

    def pending_count(self) -> int:
        return self._queue.count()

    def failed_actions(self) -> list[PendingAction]:
        return self._queue.failed()


def _normalize_breaks(day: AttendanceDay) -> AttendanceDay:
    # The server keeps the previous breakEnd when a second break starts.
    if day.break_start and day.break_end and day.break_end < day.break_start:
        return day.evolve(break_end=None)
    return day

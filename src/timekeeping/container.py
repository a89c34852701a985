from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Optional

import httpx

from .attendance.factory import AttendanceStrategyFactory
from .attendance.http_attendance_repository import HttpAttendanceRepository
from .attendance.queue import PendingActionQueue
from .attendance.rate_limit import ActionRateLimiter
from .attendance.service import AttendanceService
from .attendance.sync import SyncService
from .core import constants
from .core.exceptions import ValidationError
from .payroll.calculator.factory import calculator_for_rule
from .payroll.http_payroll_repository import HttpPayrollRepository
from .payroll.service import PayrollService
from .remote.client import ApiClient
from .storage.json_store import JsonFileStore
from .storage.memory_store import InMemoryStore
from .storage.store import AttendanceStore


@dataclass(frozen=True)
class Container:
    client: ApiClient
    store: AttendanceStore
    queue: PendingActionQueue

    attendance_repo: HttpAttendanceRepository
    payroll_repo: HttpPayrollRepository

    attendance_service: AttendanceService
    sync_service: SyncService
    payroll_service: PayrollService

    sync_interval: float


def parse_shift_start(value: Optional[str]) -> Optional[time]:
    if not value or not value.strip():
        return None
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError(f"SHIFT_START must look like HH:MM, got {value!r}") from None


def build_container(
    *,
    settings: Any,
    store: Optional[AttendanceStore] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> Container:
    """Wire the services from a settings module (or any object with the same attributes)."""

    def setting(name: str, default: Any) -> Any:
        return getattr(settings, name, default)

    client = ApiClient(
        str(setting("API_BASE_URL", constants.DEFAULT_API_BASE_URL)),
        timeout=float(setting("API_TIMEOUT", constants.DEFAULT_API_TIMEOUT_SECONDS)),
        transport=transport,
    )

    if store is None:
        store_path = setting("STORE_PATH", "")
        store = JsonFileStore(store_path) if store_path else InMemoryStore()

    queue = PendingActionQueue(store, default_max_retries=int(setting("MAX_RETRIES", constants.DEFAULT_MAX_RETRIES)))

    attendance_repo = HttpAttendanceRepository(client)
    payroll_repo = HttpPayrollRepository(client)

    attendance_service = AttendanceService(
        attendance_repo,
        store,
        queue,
        rate_limiter=ActionRateLimiter(),
        strategy_factory=AttendanceStrategyFactory(),
        standard_hours=float(setting("STANDARD_DAILY_HOURS", constants.DEFAULT_STANDARD_DAILY_HOURS)),
        employee_id_pattern=str(setting("EMPLOYEE_ID_PATTERN", constants.DEFAULT_EMPLOYEE_ID_PATTERN)),
        shift_start=parse_shift_start(setting("SHIFT_START", "")),
        grace_minutes=int(setting("LATE_GRACE_MINUTES", constants.DEFAULT_LATE_GRACE_MINUTES)),
    )
    sync_service = SyncService(attendance_repo, queue, on_applied=attendance_service.record_synced)
    payroll_service = PayrollService(
        payroll_repo,
        calculator=calculator_for_rule(setting("PAYROLL_GROSS_RULE", "standard")),
    )

    return Container(
        client=client,
        store=store,
        queue=queue,
        attendance_repo=attendance_repo,
        payroll_repo=payroll_repo,
        attendance_service=attendance_service,
        sync_service=sync_service,
        payroll_service=payroll_service,
        sync_interval=float(setting("SYNC_INTERVAL_SECONDS", constants.DEFAULT_SYNC_INTERVAL_SECONDS)),
    )

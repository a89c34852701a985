from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_SYNC_INTERVAL_SECONDS
from ..core.enums import ActionType
from ..core.exceptions import RemoteRejectionError, TransientNetworkError
from .model import PendingAction
from .queue import PendingActionQueue
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncReport:
    synced: int = 0
    deduplicated: int = 0
    failed: int = 0
    remaining: int = 0
    skipped: bool = False


class SyncService:
    """Replays the offline queue against the attendance API, oldest first.

    Only one drain runs at a time: a timer-driven drain and a manual retry
    racing each other results in one of them returning ``skipped=True``.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        queue: PendingActionQueue,
        *,
        on_applied: Optional[Callable[[PendingAction, Optional[str]], None]] = None,
    ):
        self._attendance = attendance
        self._queue = queue
        self._on_applied = on_applied
        self._drain_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def _replay(self, action: PendingAction) -> Optional[str]:
        if action.type == ActionType.CLOCK_IN:
            return self._attendance.clock_in(action.payload)
        return self._attendance.update(action.payload)

    def drain(self) -> SyncReport:
        if not self._drain_lock.acquire(blocking=False):
            logger.debug("Sync already in progress; skipping")
            return SyncReport(remaining=self._queue.count(), skipped=True)

        synced = deduplicated = failed = 0
        try:
            for action in self._queue.pending():
                if self._queue.is_applied(action.dedupe_key):
                    self._queue.remove(action.action_id)
                    deduplicated += 1
                    continue

                try:
                    record_id = self._replay(action)
                except TransientNetworkError as exc:
                    updated = self._queue.record_failure(action.action_id, str(exc))
                    if updated is not None and updated.failed:
                        failed += 1
                    logger.info("Sync paused, server unreachable: %s", exc)
                    break
                except RemoteRejectionError as exc:
                    if exc.is_conflict:
                        # The server already has it (e.g. a replay after a crash).
                        self._queue.mark_applied(action.dedupe_key)
                        self._queue.remove(action.action_id)
                        deduplicated += 1
                        continue
                    self._queue.dead_letter(action.action_id, exc.detail)
                    failed += 1
                    continue

                self._queue.mark_applied(action.dedupe_key)
                self._queue.remove(action.action_id)
                synced += 1
                if self._on_applied is not None:
                    self._on_applied(action, record_id)
        finally:
            self._drain_lock.release()

        remaining = self._queue.count()
        if synced or deduplicated or failed:
            logger.info(
                "Sync finished: %d synced, %d duplicates, %d failed, %d pending",
                synced,
                deduplicated,
                failed,
                remaining,
            )
        return SyncReport(synced=synced, deduplicated=deduplicated, failed=failed, remaining=remaining)

    def cleanup_old_data(self, *, days_to_keep: int = 30) -> int:
        cutoff = now_local().date() - timedelta(days=days_to_keep)
        return self._queue.prune_applied(cutoff)

    # ------------------------------------------------------------------
    # Background auto-sync
    # ------------------------------------------------------------------

    def start_auto_sync(self, interval: float = DEFAULT_SYNC_INTERVAL_SECONDS) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, args=(float(interval),), name="attendance-sync", daemon=True)
        self._thread.start()
        logger.info("Auto-sync started (every %ss)", interval)

    def stop_auto_sync(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def auto_sync_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self, interval: float) -> None:
        while not self._stop.wait(interval):
            try:
                self.drain()
            except Exception:
                logger.exception("Auto-sync drain failed")

from __future__ import annotations

import logging
import threading
from datetime import date, datetime
from typing import Callable, Optional

from ..core.constants import APPLIED_ACTIONS_KEY, DEFAULT_MAX_RETRIES, PENDING_ACTIONS_KEY
from ..core.enums import ActionType
from ..storage.store import AttendanceStore
from .model import PendingAction

logger = logging.getLogger(__name__)


class PendingActionQueue:
    """Persistent FIFO of attendance actions waiting for the remote API.

    Every mutation reloads the list from the store, changes it and writes it
    back while holding the queue lock, so a timer-driven drain and a manual
    retry never interleave half-way.
    """

    def __init__(self, store: AttendanceStore, *, default_max_retries: int = DEFAULT_MAX_RETRIES):
        self._store = store
        self._default_max_retries = int(default_max_retries)
        self._lock = threading.RLock()

    def _load(self) -> list[PendingAction]:
        raw = self._store.get(PENDING_ACTIONS_KEY) or []
        return [PendingAction.from_dict(item) for item in raw]

    def _save(self, actions: list[PendingAction]) -> None:
        self._store.set(PENDING_ACTIONS_KEY, [a.to_dict() for a in actions])

    def _mutate(self, fn: Callable[[list[PendingAction]], None]) -> None:
        with self._lock:
            actions = self._load()
            fn(actions)
            self._save(actions)

    def enqueue(
        self,
        *,
        action_type: ActionType,
        timestamp: datetime,
        payload: dict,
        dedupe_key: str,
        max_retries: Optional[int] = None,
    ) -> PendingAction:
        with self._lock:
            actions = self._load()
            for existing in actions:
                if existing.dedupe_key == dedupe_key and not existing.failed:
                    logger.info("Action %s already queued as %s", dedupe_key, existing.action_id)
                    return existing

            action = PendingAction(
                type=action_type,
                timestamp=timestamp,
                payload=dict(payload),
                dedupe_key=dedupe_key,
                max_retries=self._default_max_retries if max_retries is None else int(max_retries),
            )
            actions.append(action)
            self._save(actions)
            logger.info("Queued %s for later sync (%d pending)", dedupe_key, sum(1 for a in actions if not a.failed))
            return action

    def peek_all(self) -> list[PendingAction]:
        with self._lock:
            return self._load()

    def pending(self) -> list[PendingAction]:
        """Entries still to be replayed, oldest first."""
        return [a for a in self.peek_all() if not a.failed]

    def failed(self) -> list[PendingAction]:
        return [a for a in self.peek_all() if a.failed]

    def count(self) -> int:
        return len(self.pending())

    def get(self, action_id: str) -> Optional[PendingAction]:
        for action in self.peek_all():
            if action.action_id == action_id:
                return action
        return None

    def remove(self, action_id: str) -> None:
        def _remove(actions: list[PendingAction]) -> None:
            actions[:] = [a for a in actions if a.action_id != action_id]

        self._mutate(_remove)

    def record_failure(self, action_id: str, error: str) -> Optional[PendingAction]:
        """Count one failed replay; dead-letter the entry once it is out of retries."""
        updated: list[PendingAction] = []

        def _fail(actions: list[PendingAction]) -> None:
            for action in actions:
                if action.action_id != action_id:
                    continue
                action.retry_count += 1
                action.last_error = error
                if action.exhausted:
                    action.failed = True
                    logger.warning(
                        "Giving up on %s after %d attempts: %s",
                        action.dedupe_key,
                        action.retry_count,
                        error,
                    )
                updated.append(action)

        self._mutate(_fail)
        return updated[0] if updated else None

    def dead_letter(self, action_id: str, error: str) -> None:
        def _dead(actions: list[PendingAction]) -> None:
            for action in actions:
                if action.action_id == action_id:
                    action.failed = True
                    action.last_error = error
                    logger.warning("Action %s rejected: %s", action.dedupe_key, error)

        self._mutate(_dead)

    def discard_failed(self, action_id: str) -> None:
        """Let an operator acknowledge a dead letter."""

        def _discard(actions: list[PendingAction]) -> None:
            actions[:] = [a for a in actions if not (a.action_id == action_id and a.failed)]

        self._mutate(_discard)

    def clear(self) -> None:
        with self._lock:
            self._store.clear(PENDING_ACTIONS_KEY)

    # Applied keys let a replay skip an action the server already has.

    def applied_keys(self) -> set[str]:
        with self._lock:
            return set(self._store.get(APPLIED_ACTIONS_KEY) or [])

    def is_applied(self, key: str) -> bool:
        return key in self.applied_keys()

    def mark_applied(self, key: str) -> None:
        with self._lock:
            keys = list(self._store.get(APPLIED_ACTIONS_KEY) or [])
            if key not in keys:
                keys.append(key)
                self._store.set(APPLIED_ACTIONS_KEY, keys)

    def prune_applied(self, cutoff: date) -> int:
        """Forget applied keys of days before ``cutoff``; returns how many went."""
        with self._lock:
            keys = list(self._store.get(APPLIED_ACTIONS_KEY) or [])
            kept = [k for k in keys if _key_date(k) is None or _key_date(k) >= cutoff]
            if len(kept) != len(keys):
                self._store.set(APPLIED_ACTIONS_KEY, kept)
            return len(keys) - len(kept)


def _key_date(key: str) -> Optional[date]:
    parts = key.split(":")
    if len(parts) < 2:
        return None
    try:
        return date.fromisoformat(parts[1])
    except ValueError:
        return None

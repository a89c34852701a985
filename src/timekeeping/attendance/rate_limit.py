from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime

from ..core.constants import BREAK_COOLDOWN_SECONDS, CLOCK_COOLDOWN_SECONDS, MIN_ACTION_INTERVAL_SECONDS
from ..core.enums import ActionType
from ..core.exceptions import RateLimitError


@dataclass
class ActionRateLimiter:
    """Client-side cooldown between two actions of the same employee.

    Only accepted actions are recorded, so a rejected call leaves the window
    where it was.
    """

    min_interval: float = MIN_ACTION_INTERVAL_SECONDS
    clock_cooldown: float = CLOCK_COOLDOWN_SECONDS
    break_cooldown: float = BREAK_COOLDOWN_SECONDS
    _last_action: dict[str, datetime] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def _cooldown_for(self, action: ActionType) -> float:
        if action in (ActionType.CLOCK_IN, ActionType.CLOCK_OUT):
            return self.clock_cooldown
        return self.break_cooldown

    def check(self, employee_id: str, action: ActionType, now: datetime) -> None:
        with self._lock:
            last = self._last_action.get(employee_id)
        if last is None:
            return

        elapsed = (now - last).total_seconds()
        if elapsed < 0:
            # Out-of-order timestamps are the state machine's concern.
            return
        if elapsed < self.min_interval:
            raise RateLimitError(
                f"Please wait at least {self.min_interval:g} second(s) between actions",
                wait_seconds=self.min_interval - elapsed,
            )

        cooldown = self._cooldown_for(action)
        if elapsed < cooldown:
            label = action.value.replace("_", " ")
            raise RateLimitError(
                f"Please wait {cooldown:g} seconds before another {label}",
                wait_seconds=cooldown - elapsed,
            )

    def record(self, employee_id: str, now: datetime) -> None:
        with self._lock:
            self._last_action[employee_id] = now

    def reset(self, employee_id: str | None = None) -> None:
        with self._lock:
            if employee_id is None:
                self._last_action.clear()
            else:
                self._last_action.pop(employee_id, None)

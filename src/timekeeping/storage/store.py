from __future__ import annotations

from typing import Any, Optional, Protocol


class AttendanceStore(Protocol):
    """Durable key-value persistence for clock snapshots and the offline queue.

    Values are JSON-ready (dicts, lists, strings, numbers).
    """

    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def clear(self, key: Optional[str] = None) -> None:
        """Remove one key, or everything when ``key`` is None."""

        raise NotImplementedError

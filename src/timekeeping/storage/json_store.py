from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Optional

from .store import AttendanceStore

logger = logging.getLogger(__name__)


class JsonFileStore(AttendanceStore):
    """Keeps the whole store as one JSON document on disk.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace`` so a crash never leaves a half-written file.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path).expanduser()
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        text = self._path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            self._quarantine("is not valid JSON")
            return {}
        if not isinstance(data, dict):
            self._quarantine("does not hold an object")
            return {}
        return data

    def _quarantine(self, reason: str) -> None:
        # Keep the unreadable file for recovery; the next write would replace it.
        target = self._path.with_name(self._path.name + ".corrupt")
        os.replace(self._path, target)
        logger.error("Store file %s %s; moved to %s and starting empty", self._path, reason, target)

    def _dump(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=self._path.name, suffix=".tmp", dir=str(self._path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2)
            os.replace(tmp, self._path)
        except Exception:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._dump(data)

    def clear(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._dump({})
                return
            data = self._load()
            if key in data:
                del data[key]
                self._dump(data)

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def to_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Accept a datetime or an ISO-8601 string (a trailing ``Z`` is allowed).

    Aware values are converted to naive local time so they compare with the
    rest of the day's events.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError(f"Invalid time format: {value!r}")
    else:
        raise ValidationError(f"Invalid time format: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def require_timestamp(value: Any) -> datetime:
    parsed = parse_timestamp(value)
    if parsed is None:
        raise ValidationError("Time is required")
    return parsed

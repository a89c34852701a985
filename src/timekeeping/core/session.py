from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import Role


@dataclass(frozen=True)
class SessionContext:
    """Who is acting: passed explicitly instead of read from ambient storage."""

    employee_id: str
    role: Role = Role.STAFF
    token: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

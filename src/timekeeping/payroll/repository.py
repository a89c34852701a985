from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import PayrollRecord


class PayrollRepository(Protocol):
    def list_records(self) -> Sequence[PayrollRecord]:
        raise NotImplementedError

    def get(self, record_id: str) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def create(self, body: dict) -> Optional[PayrollRecord]:
        """Returns the stored record, or None when the server sends no body."""

        raise NotImplementedError

    def update(self, record_id: str, body: dict) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def delete(self, record_id: str) -> None:
        raise NotImplementedError

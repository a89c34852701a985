from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from ..model import PayrollItem, PayrollTotals


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def compute_totals(self, items: Iterable[PayrollItem]) -> PayrollTotals:
        raise NotImplementedError

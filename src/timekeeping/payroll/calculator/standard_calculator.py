from __future__ import annotations

from typing import Iterable

from ..model import PayrollItem, PayrollTotals
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: gross is the sum of every item, deductions included."""

    def compute_totals(self, items: Iterable[PayrollItem]) -> PayrollTotals:
        items = list(items)
        gross = sum(float(i.amount) for i in items)
        deductions = sum(float(i.amount) for i in items if i.is_deduction)
        return PayrollTotals(gross_pay=gross, deductions=deductions, net_pay=gross - deductions)

from __future__ import annotations

from typing import Iterable

from ..model import PayrollItem, PayrollTotals
from .base import PayrollCalculator


class EarningsOnlyPayrollCalculator(PayrollCalculator):
    """Gross counts earnings only; deductions are subtracted once, from net."""

    def compute_totals(self, items: Iterable[PayrollItem]) -> PayrollTotals:
        items = list(items)
        gross = sum(float(i.amount) for i in items if not i.is_deduction)
        deductions = sum(float(i.amount) for i in items if i.is_deduction)
        return PayrollTotals(gross_pay=gross, deductions=deductions, net_pay=gross - deductions)

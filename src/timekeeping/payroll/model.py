from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import PayItemType, PaymentMethod, PayrollStatus


@dataclass(frozen=True)
class PayrollItem:
    type: PayItemType
    description: str
    amount: float
    taxable: bool = True

    @property
    def is_deduction(self) -> bool:
        return self.type == PayItemType.DEDUCTION


@dataclass(frozen=True)
class PayPeriod:
    start_date: date
    end_date: date


@dataclass(frozen=True)
class PayrollTotals:
    gross_pay: float
    deductions: float
    net_pay: float


@dataclass
class PayrollRecord:
    """One employee's pay for one period.

    Totals are derived from ``items`` on every access; the stored
    ``grossPay``/``netPay`` the server returns are never trusted over them.
    """

    employee_id: str
    pay_period: PayPeriod
    items: list[PayrollItem] = field(default_factory=list)
    status: PayrollStatus = PayrollStatus.DRAFT
    payment_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    record_id: Optional[str] = None
    notes: Optional[str] = None

    @property
    def totals(self) -> PayrollTotals:
        gross = sum(float(i.amount) for i in self.items)
        deductions = sum(float(i.amount) for i in self.items if i.is_deduction)
        return PayrollTotals(gross_pay=gross, deductions=deductions, net_pay=gross - deductions)

    @property
    def is_locked(self) -> bool:
        return self.status in (PayrollStatus.PAID, PayrollStatus.CANCELLED)


@dataclass(frozen=True)
class PayrollStats:
    total_records: int = 0
    total_gross: float = 0.0
    total_deductions: float = 0.0
    total_net: float = 0.0
    paid_count: int = 0
    pending_count: int = 0

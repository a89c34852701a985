from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_non_empty
from ..core.enums import PayItemType, PaymentMethod, PayrollStatus
from ..core.exceptions import SequenceError, ValidationError
from ..remote.schemas import PayPeriodWire, PayrollItemWire, PayrollWire, dump_wire
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import PayPeriod, PayrollItem, PayrollRecord, PayrollStats, PayrollTotals
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

_TRANSITIONS: dict[PayrollStatus, set[PayrollStatus]] = {
    PayrollStatus.DRAFT: {PayrollStatus.APPROVED, PayrollStatus.CANCELLED},
    PayrollStatus.APPROVED: {PayrollStatus.PAID, PayrollStatus.CANCELLED},
    PayrollStatus.PAID: set(),
    PayrollStatus.CANCELLED: set(),
}


class PayrollService:
    """Aggregates pay items and guards the payroll status lifecycle.

    Unlike attendance, payroll writes are never queued: remote errors reach
    the caller as they are.
    """

    def __init__(
        self,
        remote: PayrollRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._remote = remote
        self._calculator = calculator or StandardPayrollCalculator()

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    @staticmethod
    def _require_editable(record: PayrollRecord) -> None:
        if record.is_locked:
            raise SequenceError(f"A {record.status.value} payroll record can no longer be changed")

    @staticmethod
    def _validate_item(item: PayrollItem) -> PayrollItem:
        try:
            item_type = PayItemType(item.type)
        except ValueError:
            raise ValidationError(f"Unknown pay item type {item.type!r}") from None
        try:
            amount = float(item.amount)
        except (TypeError, ValueError):
            raise ValidationError("Amount must be a number") from None
        if amount < 0:
            raise ValidationError("Amount must not be negative")
        description = (item.description or "").strip()
        if item_type is item.type and amount == item.amount and description == item.description:
            return item
        return PayrollItem(type=item_type, description=description, amount=amount, taxable=item.taxable)

    def add_item(self, record: PayrollRecord, item: PayrollItem) -> PayrollRecord:
        self._require_editable(record)
        record.items.append(self._validate_item(item))
        return record

    def remove_item(self, record: PayrollRecord, index: int) -> PayrollRecord:
        self._require_editable(record)
        if not 0 <= index < len(record.items):
            raise ValidationError(f"No pay item at position {index}")
        del record.items[index]
        return record

    def compute_totals(self, items: Iterable[PayrollItem]) -> PayrollTotals:
        return self._calculator.compute_totals(items)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def transition_status(
        self,
        record: PayrollRecord,
        new_status: PayrollStatus,
        *,
        payment_date: Optional[date] = None,
        payment_method: Optional[PaymentMethod] = None,
    ) -> PayrollRecord:
        new_status = PayrollStatus(new_status)
        if new_status not in _TRANSITIONS[record.status]:
            raise SequenceError(f"Cannot move payroll from {record.status.value} to {new_status.value}")

        if new_status == PayrollStatus.PAID:
            paid_on = payment_date or record.payment_date
            if paid_on is None:
                raise ValidationError("Payment date is required to mark payroll as paid")
            if isinstance(paid_on, str):
                try:
                    paid_on = parse_iso_date(paid_on)
                except ValueError:
                    raise ValidationError(f"Invalid payment date {paid_on!r}") from None
            method = payment_method or record.payment_method or PaymentMethod.BANK_TRANSFER
            try:
                method = PaymentMethod(method)
            except ValueError:
                raise ValidationError(f"Unknown payment method {method!r}") from None
            # Nothing is written to the record until both values are known good.
            record.payment_date = paid_on
            record.payment_method = method

        logger.info("Payroll %s for %s: %s -> %s", record.record_id or "(new)", record.employee_id, record.status.value, new_status.value)
        record.status = new_status
        return record

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def require_non_empty_items(record: PayrollRecord) -> None:
        if not record.items:
            raise ValidationError("Please add at least one payroll item")

    @staticmethod
    def validate_pay_period(period: PayPeriod) -> None:
        if period.start_date is None or period.end_date is None:
            raise ValidationError("Pay period start and end dates are required")
        if period.end_date < period.start_date:
            raise ValidationError("Pay period end date must not be before its start date")

    # ------------------------------------------------------------------
    # Remote
    # ------------------------------------------------------------------

    def _to_wire(self, record: PayrollRecord) -> dict:
        totals = self.compute_totals(record.items)
        wire = PayrollWire(
            employee_id=record.employee_id,
            pay_period=PayPeriodWire(start_date=record.pay_period.start_date, end_date=record.pay_period.end_date),
            items=[
                PayrollItemWire(type=i.type.value, description=i.description, amount=i.amount, taxable=i.taxable)
                for i in record.items
            ],
            gross_pay=totals.gross_pay,
            deductions=totals.deductions,
            net_pay=totals.net_pay,
            status=record.status.value,
            payment_date=record.payment_date,
            payment_method=record.payment_method.value if record.payment_method else None,
            notes=record.notes,
        )
        body = dump_wire(wire)
        body.pop("id", None)
        return body

    def submit(self, record: PayrollRecord) -> PayrollRecord:
        require_non_empty(record.employee_id or "", "Employee")
        self.validate_pay_period(record.pay_period)
        self.require_non_empty_items(record)
        record.items = [self._validate_item(i) for i in record.items]
        if record.status == PayrollStatus.PAID and (record.payment_date is None or record.payment_method is None):
            raise ValidationError("A paid payroll record needs a payment date and method")

        body = self._to_wire(record)
        if record.record_id:
            saved = self._remote.update(record.record_id, body)
            logger.info("Payroll %s updated", record.record_id)
        else:
            saved = self._remote.create(body)
            logger.info("Payroll created for %s", record.employee_id)

        if saved is None:
            return record
        return saved

    def list_records(self) -> Sequence[PayrollRecord]:
        return self._remote.list_records()

    def get_record(self, record_id: str) -> Optional[PayrollRecord]:
        return self._remote.get(require_non_empty(record_id or "", "Payroll id"))

    def delete_record(self, record_id: str) -> None:
        self._remote.delete(require_non_empty(record_id or "", "Payroll id"))
        logger.info("Payroll %s deleted", record_id)

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def summarize(self, records: Iterable[PayrollRecord]) -> PayrollStats:
        total_records = paid = pending = 0
        gross = deductions = net = 0.0
        for r in records:
            totals = self.compute_totals(r.items)
            total_records += 1
            gross += totals.gross_pay
            deductions += totals.deductions
            net += totals.net_pay
            if r.status == PayrollStatus.PAID:
                paid += 1
            elif r.status in (PayrollStatus.DRAFT, PayrollStatus.APPROVED):
                pending += 1

        return PayrollStats(
            total_records=total_records,
            total_gross=gross,
            total_deductions=deductions,
            total_net=net,
            paid_count=paid,
            pending_count=pending,
        )

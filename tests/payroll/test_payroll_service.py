from __future__ import annotations

from datetime import date
from typing import Optional

import pytest

from timekeeping.core.enums import PayItemType, PaymentMethod, PayrollStatus
from timekeeping.core.exceptions import RemoteRejectionError, SequenceError, TransientNetworkError, ValidationError
from timekeeping.payroll.calculator.earnings_only_calculator import EarningsOnlyPayrollCalculator
from timekeeping.payroll.model import PayPeriod, PayrollItem, PayrollRecord
from timekeeping.payroll.service import PayrollService


class InMemoryPayroll:
    def __init__(self):
        self.created: list[dict] = []
        self.updated: list[tuple[str, dict]] = []
        self.deleted: list[str] = []
        self.records: dict[str, PayrollRecord] = {}
        self.error: Optional[Exception] = None

    def list_records(self):
        return list(self.records.values())

    def get(self, record_id: str) -> Optional[PayrollRecord]:
        return self.records.get(record_id)

    def create(self, body: dict) -> Optional[PayrollRecord]:
        if self.error:
            raise self.error
        self.created.append(body)
        return None

    def update(self, record_id: str, body: dict) -> Optional[PayrollRecord]:
        if self.error:
            raise self.error
        self.updated.append((record_id, body))
        return None

    def delete(self, record_id: str) -> None:
        self.deleted.append(record_id)
        self.records.pop(record_id, None)


def _record(**kwargs) -> PayrollRecord:
    defaults = dict(
        employee_id="EMP001",
        pay_period=PayPeriod(date(2025, 1, 1), date(2025, 1, 31)),
        items=[
            PayrollItem(PayItemType.SALARY, "Base salary", 5000),
            PayrollItem(PayItemType.OVERTIME, "Overtime", 500),
            PayrollItem(PayItemType.DEDUCTION, "tax", 750),
            PayrollItem(PayItemType.DEDUCTION, "NIS", 150),
        ],
    )
    defaults.update(kwargs)
    return PayrollRecord(**defaults)


def test_record_totals_follow_items():
    record = _record()
    assert record.totals.gross_pay == 6400
    assert record.totals.net_pay == 5500

    PayrollService(InMemoryPayroll()).remove_item(record, 2)
    assert record.totals.deductions == 150
    assert record.totals.gross_pay == 5650
    assert record.totals.net_pay == 5500


def test_add_item_validates_amount_and_type():
    svc = PayrollService(InMemoryPayroll())
    record = _record(items=[])

    svc.add_item(record, PayrollItem("bonus", "  Q1 bonus ", 250))
    assert record.items == [PayrollItem(PayItemType.BONUS, "Q1 bonus", 250.0)]

    with pytest.raises(ValidationError):
        svc.add_item(record, PayrollItem(PayItemType.BONUS, "oops", -1))
    with pytest.raises(ValidationError):
        svc.add_item(record, PayrollItem("tip", "unknown", 10))
    assert len(record.items) == 1


def test_remove_item_out_of_range_is_a_validation_error():
    with pytest.raises(ValidationError):
        PayrollService(InMemoryPayroll()).remove_item(_record(), 9)


def test_status_moves_forward_to_paid():
    svc = PayrollService(InMemoryPayroll())
    record = _record()

    svc.transition_status(record, PayrollStatus.APPROVED)
    with pytest.raises(ValidationError):
        svc.transition_status(record, PayrollStatus.PAID)

    svc.transition_status(record, PayrollStatus.PAID, payment_date=date(2025, 2, 5))

    assert record.status == PayrollStatus.PAID
    assert record.payment_date == date(2025, 2, 5)
    assert record.payment_method == PaymentMethod.BANK_TRANSFER


def test_paid_record_is_terminal():
    svc = PayrollService(InMemoryPayroll())
    record = _record(status=PayrollStatus.PAID, payment_date=date(2025, 2, 5))

    for target in (PayrollStatus.DRAFT, PayrollStatus.APPROVED, PayrollStatus.CANCELLED):
        with pytest.raises(SequenceError):
            svc.transition_status(record, target)
    with pytest.raises(SequenceError):
        svc.add_item(record, PayrollItem(PayItemType.BONUS, "late bonus", 10))


@pytest.mark.parametrize(
    "start, allowed",
    [
        (PayrollStatus.DRAFT, True),
        (PayrollStatus.APPROVED, True),
        (PayrollStatus.PAID, False),
        (PayrollStatus.CANCELLED, False),
    ],
)
def test_cancel_only_from_draft_or_approved(start, allowed):
    svc = PayrollService(InMemoryPayroll())
    record = _record(status=start)

    if allowed:
        assert svc.transition_status(record, PayrollStatus.CANCELLED).status == PayrollStatus.CANCELLED
    else:
        with pytest.raises(SequenceError):
            svc.transition_status(record, PayrollStatus.CANCELLED)


def test_draft_cannot_jump_to_paid():
    with pytest.raises(SequenceError):
        PayrollService(InMemoryPayroll()).transition_status(_record(), PayrollStatus.PAID, payment_date=date(2025, 2, 5))


def test_bad_payment_details_leave_record_untouched():
    svc = PayrollService(InMemoryPayroll())
    record = _record(status=PayrollStatus.APPROVED, payment_date=date(2025, 2, 1))

    with pytest.raises(ValidationError):
        svc.transition_status(record, PayrollStatus.PAID, payment_date="2025-13-40")
    with pytest.raises(ValidationError):
        svc.transition_status(record, PayrollStatus.PAID, payment_date="2025-02-05", payment_method="barter")

    assert record.status == PayrollStatus.APPROVED
    assert record.payment_date == date(2025, 2, 1)
    assert record.payment_method is None

    svc.transition_status(record, PayrollStatus.PAID, payment_date="2025-02-05", payment_method="check")
    assert record.payment_date == date(2025, 2, 5)
    assert record.payment_method == PaymentMethod.CHECK


def test_submit_creates_with_totals_on_the_wire():
    remote = InMemoryPayroll()
    svc = PayrollService(remote)

    saved = svc.submit(_record(notes="January"))

    assert saved.employee_id == "EMP001"
    (body,) = remote.created
    assert body["employeeId"] == "EMP001"
    assert body["payPeriod"] == {"startDate": "2025-01-01", "endDate": "2025-01-31"}
    assert (body["grossPay"], body["deductions"], body["netPay"]) == (6400, 900, 5500)
    assert body["status"] == "draft"
    assert body["items"][2] == {"type": "deduction", "description": "tax", "amount": 750, "taxable": True}
    assert "paymentDate" not in body
    assert "id" not in body


def test_submit_with_record_id_updates_using_configured_rule():
    remote = InMemoryPayroll()
    svc = PayrollService(remote, calculator=EarningsOnlyPayrollCalculator())
    record = _record(record_id="p1")
    svc.transition_status(record, PayrollStatus.APPROVED)
    svc.transition_status(record, PayrollStatus.PAID, payment_date=date(2025, 2, 5), payment_method=PaymentMethod.CASH)

    svc.submit(record)

    ((record_id, body),) = remote.updated
    assert record_id == "p1"
    assert body["grossPay"] == 5500
    assert body["netPay"] == 4600
    assert body["paymentDate"] == "2025-02-05"
    assert body["paymentMethod"] == "cash"


def test_submit_validates_before_calling_remote():
    remote = InMemoryPayroll()
    svc = PayrollService(remote)

    with pytest.raises(ValidationError):
        svc.submit(_record(items=[]))
    with pytest.raises(ValidationError):
        svc.submit(_record(pay_period=PayPeriod(date(2025, 2, 1), date(2025, 1, 1))))

    assert remote.created == []


def test_submit_rejects_negative_item_added_directly():
    remote = InMemoryPayroll()
    record = _record()
    record.items.append(PayrollItem(PayItemType.BONUS, "clawback", -200))

    with pytest.raises(ValidationError):
        PayrollService(remote).submit(record)

    assert remote.created == []


def test_submit_paid_record_needs_payment_details():
    remote = InMemoryPayroll()
    svc = PayrollService(remote)

    with pytest.raises(ValidationError):
        svc.submit(_record(status=PayrollStatus.PAID))
    with pytest.raises(ValidationError):
        svc.submit(_record(status=PayrollStatus.PAID, payment_date=date(2025, 2, 5)))

    assert remote.created == []

    svc.submit(_record(status=PayrollStatus.PAID, payment_date=date(2025, 2, 5), payment_method=PaymentMethod.CASH))
    assert remote.created[0]["paymentMethod"] == "cash"


@pytest.mark.parametrize("error", [TransientNetworkError("down"), RemoteRejectionError(422, "bad period")])
def test_submit_surfaces_remote_errors(error):
    remote = InMemoryPayroll()
    remote.error = error

    with pytest.raises(type(error)):
        PayrollService(remote).submit(_record())


def test_get_and_delete_records():
    remote = InMemoryPayroll()
    remote.records["p1"] = _record(record_id="p1")
    svc = PayrollService(remote)

    assert svc.get_record("p1").record_id == "p1"
    svc.delete_record("p1")
    assert remote.deleted == ["p1"]
    assert svc.list_records() == []
    with pytest.raises(ValidationError):
        svc.get_record("")


def test_summarize_counts_paid_and_pending():
    svc = PayrollService(InMemoryPayroll())
    records = [
        _record(),
        _record(status=PayrollStatus.APPROVED),
        _record(status=PayrollStatus.PAID, payment_date=date(2025, 2, 5)),
        _record(status=PayrollStatus.CANCELLED, items=[PayrollItem(PayItemType.SALARY, "Base", 100)]),
    ]

    stats = svc.summarize(records)

    assert stats.total_records == 4
    assert stats.total_gross == 6400 * 3 + 100
    assert stats.total_deductions == 900 * 3
    assert stats.total_net == 5500 * 3 + 100
    assert stats.paid_count == 1
    assert stats.pending_count == 2

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.enums import PayItemType, PaymentMethod, PayrollStatus
from ..core.exceptions import RemoteRejectionError
from ..remote.client import ApiClient
from ..remote.schemas import PayrollWire
from .model import PayPeriod, PayrollItem, PayrollRecord
from .repository import PayrollRepository

logger = logging.getLogger(__name__)


def _wire_to_record(wire: PayrollWire) -> PayrollRecord:
    items = []
    for item in wire.items:
        try:
            item_type = PayItemType(item.type)
        except ValueError:
            logger.warning("Skipping pay item with unknown type %r", item.type)
            continue
        items.append(PayrollItem(type=item_type, description=item.description, amount=item.amount, taxable=item.taxable))

    try:
        status = PayrollStatus(wire.status)
    except ValueError:
        # Lifecycle rules depend on the status, so there is no safe default.
        raise RemoteRejectionError(502, f"Payroll {wire.record_id} has unknown status {wire.status!r}") from None

    payment_method = None
    if wire.payment_method:
        try:
            payment_method = PaymentMethod(wire.payment_method)
        except ValueError:
            logger.warning("Ignoring unknown payment method %r on payroll %s", wire.payment_method, wire.record_id)

    return PayrollRecord(
        employee_id=wire.employee_id,
        pay_period=PayPeriod(start_date=wire.pay_period.start_date, end_date=wire.pay_period.end_date),
        items=items,
        status=status,
        payment_date=wire.payment_date,
        payment_method=payment_method,
        record_id=wire.record_id,
        notes=wire.notes,
    )


class HttpPayrollRepository(PayrollRepository):
    def __init__(self, client: ApiClient):
        self._client = client

    def list_records(self) -> Sequence[PayrollRecord]:
        envelope = self._client.get("/payroll")
        return [_wire_to_record(PayrollWire.model_validate(r)) for r in (envelope.data or [])]

    def get(self, record_id: str) -> Optional[PayrollRecord]:
        try:
            envelope = self._client.get(f"/payroll/{record_id}")
        except RemoteRejectionError as exc:
            if exc.status_code == 404:
                return None
            raise
        if not envelope.data:
            return None
        return _wire_to_record(PayrollWire.model_validate(envelope.data))

    def create(self, body: dict) -> Optional[PayrollRecord]:
        envelope = self._client.post("/payroll", json=body)
        return _wire_to_record(PayrollWire.model_validate(envelope.data)) if envelope.data else None

    def update(self, record_id: str, body: dict) -> Optional[PayrollRecord]:
        envelope = self._client.put(f"/payroll/{record_id}", json=body)
        return _wire_to_record(PayrollWire.model_validate(envelope.data)) if envelope.data else None

    def delete(self, record_id: str) -> None:
        self._client.delete(f"/payroll/{record_id}")

"""Wire DTOs for the attendance and payroll API: pure Pydantic.

The API speaks camelCase JSON and returns documents with ``_id`` keys;
``employeeId`` may come back populated as an embedded employee object.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


def _coerce_id(value: Any) -> Any:
    if isinstance(value, dict):
        return value.get("_id") or value.get("id")
    return value


def _coerce_employee_id(value: Any) -> Any:
    # A populated employee carries its business code next to the database id.
    if isinstance(value, dict):
        return value.get("employeeId") or value.get("_id") or value.get("id")
    return value


def _as_text(value: Any) -> Any:
    return str(value) if value is not None else value


def _coerce_date(value: Any) -> Any:
    # "2026-10-19T00:00:00.000Z" -> "2026-10-19"
    if isinstance(value, str) and len(value) > 10:
        return value[:10]
    if isinstance(value, datetime):
        return value.date()
    return value


class ApiEnvelope(BaseModel):
    success: bool = True
    data: Any = None
    message: Optional[str] = None
    error: Optional[str] = None


class AttendanceWire(BaseModel):
    model_config = {"populate_by_name": True}

    record_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("_id", "id"), serialization_alias="id")
    employee_id: str = Field(alias="employeeId")
    work_date: date = Field(alias="date")
    check_in: Optional[datetime] = Field(default=None, alias="checkIn")
    check_out: Optional[datetime] = Field(default=None, alias="checkOut")
    break_start: Optional[datetime] = Field(default=None, alias="breakStart")
    break_end: Optional[datetime] = Field(default=None, alias="breakEnd")
    total_hours: float = Field(default=0.0, alias="totalHours")
    overtime_hours: float = Field(default=0.0, alias="overtimeHours")
    status: str = "present"
    notes: Optional[str] = None

    @field_validator("record_id", mode="before")
    @classmethod
    def _record_id_as_text(cls, v: Any) -> Any:
        return _as_text(_coerce_id(v))

    @field_validator("employee_id", mode="before")
    @classmethod
    def _employee_id_as_text(cls, v: Any) -> Any:
        return _as_text(_coerce_employee_id(v))

    @field_validator("work_date", mode="before")
    @classmethod
    def _date_only(cls, v: Any) -> Any:
        return _coerce_date(v)


class ClockInRequest(BaseModel):
    model_config = {"populate_by_name": True}

    employee_id: str = Field(alias="employeeId")
    work_date: date = Field(alias="date")
    check_in: datetime = Field(alias="checkIn")
    status: str = "present"


class AttendanceUpdateRequest(BaseModel):
    """PUT body: only the fields being transitioned are sent."""

    model_config = {"populate_by_name": True}

    employee_id: str = Field(alias="employeeId")
    work_date: date = Field(alias="date")
    check_out: Optional[datetime] = Field(default=None, alias="checkOut")
    break_start: Optional[datetime] = Field(default=None, alias="breakStart")
    break_end: Optional[datetime] = Field(default=None, alias="breakEnd")
    notes: Optional[str] = None


class PayrollItemWire(BaseModel):
    type: str
    description: str = ""
    amount: float
    taxable: bool = True


class PayPeriodWire(BaseModel):
    model_config = {"populate_by_name": True}

    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _date_only(cls, v: Any) -> Any:
        return _coerce_date(v)


class PayrollWire(BaseModel):
    model_config = {"populate_by_name": True}

    record_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("_id", "id"), serialization_alias="id")
    employee_id: str = Field(alias="employeeId")
    pay_period: PayPeriodWire = Field(alias="payPeriod")
    items: list[PayrollItemWire] = Field(default_factory=list)
    gross_pay: float = Field(default=0.0, alias="grossPay")
    deductions: float = 0.0
    net_pay: float = Field(default=0.0, alias="netPay")
    status: str = "draft"
    payment_date: Optional[date] = Field(default=None, alias="paymentDate")
    payment_method: Optional[str] = Field(default=None, alias="paymentMethod")
    notes: Optional[str] = None

    @field_validator("record_id", mode="before")
    @classmethod
    def _record_id_as_text(cls, v: Any) -> Any:
        return _as_text(_coerce_id(v))

    @field_validator("employee_id", mode="before")
    @classmethod
    def _employee_id_as_text(cls, v: Any) -> Any:
        return _as_text(_coerce_employee_id(v))

    @field_validator("payment_date", mode="before")
    @classmethod
    def _date_only(cls, v: Any) -> Any:
        return _coerce_date(v)


def dump_wire(model: BaseModel) -> dict:
    """JSON-ready camelCase body without unset optionals."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)

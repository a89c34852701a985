from __future__ import annotations

from ...core.exceptions import ValidationError
from .base import PayrollCalculator
from .earnings_only_calculator import EarningsOnlyPayrollCalculator
from .standard_calculator import StandardPayrollCalculator

_CALCULATORS = {
    "standard": StandardPayrollCalculator,
    "earnings_only": EarningsOnlyPayrollCalculator,
}


def calculator_for_rule(rule: str | None) -> PayrollCalculator:
    """Pick the gross-pay rule by its configured name (default: standard)."""
    key = (rule or "standard").strip().lower()
    try:
        return _CALCULATORS[key]()
    except KeyError:
        raise ValidationError(f"Unknown payroll gross rule {rule!r}") from None

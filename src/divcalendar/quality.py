"""Data quality validation for dividend histories."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from divcalendar.models.dividend import DividendEvent


@dataclass
class ValidationCheck:
    """Single validation check result."""

    name: str
    passed: bool
    message: str = ""


@dataclass
class ValidationResult:
    """Aggregate validation result."""

    checks: list[ValidationCheck] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(c.passed for c in self.checks)

    @property
    def failed_checks(self) -> list[ValidationCheck]:
        return [c for c in self.checks if not c.passed]


def validate_dividends(events: list[DividendEvent]) -> ValidationResult:
    """Run all quality checks on a dividend history.

    Checks:
        1. Not empty
        2. Amount sanity (finite, non-negative)
        3. Pay date on/after ex-date
        4. Ex-date ordering (strictly descending, no duplicates)
    """
    result = ValidationResult()

    # 1. Not empty
    if not events:
        result.checks.append(ValidationCheck("not_empty", False, "No dividends provided"))
        return result
    result.checks.append(ValidationCheck("not_empty", True, f"{len(events)} dividends"))

    # 2. Amount sanity
    bad_amounts = sum(
        1 for e in events
        if math.isnan(e.amount) or math.isinf(e.amount) or e.amount < 0
    )
    if bad_amounts:
        result.checks.append(
            ValidationCheck("amount_sanity", False, f"{bad_amounts} invalid amounts")
        )
    else:
        result.checks.append(ValidationCheck("amount_sanity", True))

    # 3. Pay date on/after ex-date
    early_pay = sum(1 for e in events if e.pay_date is not None and e.pay_date < e.ex_date)
    if early_pay:
        result.checks.append(
            ValidationCheck("pay_after_ex", False, f"{early_pay} pay dates before ex-date")
        )
    else:
        result.checks.append(ValidationCheck("pay_after_ex", True))

    # 4. Ex-date ordering, newest first
    out_of_order = 0
    for i in range(1, len(events)):
        if events[i].ex_date >= events[i - 1].ex_date:
            out_of_order += 1
    if out_of_order:
        result.checks.append(
            ValidationCheck("ex_date_order", False, f"{out_of_order} out of order or duplicate")
        )
    else:
        result.checks.append(ValidationCheck("ex_date_order", True))

    return result

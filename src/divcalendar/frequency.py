"""Dividend payment frequency codes and calendar stepping."""

from __future__ import annotations

from datetime import date
from enum import Enum

from dateutil.relativedelta import relativedelta


class DividendFrequency(Enum):
    """Declared payment period of a dividend-paying stock."""

    WEEKLY = "1W"
    FOUR_WEEKLY = "4W"
    MONTHLY = "1M"
    QUARTERLY = "3M"
    SEMI_ANNUAL = "6M"
    ANNUAL = "1Y"


FALLBACK_FREQUENCY = DividendFrequency.FOUR_WEEKLY

_STEPS: dict[DividendFrequency, relativedelta] = {
    DividendFrequency.WEEKLY: relativedelta(days=7),
    DividendFrequency.FOUR_WEEKLY: relativedelta(days=28),
    DividendFrequency.MONTHLY: relativedelta(months=1),
    DividendFrequency.QUARTERLY: relativedelta(months=3),
    DividendFrequency.SEMI_ANNUAL: relativedelta(months=6),
    DividendFrequency.ANNUAL: relativedelta(years=1),
}

# Polygon reports frequency as payments per year.
_PER_YEAR: dict[DividendFrequency, int] = {
    DividendFrequency.WEEKLY: 52,
    DividendFrequency.FOUR_WEEKLY: 13,
    DividendFrequency.MONTHLY: 12,
    DividendFrequency.QUARTERLY: 4,
    DividendFrequency.SEMI_ANNUAL: 2,
    DividendFrequency.ANNUAL: 1,
}


def parse_frequency(code: str | DividendFrequency | None) -> DividendFrequency:
    """Resolve a frequency code, falling back to ``4W`` for anything unknown.

    The fallback is deliberate: legacy rows carry codes outside the six
    recognized ones and are stepped every 28 days.
    """
    if isinstance(code, DividendFrequency):
        return code
    if code is None:
        return FALLBACK_FREQUENCY
    try:
        return DividendFrequency(str(code).strip().upper())
    except ValueError:
        return FALLBACK_FREQUENCY


def step_date(
    anchor: date,
    frequency: str | DividendFrequency | None,
    periods: int = 1,
) -> date:
    """Return ``anchor`` moved forward by ``periods`` frequency periods.

    Month-based steps are computed from the anchor in one go, so the
    anchor's day-of-month survives short months (Jan 31 -> Feb 29 -> Mar 31).
    """
    if periods < 0:
        raise ValueError(f"periods must be non-negative, got {periods}")
    step = _STEPS[parse_frequency(frequency)]
    return anchor + step * periods


def payments_per_year(frequency: str | DividendFrequency | None) -> int:
    return _PER_YEAR[parse_frequency(frequency)]


def frequency_from_payments_per_year(count: int | None) -> DividendFrequency | None:
    """Map Polygon's numeric ``frequency`` field to a period code."""
    if count is None:
        return None
    for freq, per_year in _PER_YEAR.items():
        if per_year == count:
            return freq
    return None
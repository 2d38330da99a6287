"""Projected next-dividend data model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta


@dataclass(frozen=True)
class ProjectedDividend:
    """Next actionable dividend for a stock.

    Attributes:
        symbol: Ticker symbol.
        next_ex_date: Projected ex-dividend date (display timezone).
        next_pay_date: Projected pay date, stepped like ``next_ex_date``.
        buy_cutoff: Last instant a purchase still earns the dividend,
            timezone-aware in the display timezone.
        is_past_cutoff: Whether the evaluation instant was past
            ``buy_cutoff``. Always False for a freshly projected value.
        periods_advanced: Frequency steps applied to the input event.
    """

    symbol: str
    next_ex_date: date
    next_pay_date: date
    buy_cutoff: datetime
    is_past_cutoff: bool = False
    periods_advanced: int = 0

    def is_past_cutoff_at(self, now: datetime) -> bool:
        return now > self.buy_cutoff

    def time_until_cutoff(self, now: datetime) -> timedelta:
        """Remaining buying window; negative once the cutoff has passed."""
        return self.buy_cutoff - now

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "next_ex_date": self.next_ex_date.isoformat(),
            "next_pay_date": self.next_pay_date.isoformat(),
            "buy_cutoff": self.buy_cutoff.isoformat(),
        }

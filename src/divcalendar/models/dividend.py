"""Dividend event data model."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date


def _iso(day: date | None) -> str | None:
    return day.isoformat() if day else None


@dataclass(frozen=True)
class DividendEvent:
    """One declared cash distribution, as reported by a data provider.

    Only ``ex_date`` and ``pay_date`` drive projection; the other dates are
    carried through for display and caching.

    Attributes:
        symbol: Ticker symbol.
        ex_date: Ex-dividend date.
        amount: Cash amount per share.
        pay_date: Payment date. Projection requires it.
        record_date: Record date.
        declaration_date: Declaration date.
        dividend_type: Polygon type code (CD = regular cash, SC = special cash).
        frequency: Period code (1W, 4W, 1M, 3M, 6M, 1Y); unknown codes step 4W.
        currency: Currency code.
    """

    symbol: str
    ex_date: date
    amount: float = 0.0
    pay_date: date | None = None
    record_date: date | None = None
    declaration_date: date | None = None
    dividend_type: str = "CD"
    frequency: str | None = None
    currency: str = "USD"

    @property
    def pay_gap_days(self) -> int | None:
        """Calendar days between ex-date and pay date."""
        if self.pay_date is None:
            return None
        return (self.pay_date - self.ex_date).days

    def with_frequency(self, frequency: str | None) -> DividendEvent:
        """Copy with ``frequency`` overridden; ``None`` keeps the reported one."""
        if not frequency:
            return self
        return replace(self, frequency=frequency)

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "ex_date": self.ex_date.isoformat(),
            "amount": self.amount,
            "pay_date": _iso(self.pay_date),
            "record_date": _iso(self.record_date),
            "declaration_date": _iso(self.declaration_date),
            "dividend_type": self.dividend_type,
            "frequency": self.frequency,
            "currency": self.currency,
        }

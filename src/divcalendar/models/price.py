"""Daily close price data model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class ClosePrice:
    """Adjusted daily close for a symbol.

    Attributes:
        symbol: Ticker symbol.
        day: Trading date (exchange local).
        close: Adjusted close price.
    """

    symbol: str
    day: date
    close: float

"""Tracked dividend stock data model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DividendStock:
    """A stock or ETF tracked by the dividend dashboard.

    Attributes:
        ticker: Ticker symbol.
        name: Display name.
        issuer: Fund issuer (e.g. YieldMax, Roundhill).
        group_name: Payout group within the issuer (A, B, C, D, Weekly, ...).
        dividend_frequency: Period code used for projection.
        is_active: Whether the stock is still listed on the dashboard.
    """

    ticker: str
    name: str = ""
    issuer: str = ""
    group_name: str = ""
    dividend_frequency: str | None = None
    is_active: bool = True

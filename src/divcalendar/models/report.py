"""Dashboard, ranking and group-schedule view models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from divcalendar.models.projection import ProjectedDividend
from divcalendar.models.stock import DividendStock


@dataclass(frozen=True)
class DividendScore:
    """Return-based score over the current payout pattern.

    Attributes:
        dividend_score: 0-100 score of the dividend return rate.
        dividend_return_rate: Dividends received / start price, in percent.
        price_return_rate: Price change over the window, in percent.
        total_return_rate: Dividends plus price change, in percent.
        total_score: Score of the total return rate, -100 to 100.
        period_count: Number of dividends in the window.
        trend: "up", "down" or "stable".
        trend_percentage: Newer-half vs older-half average amount change.
        start_date: Oldest ex-date in the window.
        end_date: Evaluation date.
    """

    dividend_score: float = 0.0
    dividend_return_rate: float = 0.0
    price_return_rate: float = 0.0
    total_return_rate: float = 0.0
    total_score: float = 0.0
    period_count: int = 0
    trend: str = "stable"
    trend_percentage: float = 0.0
    start_date: date | None = None
    end_date: date | None = None

    @classmethod
    def empty(cls) -> DividendScore:
        """Score for a stock whose return cannot be measured."""
        return cls()

    def to_dict(self) -> dict:
        return {
            "dividend_score": self.dividend_score,
            "dividend_return_rate": self.dividend_return_rate,
            "stock_price_return_rate": self.price_return_rate,
            "total_return_rate": self.total_return_rate,
            "total_score": self.total_score,
            "calculation_period_count": self.period_count,
            "dividend_trend": self.trend,
            "trend_percentage": self.trend_percentage,
            "calculation_start_date": self.start_date.isoformat() if self.start_date else None,
            "calculation_end_date": self.end_date.isoformat() if self.end_date else None,
        }


@dataclass(frozen=True)
class DashboardEntry:
    """One row of the upcoming-dividend dashboard."""

    stock: DividendStock
    current_price: float | None = None
    dividend_yield: float | None = None
    forward_yield: float | None = None
    projection: ProjectedDividend | None = None

    @property
    def next_ex_date(self) -> date | None:
        return self.projection.next_ex_date if self.projection else None

    def to_dict(self) -> dict:
        p = self.projection
        return {
            "ticker": self.stock.ticker,
            "name": self.stock.name,
            "issuer": self.stock.issuer,
            "group_name": self.stock.group_name,
            "dividend_frequency": self.stock.dividend_frequency,
            "current_price": self.current_price,
            "dividend_yield": self.dividend_yield,
            "forward_yield": self.forward_yield,
            "next_ex_date": p.next_ex_date.isoformat() if p else None,
            "next_pay_date": p.next_pay_date.isoformat() if p else None,
            "buy_cutoff": p.buy_cutoff.isoformat() if p else None,
            "is_active": self.stock.is_active,
        }


@dataclass(frozen=True)
class RankingEntry:
    """One row of the dividend score ranking."""

    stock: DividendStock
    score: DividendScore = field(default_factory=DividendScore.empty)
    current_price: float | None = None
    dividend_yield: float | None = None
    projection: ProjectedDividend | None = None

    def to_dict(self) -> dict:
        p = self.projection
        data = {
            "ticker": self.stock.ticker,
            "name": self.stock.name,
            "issuer": self.stock.issuer,
            "group_name": self.stock.group_name,
            "dividend_frequency": self.stock.dividend_frequency,
            "current_price": self.current_price,
            "dividend_yield": self.dividend_yield,
            "next_ex_date": p.next_ex_date.isoformat() if p else None,
            "next_pay_date": p.next_pay_date.isoformat() if p else None,
        }
        data.update(self.score.to_dict())
        return data


@dataclass
class GroupSchedule:
    """Nearest upcoming dividend of an issuer's payout group."""

    issuer: str
    group_name: str
    etf_count: int
    sample_ticker: str
    dividend_frequency: str | None = None
    next_ex_date: date | None = None
    next_pay_date: date | None = None
    buy_cutoff: datetime | None = None
    time_until_cutoff: timedelta | None = None

    def to_dict(self) -> dict:
        return {
            "issuer": self.issuer,
            "group_name": self.group_name,
            "etf_count": self.etf_count,
            "sample_ticker": self.sample_ticker,
            "dividend_frequency": self.dividend_frequency,
            "next_ex_date": self.next_ex_date.isoformat() if self.next_ex_date else None,
            "next_pay_date": self.next_pay_date.isoformat() if self.next_pay_date else None,
            "buy_cutoff": self.buy_cutoff.isoformat() if self.buy_cutoff else None,
            "time_until_ex_date": (
                int(self.time_until_cutoff.total_seconds() * 1000)
                if self.time_until_cutoff is not None else None
            ),
        }

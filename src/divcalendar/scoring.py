"""Dividend yield, return and trend scoring.

Scores are computed over the *current payout pattern*: when a fund changes
its payout cadence (say monthly to weekly) only dividends since the change
count, capped at the trailing twelve months.
"""

from __future__ import annotations

from datetime import date

from dateutil.relativedelta import relativedelta

from divcalendar.frequency import payments_per_year
from divcalendar.models.dividend import DividendEvent
from divcalendar.models.report import DividendScore

# Interval drift (days) that marks a change of payout pattern.
PATTERN_TOLERANCE_DAYS = 10
# Relative change (%) below which the payout trend is "stable".
STABLE_TREND_PERCENT = 5.0


def trailing_annual_dividend(dividends: list[DividendEvent], as_of: date) -> float:
    """Sum of cash paid with an ex-date in the year before ``as_of``."""
    one_year_ago = as_of - relativedelta(years=1)
    return sum(d.amount for d in dividends if d.ex_date >= one_year_ago)


def forward_annual_dividend(latest: DividendEvent, frequency: str | None = None) -> float:
    """Latest payout annualized by its declared frequency."""
    return latest.amount * payments_per_year(frequency or latest.frequency)


def dividend_yield(annual_dividend: float, price: float | None) -> float | None:
    """Yield in percent, or None when it cannot be computed."""
    if not price or price <= 0 or annual_dividend <= 0:
        return None
    return round(annual_dividend / price * 100, 2)


def calculation_window(dividends: list[DividendEvent], as_of: date) -> list[DividendEvent]:
    """Dividends of the current payout pattern within the last 12 months.

    Args:
        dividends: History ordered by ex_date descending.
        as_of: Evaluation date.
    """
    twelve_months_ago = as_of - relativedelta(months=12)
    if len(dividends) < 2:
        return [d for d in dividends if d.ex_date >= twelve_months_ago]

    intervals = [
        abs((dividends[i].ex_date - dividends[i + 1].ex_date).days)
        for i in range(len(dividends) - 1)
    ]
    current = intervals[0]
    change_index = 0
    for i in range(1, len(intervals)):
        if abs(intervals[i] - current) > PATTERN_TOLERANCE_DAYS:
            change_index = i
            break

    start = twelve_months_ago
    if change_index > 0:
        start = max(dividends[change_index].ex_date, twelve_months_ago)
    return [d for d in dividends if d.ex_date >= start]


def dividend_return_score(rate: float) -> float:
    """Map a dividend return rate (%) onto 0-100."""
    if rate <= 0:
        score = 0.0
    elif rate <= 1:
        score = rate * 10
    elif rate <= 5:
        score = 10 + (rate - 1) * 5
    elif rate <= 10:
        score = 30 + (rate - 5) * 4
    elif rate <= 20:
        score = 50 + (rate - 10) * 2
    elif rate <= 30:
        score = 70 + (rate - 20) * 1.5
    else:
        score = 85 + min(15.0, (rate - 30) * 0.75)
    return min(100.0, score)


def total_return_score(rate: float) -> float:
    """Map a total return rate (%) onto -100..100; losses score negative."""
    if rate < 0:
        return max(-100.0, rate * 2)
    if rate <= 2:
        return rate * 8
    if rate <= 10:
        return 16 + (rate - 2) * 4
    if rate <= 20:
        return 48 + (rate - 10) * 3
    if rate <= 30:
        return 78 + (rate - 20) * 1.5
    return 93 + min(7.0, (rate - 30) * 0.35)


def dividend_trend(window: list[DividendEvent]) -> tuple[str, float]:
    """Compare the newer half's average payout against the older half's.

    Returns:
        ("up" | "down" | "stable", change in percent).
    """
    half = len(window) // 2
    newer, older = window[:half], window[half:]
    if not newer or not older:
        return "stable", 0.0
    older_avg = sum(d.amount for d in older) / len(older)
    newer_avg = sum(d.amount for d in newer) / len(newer)
    if older_avg <= 0:
        return "stable", 0.0
    change = (newer_avg - older_avg) / older_avg * 100
    if abs(change) < STABLE_TREND_PERCENT:
        return "stable", round(change, 1)
    return ("up" if change > 0 else "down"), round(change, 1)


def score_dividends(
    window: list[DividendEvent],
    start_price: float | None,
    current_price: float | None,
    as_of: date,
) -> DividendScore:
    """Score a calculation window bought at ``start_price``.

    Total return treats the position as one share bought at the window's
    first ex-date: ``(current_price + dividends - start_price) / start_price``.
    """
    if len(window) < 2 or not start_price or not current_price:
        return DividendScore.empty()

    total_dividends = sum(d.amount for d in window)
    dividend_rate = total_dividends / start_price * 100
    price_rate = (current_price - start_price) / start_price * 100
    total_rate = (current_price + total_dividends - start_price) / start_price * 100
    trend, trend_pct = dividend_trend(window)

    return DividendScore(
        dividend_score=round(dividend_return_score(dividend_rate), 1),
        dividend_return_rate=round(dividend_rate, 2),
        price_return_rate=round(price_rate, 2),
        total_return_rate=round(total_rate, 2),
        total_score=round(total_return_score(total_rate), 1),
        period_count=len(window),
        trend=trend,
        trend_percentage=trend_pct,
        start_date=window[-1].ex_date,
        end_date=as_of,
    )

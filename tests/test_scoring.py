"""Tests for yield, return scores and payout trend."""

from datetime import date, timedelta

import pytest
from dateutil.relativedelta import relativedelta

from divcalendar.models.dividend import DividendEvent
from divcalendar.scoring import (
    calculation_window,
    dividend_return_score,
    dividend_trend,
    dividend_yield,
    forward_annual_dividend,
    score_dividends,
    total_return_score,
    trailing_annual_dividend,
)

from conftest import weekly_history


def _amounts(*amounts):
    start = date(2024, 3, 1)
    return [
        DividendEvent(symbol="JEPQ", ex_date=start - timedelta(weeks=i), amount=a)
        for i, a in enumerate(amounts)
    ]


class TestYield:
    def test_trailing_annual(self):
        history = weekly_history("JEPQ", date(2024, 3, 1), 60, amount=0.1)
        # 52 Friday ex-dates fall on or after 2023-03-04
        assert trailing_annual_dividend(history, date(2024, 3, 4)) == pytest.approx(5.2)

    def test_forward_annual(self):
        latest = DividendEvent(symbol="JEPQ", ex_date=date(2024, 3, 1), amount=0.4, frequency="1M")
        assert forward_annual_dividend(latest) == pytest.approx(4.8)
        assert forward_annual_dividend(latest, "1W") == pytest.approx(20.8)
        assert forward_annual_dividend(latest, "9Z") == pytest.approx(5.2)

    def test_yield(self):
        assert dividend_yield(2.4, 20.0) == 12.0

    @pytest.mark.parametrize("annual, price", [(0.0, 20.0), (1.0, 0.0), (1.0, None), (1.0, -3.0)])
    def test_yield_unavailable(self, annual, price):
        assert dividend_yield(annual, price) is None


class TestScoreCurves:
    @pytest.mark.parametrize("rate, expected", [
        (-1, 0), (0, 0), (0.5, 5), (1, 10), (3, 20), (5, 30), (7.5, 40),
        (10, 50), (15, 60), (20, 70), (25, 77.5), (30, 85), (40, 92.5), (100, 100),
    ])
    def test_dividend_return_score(self, rate, expected):
        assert dividend_return_score(rate) == pytest.approx(expected)

    @pytest.mark.parametrize("rate, expected", [
        (-80, -100), (-10, -20), (0, 0), (1, 8), (2, 16), (6, 32), (10, 48),
        (15, 63), (20, 78), (25, 85.5), (30, 93), (40, 96.5), (100, 100),
    ])
    def test_total_return_score(self, rate, expected):
        assert total_return_score(rate) == pytest.approx(expected)


class TestTrend:
    def test_up(self):
        assert dividend_trend(_amounts(0.6, 0.6, 0.5, 0.5)) == ("up", 20.0)

    def test_down(self):
        assert dividend_trend(_amounts(0.4, 0.5)) == ("down", -20.0)

    def test_stable(self):
        label, pct = dividend_trend(_amounts(0.51, 0.5, 0.5, 0.5))
        assert label == "stable"
        assert pct == pytest.approx(1.0)

    def test_too_short(self):
        assert dividend_trend(_amounts(0.5)) == ("stable", 0.0)


class TestCalculationWindow:
    def test_steady_pattern_capped_at_twelve_months(self):
        history = [
            DividendEvent(symbol="JEPI", ex_date=date(2024, 6, 15) - relativedelta(months=m), amount=0.4)
            for m in range(18)
        ]
        window = calculation_window(history, date(2024, 6, 15))
        assert window[0].ex_date == date(2024, 6, 15)
        assert window[-1].ex_date == date(2023, 6, 15)
        assert len(window) == 13

    def test_pattern_change_starts_window(self):
        ex_dates = [
            date(2024, 3, 1), date(2024, 2, 23), date(2024, 2, 16), date(2024, 2, 9),
            date(2024, 1, 12), date(2023, 12, 12), date(2023, 11, 12),
        ]
        history = [DividendEvent(symbol="NVDY", ex_date=d, amount=0.5) for d in ex_dates]
        window = calculation_window(history, date(2024, 3, 4))
        assert [d.ex_date for d in window] == ex_dates[:4]

    def test_single_dividend(self):
        history = [DividendEvent(symbol="NEW", ex_date=date(2024, 3, 1), amount=0.5)]
        assert calculation_window(history, date(2024, 3, 4)) == history


class TestScoreDividends:
    def test_score(self):
        window = weekly_history("JEPQ", date(2024, 3, 1), 4)
        score = score_dividends(window, 20.0, 19.0, date(2024, 3, 4))
        assert score.dividend_return_rate == pytest.approx(10.0)
        assert score.dividend_score == pytest.approx(50.0)
        assert score.price_return_rate == pytest.approx(-5.0)
        assert score.total_return_rate == pytest.approx(5.0)
        assert score.total_score == pytest.approx(28.0)
        assert score.period_count == 4
        assert score.trend == "stable"
        assert score.start_date == date(2024, 2, 9)
        assert score.end_date == date(2024, 3, 4)

    def test_short_window_is_empty(self):
        window = weekly_history("JEPQ", date(2024, 3, 1), 1)
        assert score_dividends(window, 20.0, 19.0, date(2024, 3, 4)).period_count == 0

    def test_missing_start_price_is_empty(self):
        window = weekly_history("JEPQ", date(2024, 3, 1), 4)
        assert score_dividends(window, None, 19.0, date(2024, 3, 4)).total_score == 0.0

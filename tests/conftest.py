"""Shared fixtures for divcalendar tests."""

from __future__ import annotations

import sys
from datetime import date, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

# Ensure src/ is on the path for editable-style imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from divcalendar.models.dividend import DividendEvent
from divcalendar.models.stock import DividendStock
from divcalendar.providers.mock import MockProvider

SEOUL = ZoneInfo("Asia/Seoul")


def make_event(
    ex_date: date,
    pay_date: date | None,
    frequency: str | None = "1M",
    symbol: str = "TEST",
    amount: float = 0.5,
) -> DividendEvent:
    return DividendEvent(
        symbol=symbol,
        ex_date=ex_date,
        amount=amount,
        pay_date=pay_date,
        frequency=frequency,
    )


def weekly_history(
    symbol: str,
    latest_ex: date,
    count: int,
    amount: float = 0.5,
    pay_gap: int = 7,
) -> list[DividendEvent]:
    """``count`` weekly dividends ending at ``latest_ex``, newest first."""
    events = []
    for i in range(count):
        ex = latest_ex - timedelta(weeks=i)
        events.append(DividendEvent(
            symbol=symbol,
            ex_date=ex,
            amount=amount,
            pay_date=ex + timedelta(days=pay_gap),
            frequency="1W",
        ))
    return events


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()


@pytest.fixture
def sample_history() -> list[DividendEvent]:
    """Four weekly dividends, newest 2024-03-01."""
    return weekly_history("JEPQ", date(2024, 3, 1), 4)


@pytest.fixture
def sample_stock() -> DividendStock:
    return DividendStock(
        ticker="JEPQ",
        name="JPMorgan Nasdaq Equity Premium Income ETF",
        issuer="JPMorgan",
        group_name="Monthly",
        dividend_frequency="1M",
    )

"""Tests for the mock provider."""

from datetime import date

from divcalendar.config import DividendProviderType
from divcalendar.models.dividend import DividendEvent
from divcalendar.models.price import ClosePrice
from divcalendar.providers import create_provider
from divcalendar.providers.mock import MockProvider


class TestMockProvider:
    def test_registry(self):
        assert isinstance(create_provider(DividendProviderType.MOCK), MockProvider)

    def test_dividends_newest_first(self, mock_provider):
        mock_provider.set_dividends("jepq", [
            DividendEvent(symbol="JEPQ", ex_date=date(2024, 1, 5)),
            DividendEvent(symbol="JEPQ", ex_date=date(2024, 3, 1)),
            DividendEvent(symbol="JEPQ", ex_date=date(2024, 2, 2)),
        ])
        events = mock_provider.get_dividends("JEPQ")
        assert [e.ex_date for e in events] == [
            date(2024, 3, 1), date(2024, 2, 2), date(2024, 1, 5),
        ]
        assert len(mock_provider.get_dividends("JEPQ", limit=1)) == 1

    def test_unknown_symbol(self, mock_provider):
        assert mock_provider.get_dividends("NONE") == []

    def test_closes_window(self, mock_provider):
        mock_provider.set_closes("JEPQ", [
            ClosePrice(symbol="JEPQ", day=date(2024, 2, 7), close=21.0),
            ClosePrice(symbol="JEPQ", day=date(2024, 2, 5), close=20.0),
            ClosePrice(symbol="JEPQ", day=date(2024, 2, 20), close=22.0),
        ])
        closes = mock_provider.get_daily_closes("JEPQ", date(2024, 2, 1), date(2024, 2, 10))
        assert [c.close for c in closes] == [20.0, 21.0]

    def test_previous_close_fallbacks(self):
        provider = MockProvider(default_close=33.0)
        assert provider.get_previous_close("AAA") == 33.0
        provider.set_closes("AAA", [ClosePrice(symbol="AAA", day=date(2024, 2, 5), close=30.0)])
        assert provider.get_previous_close("AAA") == 30.0
        provider.set_previous_close("AAA", 31.5)
        assert provider.get_previous_close("AAA") == 31.5

    def test_records_calls(self, mock_provider):
        mock_provider.get_dividends("aaa")
        mock_provider.get_previous_close("aaa")
        assert mock_provider.calls == [("dividends", "AAA"), ("previous_close", "AAA")]

    def test_capabilities(self, mock_provider):
        assert mock_provider.capabilities() == {"dividends", "previous_close", "daily_closes"}

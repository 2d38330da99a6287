"""Mock provider for testing and CI — no API keys required."""

from __future__ import annotations

from datetime import date

from divcalendar.models.dividend import DividendEvent
from divcalendar.models.price import ClosePrice
from divcalendar.providers.base import BaseDividendProvider


class MockProvider(BaseDividendProvider):
    """In-memory provider that returns configurable static data.

    Use ``set_dividends``, ``set_closes`` and ``set_previous_close`` to
    pre-load data. Symbols without a preloaded close report
    ``default_close``.
    """

    def __init__(self, default_close: float = 20.0) -> None:
        self.default_close = default_close
        self._dividends: dict[str, list[DividendEvent]] = {}
        self._closes: dict[str, list[ClosePrice]] = {}
        self._previous_close: dict[str, float] = {}
        self.calls: list[tuple[str, str]] = []

    # --- Pre-load helpers ---

    def set_dividends(self, symbol: str, events: list[DividendEvent]) -> None:
        self._dividends[symbol.upper()] = sorted(
            events, key=lambda e: e.ex_date, reverse=True,
        )

    def set_closes(self, symbol: str, closes: list[ClosePrice]) -> None:
        self._closes[symbol.upper()] = sorted(closes, key=lambda c: c.day)

    def set_previous_close(self, symbol: str, close: float) -> None:
        self._previous_close[symbol.upper()] = close

    # --- Provider implementation ---

    def get_dividends(self, symbol: str, limit: int = 20) -> list[DividendEvent]:
        key = symbol.upper()
        self.calls.append(("dividends", key))
        return self._dividends.get(key, [])[:limit]

    def get_previous_close(self, symbol: str) -> float:
        key = symbol.upper()
        self.calls.append(("previous_close", key))
        if key in self._previous_close:
            return self._previous_close[key]
        closes = self._closes.get(key)
        if closes:
            return closes[-1].close
        return self.default_close

    def get_daily_closes(self, symbol: str, start: date, end: date) -> list[ClosePrice]:
        key = symbol.upper()
        self.calls.append(("daily_closes", key))
        return [c for c in self._closes.get(key, []) if start <= c.day <= end]

    def capabilities(self) -> set[str]:
        return {"dividends", "previous_close", "daily_closes"}

"""Polygon.io data provider.

Supports both the official ``polygon-api-client`` SDK and a direct
REST fallback using ``requests``.

Install the optional dependency:
    pip install divcalendar[polygon]
"""

from __future__ import annotations

import itertools
import os
import time
from datetime import date, datetime
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

from divcalendar.errors import DividendError, DividendErrorCode
from divcalendar.frequency import frequency_from_payments_per_year
from divcalendar.models.dividend import DividendEvent
from divcalendar.models.price import ClosePrice
from divcalendar.providers.base import BaseDividendProvider

# Fix broken CURL_CA_BUNDLE env var
_curl_ca = os.environ.get("CURL_CA_BUNDLE", "")
if _curl_ca and not Path(_curl_ca).exists():
    del os.environ["CURL_CA_BUNDLE"]

try:
    from polygon import RESTClient
    _SDK_AVAILABLE = True
except ImportError:
    _SDK_AVAILABLE = False

# Daily aggregate timestamps mark the session start in New York.
_ET = ZoneInfo("America/New_York")


def _parse_date(value: Any) -> date | None:
    if not value:
        return None
    return date.fromisoformat(str(value)[:10])


def _frequency_code(value: Any) -> str | None:
    if value in (None, ""):
        return None
    freq = frequency_from_payments_per_year(int(value))
    return freq.value if freq else None


def _wrap_error(operation: str, symbol: str, exc: Exception) -> DividendError:
    """Wrap a transport or SDK failure; every such failure is retryable."""
    code = DividendErrorCode.PROVIDER_ERROR
    if isinstance(exc, TimeoutError) or "timeout" in type(exc).__name__.lower():
        code = DividendErrorCode.TIMEOUT
    return DividendError(
        f"Polygon {operation} failed: {exc}",
        code=code,
        retryable=True,
        symbol=symbol,
    )


class PolygonProvider(BaseDividendProvider):
    """Fetch dividends and closes from Polygon.io API.

    Capabilities: dividends, previous_close, daily_closes.
    """

    def __init__(self, api_key: str | None = None) -> None:
        self.api_key = api_key or os.getenv("POLYGON_API_KEY")
        if not self.api_key:
            raise DividendError(
                "Polygon API key required. Set POLYGON_API_KEY env var or pass api_key.",
                code=DividendErrorCode.AUTH_FAILED,
            )

        if _SDK_AVAILABLE:
            self.client: Any = RESTClient(self.api_key)
        else:
            import requests as _req

            self.client = None
            self.session = _req.Session()
            self.base_url = "https://api.polygon.io"
            import certifi
            self.session.verify = certifi.where()

    def capabilities(self) -> set[str]:
        return {"dividends", "previous_close", "daily_closes"}

    # ------------------------------------------------------------ dividends

    def get_dividends(self, symbol: str, limit: int = 20) -> list[DividendEvent]:
        try:
            if _SDK_AVAILABLE and self.client is not None:
                return self._dividends_sdk(symbol, limit)
            return self._dividends_rest(symbol, limit)
        except DividendError:
            raise
        except Exception as exc:
            raise _wrap_error("get_dividends", symbol, exc) from exc

    def _dividends_sdk(self, symbol: str, limit: int) -> list[DividendEvent]:
        divs = self.client.list_dividends(
            ticker=symbol.upper(),
            limit=limit,
            sort="ex_dividend_date",
            order="desc",
        )
        events: list[DividendEvent] = []
        for d in itertools.islice(divs, limit):
            ex_date = _parse_date(getattr(d, "ex_dividend_date", None))
            if ex_date is None:
                continue
            events.append(DividendEvent(
                symbol=symbol.upper(),
                ex_date=ex_date,
                amount=float(getattr(d, "cash_amount", 0) or 0),
                pay_date=_parse_date(getattr(d, "pay_date", None)),
                record_date=_parse_date(getattr(d, "record_date", None)),
                declaration_date=_parse_date(getattr(d, "declaration_date", None)),
                dividend_type=getattr(d, "dividend_type", "CD") or "CD",
                frequency=_frequency_code(getattr(d, "frequency", None)),
                currency=getattr(d, "currency", "USD") or "USD",
            ))
        return events

    def _dividends_rest(self, symbol: str, limit: int) -> list[DividendEvent]:
        url = f"{self.base_url}/v3/reference/dividends"
        params: dict[str, Any] = {
            "apiKey": self.api_key,
            "ticker": symbol.upper(),
            "limit": limit,
            "sort": "ex_dividend_date",
            "order": "desc",
        }
        resp = self.session.get(url, params=params)
        self._check_response(resp)

        events: list[DividendEvent] = []
        for r in resp.json().get("results", []):
            ex_date = _parse_date(r.get("ex_dividend_date"))
            if ex_date is None:
                continue
            events.append(DividendEvent(
                symbol=symbol.upper(),
                ex_date=ex_date,
                amount=float(r.get("cash_amount", 0) or 0),
                pay_date=_parse_date(r.get("pay_date")),
                record_date=_parse_date(r.get("record_date")),
                declaration_date=_parse_date(r.get("declaration_date")),
                dividend_type=r.get("dividend_type", "CD") or "CD",
                frequency=_frequency_code(r.get("frequency")),
                currency=r.get("currency", "USD") or "USD",
            ))
        return events[:limit]

    # ------------------------------------------------------- previous close

    def get_previous_close(self, symbol: str) -> float:
        try:
            if _SDK_AVAILABLE and self.client is not None:
                close = self._previous_close_sdk(symbol)
            else:
                close = self._previous_close_rest(symbol)
        except DividendError:
            raise
        except Exception as exc:
            raise _wrap_error("get_previous_close", symbol, exc) from exc
        if close is None:
            raise DividendError(
                f"No previous close for {symbol.upper()}",
                code=DividendErrorCode.NO_DATA,
                retryable=True,
            )
        return round(close, 2)

    def _previous_close_sdk(self, symbol: str) -> float | None:
        aggs = self.client.get_previous_close_agg(symbol.upper(), adjusted=True)
        for agg in aggs or []:
            if getattr(agg, "close", None) is not None:
                return float(agg.close)
        return None

    def _previous_close_rest(self, symbol: str) -> float | None:
        url = f"{self.base_url}/v2/aggs/ticker/{symbol.upper()}/prev"
        resp = self.session.get(url, params={"apiKey": self.api_key, "adjusted": "true"})
        self._check_response(resp)
        results = resp.json().get("results") or []
        if not results or results[0].get("c") is None:
            return None
        return float(results[0]["c"])

    # --------------------------------------------------------- daily closes

    def get_daily_closes(self, symbol: str, start: date, end: date) -> list[ClosePrice]:
        try:
            if _SDK_AVAILABLE and self.client is not None:
                return self._closes_sdk(symbol, start, end)
            return self._closes_rest(symbol, start, end)
        except DividendError:
            raise
        except Exception as exc:
            raise _wrap_error("get_daily_closes", symbol, exc) from exc

    def _closes_sdk(self, symbol: str, start: date, end: date) -> list[ClosePrice]:
        aggs = self.client.get_aggs(
            ticker=symbol.upper(),
            multiplier=1,
            timespan="day",
            from_=start.isoformat(),
            to=end.isoformat(),
            adjusted=True,
            sort="asc",
            limit=50000,
        )
        return [
            ClosePrice(
                symbol=symbol.upper(),
                day=self._session_date(a.timestamp),
                close=float(a.close),
            )
            for a in aggs
        ]

    def _closes_rest(self, symbol: str, start: date, end: date) -> list[ClosePrice]:
        closes: list[ClosePrice] = []
        url: str | None = (
            f"{self.base_url}/v2/aggs/ticker/{symbol.upper()}"
            f"/range/1/day/{start}/{end}"
        )
        params: dict[str, Any] = {
            "apiKey": self.api_key,
            "adjusted": "true",
            "sort": "asc",
            "limit": 50000,
        }

        while url:
            resp = self.session.get(url, params=params)
            self._check_response(resp)
            data = resp.json()

            for r in data.get("results", []):
                closes.append(ClosePrice(
                    symbol=symbol.upper(),
                    day=self._session_date(r["t"]),
                    close=float(r["c"]),
                ))

            next_url = data.get("next_url")
            if next_url:
                url = next_url
                params = {"apiKey": self.api_key}
                time.sleep(0.25)
            else:
                url = None

        return closes

    @staticmethod
    def _session_date(timestamp_ms: int) -> date:
        return datetime.fromtimestamp(timestamp_ms / 1000, tz=_ET).date()

    # ------------------------------------------------------------ internals

    def _check_response(self, resp: Any) -> None:
        if resp.status_code == 429:
            raise DividendError(
                "Polygon rate limited",
                code=DividendErrorCode.RATE_LIMITED,
                retryable=True,
            )
        if resp.status_code == 403:
            raise DividendError(
                "Polygon authentication failed",
                code=DividendErrorCode.AUTH_FAILED,
            )
        if resp.status_code == 404:
            raise DividendError(
                "Symbol not found on Polygon",
                code=DividendErrorCode.NOT_FOUND,
            )
        resp.raise_for_status()

"""DividendService — cache + provider fallback + projection and views."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from functools import cmp_to_key
from typing import Any, Callable, TypeVar

from divcalendar.cache import CacheBackend, MemoryCache, NoCache, ParquetCache
from divcalendar.config import DividendConfig
from divcalendar.errors import DividendError, DividendErrorCode
from divcalendar.models.dividend import DividendEvent
from divcalendar.models.projection import ProjectedDividend
from divcalendar.models.report import (
    DashboardEntry,
    DividendScore,
    GroupSchedule,
    RankingEntry,
)
from divcalendar.models.stock import DividendStock
from divcalendar.projector import DividendProjector
from divcalendar.providers import create_provider
from divcalendar.providers.base import BaseDividendProvider
from divcalendar.quality import validate_dividends
from divcalendar.scoring import (
    calculation_window,
    dividend_yield,
    forward_annual_dividend,
    score_dividends,
    trailing_annual_dividend,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

WEEKLY_GROUP = "Weekly"
ROTATION_GROUPS = ("A", "B", "C", "D")


class DividendService:
    """Central orchestrator: cache -> provider -> validate -> fallback -> project.

    Usage::

        from divcalendar import create_service_from_env
        svc = create_service_from_env()
        rows = svc.dashboard(stocks, datetime.now(timezone.utc))
    """

    def __init__(self, config: DividendConfig) -> None:
        self.config = config
        self.projector = DividendProjector.from_config(config)

        # Build provider chain
        self.providers: list[BaseDividendProvider] = []
        for pt in config.providers:
            kwargs: dict[str, Any] = {}
            if pt.value == "polygon" and config.polygon_api_key:
                kwargs["api_key"] = config.polygon_api_key
            self.providers.append(create_provider(pt, **kwargs))

        # Build cache
        self.cache: CacheBackend
        if config.cache_backend == "parquet":
            self.cache = ParquetCache(
                config.cache_dir, max_age_seconds=config.cache_ttl_seconds,
            )
        elif config.cache_backend == "memory":
            self.cache = MemoryCache(ttl_seconds=config.cache_ttl_seconds)
        else:
            self.cache = NoCache()

    # ------------------------------------------------------------ dividends

    def get_dividends(self, symbol: str, limit: int | None = None) -> list[DividendEvent]:
        """Get dividend history (newest first): cache -> provider chain -> validate.

        Tries each provider in order. Retryable errors fall through to
        the next provider; non-retryable errors are raised immediately.
        An empty history is a valid answer and is not cached.
        """
        limit = limit or self.config.history_limit

        # 1. Cache hit?
        cached = self.cache.get_dividends(symbol)
        if cached is not None:
            return cached[:limit]

        # 2. Try providers
        last_error: DividendError | None = None
        for provider in self.providers:
            if "dividends" not in provider.capabilities():
                continue
            try:
                events = provider.get_dividends(symbol, limit=self.config.history_limit)
                if not events:
                    return []

                # 3. Quality gate
                if self.config.validate:
                    result = validate_dividends(events)
                    if not result.passed:
                        msgs = "; ".join(c.message for c in result.failed_checks)
                        raise DividendError(
                            f"Validation failed for {symbol.upper()}: {msgs}",
                            code=DividendErrorCode.VALIDATION_FAILED,
                            retryable=True,
                            symbol=symbol,
                        )

                # 4. Store in cache
                self.cache.store_dividends(symbol, events)
                return events[:limit]

            except DividendError as e:
                if not e.retryable:
                    raise
                last_error = e
                continue

        raise last_error or DividendError(
            "All providers failed",
            code=DividendErrorCode.NO_DATA,
        )

    # --------------------------------------------------------------- prices

    def get_previous_close(self, symbol: str) -> float:
        return self._first_capable("previous_close", "get_previous_close", symbol)

    def get_close_near(self, symbol: str, day: date, window_days: int = 5) -> float | None:
        """Earliest close within ``window_days`` either side of ``day``.

        The cache answers only when earlier fetches covered the whole window;
        otherwise the window is fetched again and merged into the cache.
        """
        start = day - timedelta(days=window_days)
        end = day + timedelta(days=window_days)

        closes = self.cache.get_closes(symbol, start, end)
        if closes is None:
            closes = self._first_capable(
                "daily_closes", "get_daily_closes", symbol, start, end,
            )
            self.cache.store_closes(symbol, closes, start, end)
        if not closes:
            return None
        earliest = min(closes, key=lambda c: c.day)
        return round(earliest.close, 2)

    # ----------------------------------------------------------- projection

    def project(self, stock: DividendStock, now: datetime) -> ProjectedDividend | None:
        """Project the next dividend of ``stock``; None without any history.

        The stock's configured frequency code overrides whatever the data
        provider reported.
        """
        history = self.get_dividends(stock.ticker)
        if not history:
            return None
        return self._project_latest(stock, history, now)

    def _project_latest(
        self,
        stock: DividendStock,
        history: list[DividendEvent],
        now: datetime,
    ) -> ProjectedDividend:
        latest = history[0]
        event = latest.with_frequency(stock.dividend_frequency)
        projection = self.projector.project(event, now)
        logger.debug(
            "%s: latest ex-date %s, next ex-date %s",
            stock.ticker, latest.ex_date, projection.next_ex_date,
        )
        return projection

    def project_all(
        self,
        stocks: list[DividendStock],
        now: datetime,
    ) -> dict[str, ProjectedDividend | None]:
        """Project every stock; failures map to None."""
        return {
            s.ticker: self._guard(s.ticker, "projection", self.project, s, now)
            for s in stocks
        }

    # ---------------------------------------------------------------- views

    def dashboard(self, stocks: list[DividendStock], now: datetime) -> list[DashboardEntry]:
        """Upcoming-dividend view: soonest next ex-date first, then by ticker."""
        as_of = self._as_of(now)
        entries: list[DashboardEntry] = []
        for stock in stocks:
            if not stock.is_active:
                continue
            price = self._guard(stock.ticker, "price", self.get_previous_close, stock.ticker)
            history = self._guard(stock.ticker, "dividends", self.get_dividends, stock.ticker) or []

            yield_pct = forward_pct = None
            projection = None
            if history:
                yield_pct = dividend_yield(trailing_annual_dividend(history, as_of), price)
                forward_pct = dividend_yield(
                    forward_annual_dividend(history[0], stock.dividend_frequency), price,
                )
                projection = self._guard(
                    stock.ticker, "projection", self._project_latest, stock, history, now,
                )
            entries.append(DashboardEntry(
                stock=stock,
                current_price=price,
                dividend_yield=yield_pct,
                forward_yield=forward_pct,
                projection=projection,
            ))

        entries.sort(key=lambda e: (
            e.next_ex_date is None,
            e.next_ex_date or date.max,
            e.stock.ticker,
        ))
        return entries

    def ranking(self, stocks: list[DividendStock], now: datetime) -> list[RankingEntry]:
        """Score ranking: total score desc, near-ties broken by total return."""
        as_of = self._as_of(now)
        entries: list[RankingEntry] = []
        for stock in stocks:
            if not stock.is_active:
                continue
            price = self._guard(stock.ticker, "price", self.get_previous_close, stock.ticker)
            history = self._guard(stock.ticker, "dividends", self.get_dividends, stock.ticker) or []

            score = DividendScore.empty()
            yield_pct = None
            projection = None
            if history:
                yield_pct = dividend_yield(trailing_annual_dividend(history, as_of), price)
                window = calculation_window(history, as_of)
                if len(window) >= 2 and price:
                    start_price = self._guard(
                        stock.ticker, "start price",
                        self.get_close_near, stock.ticker, window[-1].ex_date,
                    )
                    score = score_dividends(window, start_price, price, as_of)
                projection = self._guard(
                    stock.ticker, "projection", self._project_latest, stock, history, now,
                )
            entries.append(RankingEntry(
                stock=stock,
                score=score,
                current_price=price,
                dividend_yield=yield_pct,
                projection=projection,
            ))

        def _compare(a: RankingEntry, b: RankingEntry) -> float:
            diff = b.score.total_score - a.score.total_score
            if abs(diff) < 0.1:
                return b.score.total_return_rate - a.score.total_return_rate
            return diff

        entries.sort(key=cmp_to_key(_compare))
        return entries

    def group_schedule(self, stocks: list[DividendStock], now: datetime) -> list[GroupSchedule]:
        """Nearest upcoming dividend per (issuer, group) ordered by urgency.

        Weekly payers also distribute in every rotation week, so no Weekly
        group is listed on its own; the first one's count is folded into
        groups A-D.
        """
        active = [s for s in stocks if s.is_active]
        groups: dict[tuple[str, str], GroupSchedule] = {}
        members: dict[tuple[str, str], list[DividendStock]] = {}
        for stock in sorted(active, key=lambda s: (s.issuer, s.group_name)):
            key = (stock.issuer, stock.group_name)
            if key not in groups:
                groups[key] = GroupSchedule(
                    issuer=stock.issuer,
                    group_name=stock.group_name,
                    etf_count=0,
                    sample_ticker=stock.ticker,
                    dividend_frequency=stock.dividend_frequency,
                )
                members[key] = []
            groups[key].etf_count += 1
            members[key].append(stock)

        weekly = next((g for g in groups.values() if g.group_name == WEEKLY_GROUP), None)
        if weekly is not None:
            for key in [k for k in groups if k[1] == WEEKLY_GROUP]:
                del groups[key]
            for name in ROTATION_GROUPS:
                existing = next((g for g in groups.values() if g.group_name == name), None)
                if existing is not None:
                    existing.etf_count += weekly.etf_count
                else:
                    groups[(weekly.issuer, name)] = GroupSchedule(
                        issuer=weekly.issuer,
                        group_name=name,
                        etf_count=weekly.etf_count,
                        sample_ticker=weekly.sample_ticker,
                        dividend_frequency=weekly.dividend_frequency,
                    )

        for key, group in groups.items():
            nearest: ProjectedDividend | None = None
            for stock in members.get(key, []):
                if group.dividend_frequency and not stock.dividend_frequency:
                    stock = replace(stock, dividend_frequency=group.dividend_frequency)
                projection = self._guard(stock.ticker, "projection", self.project, stock, now)
                if projection and (nearest is None or projection.next_ex_date < nearest.next_ex_date):
                    nearest = projection
            if nearest is not None:
                group.next_ex_date = nearest.next_ex_date
                group.next_pay_date = nearest.next_pay_date
                group.buy_cutoff = nearest.buy_cutoff
                group.time_until_cutoff = nearest.time_until_cutoff(now)

        scheduled = [g for g in groups.values() if g.time_until_cutoff is not None]
        scheduled.sort(key=lambda g: g.time_until_cutoff)  # type: ignore[arg-type, return-value]
        return scheduled

    # --------------------------------------------------------------- cache

    def clear_cache(self, symbol: str) -> None:
        self.cache.clear(symbol)

    def clear_all_cache(self) -> None:
        self.cache.clear_all()

    # ------------------------------------------------------------ internal

    def _as_of(self, now: datetime) -> date:
        return now.astimezone(self.projector.display_timezone).date()

    def _guard(self, symbol: str, what: str, fn: Callable[..., T], *args: Any) -> T | None:
        """Run one per-stock step; a DividendError is logged and yields None."""
        try:
            return fn(*args)
        except DividendError as exc:
            logger.warning("%s: %s unavailable (%s)", symbol, what, exc)
            return None

    def _first_capable(self, capability: str, method: str, *args: Any, **kwargs: Any) -> Any:
        """Try providers in order for a given capability."""
        last_error: DividendError | None = None
        for provider in self.providers:
            if capability not in provider.capabilities():
                continue
            try:
                return getattr(provider, method)(*args, **kwargs)
            except DividendError as e:
                if not e.retryable:
                    raise
                last_error = e
                continue
            except NotImplementedError:
                continue

        raise last_error or DividendError(
            f"No provider supports '{capability}'",
            code=DividendErrorCode.NO_DATA,
        )

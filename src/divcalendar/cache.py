"""Cache backends for dividend data: Parquet (disk) and Memory (TTL)."""

from __future__ import annotations

import shutil
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from datetime import date, timedelta
from pathlib import Path
from typing import Any

import pandas as pd

from divcalendar.models.dividend import DividendEvent
from divcalendar.models.price import ClosePrice


def _covers(ranges: list[tuple[date, date]], start: date, end: date) -> bool:
    """Whether the union of fetched ``ranges`` spans every day of [start, end]."""
    cursor = start
    for lo, hi in sorted(ranges):
        if lo > cursor:
            break
        if hi >= cursor:
            cursor = hi + timedelta(days=1)
        if cursor > end:
            return True
    return cursor > end


class CacheBackend(ABC):
    """Abstract cache interface."""

    @abstractmethod
    def get_dividends(self, symbol: str) -> list[DividendEvent] | None:
        """Return cached dividend history, or None on miss."""
        ...

    @abstractmethod
    def store_dividends(self, symbol: str, events: list[DividendEvent]) -> None:
        """Store a dividend history (ex_date descending)."""
        ...

    @abstractmethod
    def has_dividends(self, symbol: str) -> bool:
        ...

    @abstractmethod
    def get_closes(self, symbol: str, start: date, end: date) -> list[ClosePrice] | None:
        """Return cached closes in [start, end], ascending.

        None unless every day of the window was covered by earlier fetches;
        an empty list means the window was fetched and had no sessions.
        """
        ...

    @abstractmethod
    def store_closes(
        self,
        symbol: str,
        closes: list[ClosePrice],
        start: date,
        end: date,
    ) -> None:
        """Store the complete provider answer for the window [start, end]."""
        ...

    @abstractmethod
    def clear(self, symbol: str) -> None:
        ...

    @abstractmethod
    def clear_all(self) -> None:
        ...


class NoCache(CacheBackend):
    """No-op cache, always misses."""

    def get_dividends(self, symbol):  # type: ignore[override]
        return None

    def store_dividends(self, symbol, events):  # type: ignore[override]
        pass

    def has_dividends(self, symbol):  # type: ignore[override]
        return False

    def get_closes(self, symbol, start, end):  # type: ignore[override]
        return None

    def store_closes(self, symbol, closes, start, end):  # type: ignore[override]
        pass

    def clear(self, symbol):  # type: ignore[override]
        pass

    def clear_all(self):
        pass


class ParquetCache(CacheBackend):
    """Disk-based cache using Parquet files with Snappy compression.

    Storage layout::

        {base_path}/{SYMBOL}/dividends.parquet
        {base_path}/{SYMBOL}/closes.parquet
        {base_path}/{SYMBOL}/close_ranges.parquet

    Dividend files older than ``max_age_seconds`` are treated as a miss;
    historical closes never change and never expire. Symbol directories are
    only created when something is stored.
    """

    def __init__(self, base_path: Path | str, max_age_seconds: int = 3600) -> None:
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.max_age_seconds = max_age_seconds

    def _symbol_dir(self, symbol: str, create: bool = False) -> Path:
        symbol_dir = self.base_path / symbol.upper()
        if create:
            symbol_dir.mkdir(exist_ok=True)
        return symbol_dir

    def _path(self, symbol: str, name: str, create: bool = False) -> Path:
        return self._symbol_dir(symbol, create) / f"{name}.parquet"

    def _fresh(self, fp: Path) -> bool:
        return fp.exists() and time.time() - fp.stat().st_mtime <= self.max_age_seconds

    # ---- dividends ----

    def get_dividends(self, symbol: str) -> list[DividendEvent] | None:
        fp = self._path(symbol, "dividends")
        if not self._fresh(fp):
            return None

        try:
            df = pd.read_parquet(fp)
            return self._df_to_dividends(df)
        except Exception:
            return None

    def store_dividends(self, symbol: str, events: list[DividendEvent]) -> None:
        if not events:
            return
        fp = self._path(symbol, "dividends", create=True)
        pd.DataFrame([e.to_dict() for e in events]).to_parquet(fp, compression="snappy")

    def has_dividends(self, symbol: str) -> bool:
        return self._fresh(self._path(symbol, "dividends"))

    # ---- closes ----

    def get_closes(self, symbol: str, start: date, end: date) -> list[ClosePrice] | None:
        ranges_fp = self._path(symbol, "close_ranges")
        if not ranges_fp.exists():
            return None
        try:
            ranges_df = pd.read_parquet(ranges_fp)
        except Exception:
            return None
        ranges = [
            (date.fromisoformat(s), date.fromisoformat(e))
            for s, e in zip(ranges_df["start"], ranges_df["end"])
        ]
        if not _covers(ranges, start, end):
            return None

        closes_fp = self._path(symbol, "closes")
        if not closes_fp.exists():
            return []
        df = pd.read_parquet(closes_fp)
        # ISO dates order lexicographically
        window = df[(df["day"] >= start.isoformat()) & (df["day"] <= end.isoformat())]
        return [
            ClosePrice(symbol=symbol.upper(), day=date.fromisoformat(d), close=float(c))
            for d, c in zip(window["day"], window["close"])
        ]

    def store_closes(
        self,
        symbol: str,
        closes: list[ClosePrice],
        start: date,
        end: date,
    ) -> None:
        if closes:
            fp = self._path(symbol, "closes", create=True)
            df = pd.DataFrame(
                [{"day": c.day.isoformat(), "close": c.close} for c in closes]
            )
            if fp.exists():
                df = pd.concat([pd.read_parquet(fp), df])
            df = df.drop_duplicates(subset="day", keep="last").sort_values("day")
            df.reset_index(drop=True).to_parquet(fp, compression="snappy")

        ranges_fp = self._path(symbol, "close_ranges", create=True)
        ranges = pd.DataFrame([{"start": start.isoformat(), "end": end.isoformat()}])
        if ranges_fp.exists():
            ranges = pd.concat([pd.read_parquet(ranges_fp), ranges]).drop_duplicates()
        ranges.reset_index(drop=True).to_parquet(ranges_fp, compression="snappy")

    def clear(self, symbol: str) -> None:
        symbol_dir = self._symbol_dir(symbol)
        if symbol_dir.exists():
            shutil.rmtree(symbol_dir)

    def clear_all(self) -> None:
        for d in self.base_path.iterdir():
            if d.is_dir():
                shutil.rmtree(d)

    # ---- helpers ----

    @classmethod
    def _df_to_dividends(cls, df: pd.DataFrame) -> list[DividendEvent]:
        def _day(value: Any) -> date | None:
            if value is None or pd.isna(value):
                return None
            return date.fromisoformat(str(value))

        events: list[DividendEvent] = []
        for _, row in df.iterrows():
            events.append(DividendEvent(
                symbol=str(row["symbol"]),
                ex_date=date.fromisoformat(str(row["ex_date"])),
                amount=float(row["amount"]),
                pay_date=_day(row.get("pay_date")),
                record_date=_day(row.get("record_date")),
                declaration_date=_day(row.get("declaration_date")),
                dividend_type=str(row["dividend_type"]),
                frequency=str(row["frequency"]) if pd.notna(row.get("frequency")) else None,
                currency=str(row["currency"]),
            ))
        return events


class MemoryCache(CacheBackend):
    """In-memory TTL cache for dividend histories and closes.

    Uses LRU eviction when ``max_entries`` is exceeded.
    """

    def __init__(self, ttl_seconds: int = 3600, max_entries: int = 1000) -> None:
        self.ttl = ttl_seconds
        self.max_entries = max_entries
        self._store: OrderedDict[str, tuple[float, Any]] = OrderedDict()

    @staticmethod
    def _key(symbol: str, kind: str, detail: str = "") -> str:
        return f"{symbol.upper()}|{kind}|{detail}"

    def _evict_expired(self) -> None:
        now = time.monotonic()
        expired = [k for k, (ts, _) in self._store.items() if now - ts > self.ttl]
        for k in expired:
            del self._store[k]

    def _evict_lru(self) -> None:
        while len(self._store) > self.max_entries:
            self._store.popitem(last=False)

    def _get(self, key: str) -> Any:
        self._evict_expired()
        entry = self._store.get(key)
        if entry is None:
            return None
        ts, value = entry
        if time.monotonic() - ts > self.ttl:
            del self._store[key]
            return None
        self._store.move_to_end(key)  # refresh LRU position
        return value

    def _put(self, key: str, value: Any) -> None:
        self._store[key] = (time.monotonic(), value)
        self._store.move_to_end(key)
        self._evict_lru()

    def get_dividends(self, symbol: str) -> list[DividendEvent] | None:
        return self._get(self._key(symbol, "dividends"))

    def store_dividends(self, symbol: str, events: list[DividendEvent]) -> None:
        self._put(self._key(symbol, "dividends"), list(events))

    def has_dividends(self, symbol: str) -> bool:
        self._evict_expired()
        return self._key(symbol, "dividends") in self._store

    def get_closes(self, symbol: str, start: date, end: date) -> list[ClosePrice] | None:
        entry = self._get(self._key(symbol, "closes"))
        if entry is None:
            return None
        by_day, ranges = entry
        if not _covers(ranges, start, end):
            return None
        return [by_day[d] for d in sorted(by_day) if start <= d <= end]

    def store_closes(
        self,
        symbol: str,
        closes: list[ClosePrice],
        start: date,
        end: date,
    ) -> None:
        key = self._key(symbol, "closes")
        by_day, ranges = self._get(key) or ({}, [])
        merged = dict(by_day)
        merged.update({c.day: c for c in closes})
        self._put(key, (merged, ranges + [(start, end)]))

    def clear(self, symbol: str) -> None:
        prefix = f"{symbol.upper()}|"
        keys = [k for k in self._store if k.startswith(prefix)]
        for k in keys:
            del self._store[k]

    def clear_all(self) -> None:
        self._store.clear()

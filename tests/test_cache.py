"""Tests for cache backends (Parquet and Memory)."""

import os
import time
from datetime import date

import pytest

from divcalendar.cache import MemoryCache, NoCache, ParquetCache
from divcalendar.models.dividend import DividendEvent
from divcalendar.models.price import ClosePrice


WINDOW = (date(2024, 2, 4), date(2024, 2, 14))


def _closes(symbol="JEPQ"):
    return [
        ClosePrice(symbol=symbol, day=date(2024, 2, 5), close=20.0),
        ClosePrice(symbol=symbol, day=date(2024, 2, 6), close=20.5),
    ]


class TestNoCache:
    def test_always_misses(self, sample_history):
        cache = NoCache()
        cache.store_dividends("JEPQ", sample_history)
        cache.store_closes("JEPQ", _closes(), *WINDOW)
        assert cache.get_dividends("JEPQ") is None
        assert cache.get_closes("JEPQ", *WINDOW) is None
        assert not cache.has_dividends("JEPQ")


class TestParquetCache:
    @pytest.fixture
    def cache(self, tmp_path):
        return ParquetCache(tmp_path / "cache")

    def test_store_and_retrieve(self, cache, sample_history):
        cache.store_dividends("JEPQ", sample_history)
        assert cache.has_dividends("JEPQ")
        result = cache.get_dividends("JEPQ")
        assert result == sample_history

    def test_optional_dates_round_trip(self, cache):
        events = [DividendEvent(symbol="XYZ", ex_date=date(2024, 3, 1), amount=0.25, frequency=None)]
        cache.store_dividends("XYZ", events)
        result = cache.get_dividends("XYZ")
        assert result is not None
        assert result[0].pay_date is None
        assert result[0].frequency is None

    def test_miss(self, cache):
        assert cache.get_dividends("JEPQ") is None
        assert not cache.has_dividends("JEPQ")

    def test_stale_dividends_miss(self, tmp_path, sample_history):
        cache = ParquetCache(tmp_path / "cache", max_age_seconds=60)
        cache.store_dividends("JEPQ", sample_history)
        fp = tmp_path / "cache" / "JEPQ" / "dividends.parquet"
        old = time.time() - 3600
        os.utime(fp, (old, old))
        assert cache.get_dividends("JEPQ") is None

    def test_clear_symbol(self, cache, sample_history):
        cache.store_dividends("JEPQ", sample_history)
        cache.store_dividends("JEPI", sample_history)
        cache.clear("JEPQ")
        assert not cache.has_dividends("JEPQ")
        assert cache.has_dividends("JEPI")

    def test_clear_all(self, cache, sample_history):
        cache.store_dividends("JEPQ", sample_history)
        cache.store_dividends("JEPI", sample_history)
        cache.clear_all()
        assert not cache.has_dividends("JEPQ")
        assert not cache.has_dividends("JEPI")

    def test_empty_history_not_stored(self, cache):
        cache.store_dividends("JEPQ", [])
        assert not cache.has_dividends("JEPQ")

    def test_read_miss_creates_no_directory(self, cache, tmp_path):
        assert cache.get_dividends("NOPE") is None
        assert not cache.has_dividends("NOPE")
        assert cache.get_closes("NOPE", *WINDOW) is None
        assert not (tmp_path / "cache" / "NOPE").exists()


class TestMemoryCache:
    def test_store_and_retrieve(self, sample_history):
        cache = MemoryCache()
        cache.store_dividends("jepq", sample_history)
        assert cache.has_dividends("JEPQ")
        assert cache.get_dividends("JEPQ") == sample_history

    def test_ttl_expiry(self, sample_history):
        cache = MemoryCache(ttl_seconds=0)
        cache.store_dividends("JEPQ", sample_history)
        time.sleep(0.01)
        assert cache.get_dividends("JEPQ") is None

    def test_lru_eviction(self, sample_history):
        cache = MemoryCache(max_entries=2)
        cache.store_dividends("A", sample_history)
        cache.store_dividends("B", sample_history)
        cache.store_dividends("C", sample_history)
        assert cache.get_dividends("A") is None
        assert cache.get_dividends("C") is not None

    def test_clear_symbol(self, sample_history):
        cache = MemoryCache()
        cache.store_dividends("JEPQ", sample_history)
        cache.store_closes("JEPQ", _closes(), *WINDOW)
        cache.store_dividends("JEPI", sample_history)
        cache.clear("JEPQ")
        assert cache.get_dividends("JEPQ") is None
        assert cache.get_closes("JEPQ", *WINDOW) is None
        assert cache.get_dividends("JEPI") is not None


class TestCloseWindows:
    @pytest.fixture(params=["memory", "parquet"])
    def cache(self, request, tmp_path):
        if request.param == "parquet":
            return ParquetCache(tmp_path / "cache")
        return MemoryCache()

    def test_covered_window(self, cache):
        cache.store_closes("JEPQ", _closes(), *WINDOW)
        closes = cache.get_closes("JEPQ", date(2024, 2, 5), date(2024, 2, 10))
        assert [(c.day, c.close) for c in closes] == [
            (date(2024, 2, 5), 20.0),
            (date(2024, 2, 6), 20.5),
        ]

    def test_partial_overlap_misses(self, cache):
        cache.store_closes("JEPQ", _closes(), *WINDOW)
        assert cache.get_closes("JEPQ", date(2024, 2, 1), date(2024, 2, 10)) is None
        assert cache.get_closes("JEPQ", date(2024, 2, 10), date(2024, 2, 20)) is None

    def test_union_of_windows(self, cache):
        cache.store_closes("JEPQ", _closes(), *WINDOW)
        cache.store_closes("JEPQ", [
            ClosePrice(symbol="JEPQ", day=date(2024, 2, 6), close=21.0),
            ClosePrice(symbol="JEPQ", day=date(2024, 2, 15), close=21.5),
        ], date(2024, 2, 15), date(2024, 2, 25))
        closes = cache.get_closes("JEPQ", date(2024, 2, 10), date(2024, 2, 20))
        assert [c.close for c in closes] == [21.5]
        merged = cache.get_closes("JEPQ", date(2024, 2, 6), date(2024, 2, 6))
        assert [c.close for c in merged] == [21.0]

    def test_gap_between_windows_misses(self, cache):
        cache.store_closes("JEPQ", _closes(), *WINDOW)
        cache.store_closes("JEPQ", [], date(2024, 2, 16), date(2024, 2, 25))
        assert cache.get_closes("JEPQ", date(2024, 2, 10), date(2024, 2, 20)) is None

    def test_empty_fetch_is_remembered(self, cache):
        cache.store_closes("JEPQ", [], date(2024, 12, 24), date(2024, 12, 26))
        assert cache.get_closes("JEPQ", date(2024, 12, 25), date(2024, 12, 25)) == []

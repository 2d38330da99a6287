"""Dividend service configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from enum import Enum

DEFAULT_DISPLAY_TIMEZONE = "Asia/Seoul"
DEFAULT_EXCHANGE_TIMEZONE = "America/New_York"
DEFAULT_MARKET_CLOSE = time(16, 0)
DEFAULT_MAX_ITERATIONS = 1000


class DividendProviderType(Enum):
    """Supported data provider backends."""

    POLYGON = "polygon"
    MOCK = "mock"


@dataclass
class DividendConfig:
    """Configuration for DividendService.

    Attributes:
        providers: Provider backends ordered by priority.
        cache_backend: Cache type — "parquet", "memory", or "none".
        cache_dir: Directory for parquet cache files.
        cache_ttl_seconds: Freshness window for cached dividend histories.
        validate: Whether to run quality checks on fetched dividends.
        polygon_api_key: Polygon.io API key.
        display_timezone: IANA zone projected dates are expressed in.
        exchange_timezone: IANA zone of the listing exchange.
        market_close: Regular close in the exchange timezone.
        max_iterations: Upper bound on projection steps per stock.
        history_limit: Number of past dividends fetched per symbol.
    """

    providers: list[DividendProviderType] = field(
        default_factory=lambda: [DividendProviderType.POLYGON]
    )
    cache_backend: str = "memory"
    cache_dir: str = "data/cache"
    cache_ttl_seconds: int = 3600
    validate: bool = True

    polygon_api_key: str | None = None

    display_timezone: str = DEFAULT_DISPLAY_TIMEZONE
    exchange_timezone: str = DEFAULT_EXCHANGE_TIMEZONE
    market_close: time = DEFAULT_MARKET_CLOSE
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    history_limit: int = 20

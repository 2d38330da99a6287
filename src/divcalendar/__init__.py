"""divcalendar — next-dividend projection for US-listed dividend stocks.

Projects the next ex-dividend / pay date and buy cutoff from the last known
dividend, with exchange-close and DST handling, plus Polygon-backed
dashboard, ranking and group-schedule views.

Quick start::

    from divcalendar import create_service_from_env
    svc = create_service_from_env()
    rows = svc.dashboard(stocks, datetime.now(timezone.utc))
"""

from __future__ import annotations

import os
from datetime import time

from divcalendar.config import DividendConfig, DividendProviderType
from divcalendar.errors import DividendError, DividendErrorCode
from divcalendar.frequency import (
    DividendFrequency,
    frequency_from_payments_per_year,
    parse_frequency,
    payments_per_year,
    step_date,
)
from divcalendar.models.dividend import DividendEvent
from divcalendar.models.price import ClosePrice
from divcalendar.models.projection import ProjectedDividend
from divcalendar.models.report import (
    DashboardEntry,
    DividendScore,
    GroupSchedule,
    RankingEntry,
)
from divcalendar.models.stock import DividendStock
from divcalendar.projector import (
    DividendProjector,
    buy_cutoff,
    cutoff_time,
    is_dst,
    project_next_dividend,
    time_until_cutoff,
)
from divcalendar.service import DividendService
from divcalendar.universe import active_stocks, load_dividend_stocks

__version__ = "0.1.0"

__all__ = [
    # Service
    "DividendService",
    "create_service_from_env",
    # Projection
    "DividendProjector",
    "project_next_dividend",
    "buy_cutoff",
    "cutoff_time",
    "is_dst",
    "time_until_cutoff",
    # Frequency
    "DividendFrequency",
    "parse_frequency",
    "step_date",
    "payments_per_year",
    "frequency_from_payments_per_year",
    # Config
    "DividendConfig",
    "DividendProviderType",
    # Errors
    "DividendError",
    "DividendErrorCode",
    # Models
    "DividendEvent",
    "ClosePrice",
    "ProjectedDividend",
    "DividendStock",
    "DividendScore",
    "DashboardEntry",
    "RankingEntry",
    "GroupSchedule",
    # Universe
    "load_dividend_stocks",
    "active_stocks",
]


def create_service_from_env() -> DividendService:
    """Zero-config factory — reads providers, cache and zones from env vars.

    Environment variables:
        DIVIDEND_PROVIDERS: Comma-separated provider list (default: "polygon").
        DIVIDEND_CACHE: Cache backend — "parquet", "memory", "none" (default: "memory").
        DIVIDEND_CACHE_DIR: Cache directory (default: "data/cache").
        DIVIDEND_CACHE_TTL: Dividend cache freshness in seconds (default: 3600).
        DIVIDEND_DISPLAY_TZ: Display timezone (default: "Asia/Seoul").
        DIVIDEND_EXCHANGE_TZ: Exchange timezone (default: "America/New_York").
        DIVIDEND_MARKET_CLOSE: Exchange close as HH:MM (default: "16:00").
        POLYGON_API_KEY: Polygon.io API key.
    """
    provider_str = os.getenv("DIVIDEND_PROVIDERS", "polygon")
    provider_types = [
        DividendProviderType(name.strip().lower())
        for name in provider_str.split(",")
        if name.strip()
    ]

    config = DividendConfig(
        providers=provider_types,
        cache_backend=os.getenv("DIVIDEND_CACHE", "memory"),
        cache_dir=os.getenv("DIVIDEND_CACHE_DIR", "data/cache"),
        cache_ttl_seconds=int(os.getenv("DIVIDEND_CACHE_TTL", "3600")),
        polygon_api_key=os.getenv("POLYGON_API_KEY"),
        display_timezone=os.getenv("DIVIDEND_DISPLAY_TZ", "Asia/Seoul"),
        exchange_timezone=os.getenv("DIVIDEND_EXCHANGE_TZ", "America/New_York"),
        market_close=time.fromisoformat(os.getenv("DIVIDEND_MARKET_CLOSE", "16:00")),
    )

    return DividendService(config)

"""Load the tracked dividend stock universe from JSON or CSV exports."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pandas as pd

from divcalendar.errors import DividendError, DividendErrorCode
from divcalendar.models.stock import DividendStock

_TRUE = {"1", "true", "t", "yes", "y"}


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return True
    text = str(value).strip().lower()
    return not text or text in _TRUE


def _as_text(value: Any) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


def stock_from_dict(row: dict[str, Any]) -> DividendStock:
    """Build a DividendStock from a ``dividend_stocks`` table row."""
    ticker = _as_text(row.get("ticker")).upper()
    if not ticker:
        raise DividendError(
            f"Stock row without ticker: {row!r}",
            code=DividendErrorCode.INVALID_INPUT,
        )
    frequency = _as_text(row.get("dividend_frequency")) or None
    return DividendStock(
        ticker=ticker,
        name=_as_text(row.get("name")),
        issuer=_as_text(row.get("issuer")),
        group_name=_as_text(row.get("group_name")),
        dividend_frequency=frequency,
        is_active=_as_bool(row.get("is_active", True)),
    )


def load_dividend_stocks(path: Path | str) -> list[DividendStock]:
    """Read stocks from a ``.json`` list of objects or a ``.csv`` export.

    Missing ``is_active`` values count as active.
    """
    fp = Path(path)
    suffix = fp.suffix.lower()
    if suffix == ".json":
        with open(fp, encoding="utf-8") as f:
            rows = json.load(f)
        if isinstance(rows, dict):
            rows = rows.get("stocks", [])
    elif suffix == ".csv":
        rows = pd.read_csv(fp, dtype=str, keep_default_na=False).to_dict("records")
    else:
        raise DividendError(
            f"Unsupported stock universe format: {fp.suffix}",
            code=DividendErrorCode.INVALID_INPUT,
        )
    return [stock_from_dict(r) for r in rows]


def active_stocks(stocks: list[DividendStock]) -> list[DividendStock]:
    """Active stocks ordered by ticker."""
    return sorted((s for s in stocks if s.is_active), key=lambda s: s.ticker)

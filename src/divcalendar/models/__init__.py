"""Dividend data models."""

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

__all__ = [
    "DividendEvent",
    "ClosePrice",
    "ProjectedDividend",
    "DividendStock",
    "DividendScore",
    "DashboardEntry",
    "RankingEntry",
    "GroupSchedule",
]

"""Abstract base class for dividend data providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from divcalendar.models.dividend import DividendEvent
from divcalendar.models.price import ClosePrice


class BaseDividendProvider(ABC):
    """Abstract base for all dividend data providers.

    Subclasses must implement ``get_dividends``. Price endpoints default to
    ``NotImplementedError`` — providers implement only the endpoints they
    support and advertise them via ``capabilities()``.
    """

    # --- Dividends (required) ---

    @abstractmethod
    def get_dividends(self, symbol: str, limit: int = 20) -> list[DividendEvent]:
        """Fetch the most recent dividend events.

        Args:
            symbol: Ticker symbol.
            limit: Maximum number of events.

        Returns:
            List of DividendEvent objects ordered by ex_date descending.
        """
        ...

    # --- Prices ---

    def get_previous_close(self, symbol: str) -> float:
        """Get the previous session's adjusted close."""
        raise NotImplementedError

    def get_daily_closes(self, symbol: str, start: date, end: date) -> list[ClosePrice]:
        """Get adjusted daily closes in [start, end], ascending."""
        raise NotImplementedError

    # --- Capabilities ---

    def capabilities(self) -> set[str]:
        """Return the set of supported features.

        Possible values: ``dividends``, ``previous_close``, ``daily_closes``.
        """
        return {"dividends"}

"""Dividend data and projection error types."""

from __future__ import annotations

from enum import Enum


class DividendErrorCode(Enum):
    """Error classification codes."""

    # Data access
    RATE_LIMITED = "rate_limited"
    AUTH_FAILED = "auth_failed"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    PROVIDER_ERROR = "provider_error"
    VALIDATION_FAILED = "validation_failed"
    NO_DATA = "no_data"

    # Projection
    INVALID_INPUT = "invalid_input"
    PROJECTION_DIVERGED = "projection_diverged"


class DividendError(Exception):
    """Dividend exception with error code and retryable flag.

    Attributes:
        message: Human-readable error description.
        code: Structured error code for programmatic handling.
        retryable: Whether the service should fall through to the next provider.
        symbol: Ticker the failure belongs to, when known.
    """

    def __init__(
        self,
        message: str,
        code: DividendErrorCode = DividendErrorCode.PROVIDER_ERROR,
        retryable: bool = False,
        symbol: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.retryable = retryable
        self.symbol = symbol.upper() if symbol else None

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

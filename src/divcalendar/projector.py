"""Next ex-dividend / pay date projection.

Market-data providers only report the most recent dividend of a stock. The
projector walks that event forward, one declared period at a time, until the
candidate ex-date's buy cutoff lies in the future. The cutoff is the
exchange's regular close expressed in the display timezone; exchange and
display UTC offsets both come from the IANA timezone database, so DST
transitions on either side are handled without hand-written rules.

Quick start::

    from divcalendar import project_next_dividend
    p = project_next_dividend(event, datetime.now(timezone.utc))
    p.next_ex_date, p.buy_cutoff
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Iterable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from divcalendar.config import (
    DEFAULT_DISPLAY_TIMEZONE,
    DEFAULT_EXCHANGE_TIMEZONE,
    DEFAULT_MARKET_CLOSE,
    DEFAULT_MAX_ITERATIONS,
    DividendConfig,
)
from divcalendar.errors import DividendError, DividendErrorCode
from divcalendar.frequency import parse_frequency, step_date
from divcalendar.models.dividend import DividendEvent
from divcalendar.models.projection import ProjectedDividend

logger = logging.getLogger(__name__)

_DAY = timedelta(days=1)

TimeZoneLike = str | tzinfo


def resolve_timezone(tz: TimeZoneLike) -> tzinfo:
    """Return a tzinfo for an IANA name (or pass a tzinfo through)."""
    if isinstance(tz, tzinfo):
        return tz
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise DividendError(
            f"Unknown timezone: {tz!r}",
            code=DividendErrorCode.INVALID_INPUT,
        ) from exc


def is_dst(day: date, tz: TimeZoneLike = DEFAULT_EXCHANGE_TIMEZONE) -> bool:
    """Check whether ``day`` falls under daylight saving time in ``tz``.

    Evaluated at local noon, clear of the 02:00 switch-over hour.
    """
    zone = resolve_timezone(tz)
    noon = datetime.combine(day, time(12, 0), tzinfo=zone)
    return bool(noon.dst())


def cutoff_time(
    ex_date: date,
    display_timezone: TimeZoneLike = DEFAULT_DISPLAY_TIMEZONE,
    exchange_timezone: TimeZoneLike = DEFAULT_EXCHANGE_TIMEZONE,
    market_close: time = DEFAULT_MARKET_CLOSE,
) -> time:
    """Time of day, in the display zone, of the exchange close for ``ex_date``.

    ``(market_close - exchange_offset + display_offset) mod 24h``, with both
    offsets taken at local midnight of ``ex_date`` in the display zone. For
    a 16:00 New York close shown in Seoul this is 05:00 under EDT and 06:00
    under EST.
    """
    display = resolve_timezone(display_timezone)
    exchange = resolve_timezone(exchange_timezone)

    midnight = datetime.combine(ex_date, time(0, 0), tzinfo=display)
    display_offset = midnight.utcoffset()
    exchange_offset = midnight.astimezone(exchange).utcoffset()
    if display_offset is None or exchange_offset is None:
        raise DividendError(
            "Timezone without a fixed UTC offset",
            code=DividendErrorCode.INVALID_INPUT,
        )

    close = timedelta(hours=market_close.hour, minutes=market_close.minute)
    shifted = (close - exchange_offset + display_offset) % _DAY
    return (datetime.min + shifted).time()


def buy_cutoff(
    ex_date: date,
    display_timezone: TimeZoneLike = DEFAULT_DISPLAY_TIMEZONE,
    exchange_timezone: TimeZoneLike = DEFAULT_EXCHANGE_TIMEZONE,
    market_close: time = DEFAULT_MARKET_CLOSE,
) -> datetime:
    """Instant after which buying no longer earns the dividend on ``ex_date``."""
    display = resolve_timezone(display_timezone)
    at = cutoff_time(ex_date, display, exchange_timezone, market_close)
    return datetime.combine(ex_date, at, tzinfo=display)


def project_next_dividend(
    event: DividendEvent,
    now: datetime,
    display_timezone: TimeZoneLike = DEFAULT_DISPLAY_TIMEZONE,
    *,
    exchange_timezone: TimeZoneLike = DEFAULT_EXCHANGE_TIMEZONE,
    market_close: time = DEFAULT_MARKET_CLOSE,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> ProjectedDividend:
    """Project the first dividend whose buy cutoff is not yet past ``now``.

    Args:
        event: Last observed dividend; ``pay_date`` is required and
            ``frequency`` drives the stepping (unknown codes step 28 days).
        now: Evaluation instant, timezone-aware.
        display_timezone: Zone the returned dates and cutoff are expressed in.
        exchange_timezone: Zone of the exchange whose close sets the cutoff.
        market_close: Regular close in the exchange zone.
        max_iterations: Step budget before the projection is abandoned.

    Returns:
        ProjectedDividend with ``is_past_cutoff`` False. ``now`` equal to the
        cutoff still counts as actionable.

    Raises:
        DividendError: INVALID_INPUT for a missing pay date, a naive ``now``
            or an unknown zone; PROJECTION_DIVERGED when the step budget is
            exhausted.
    """
    if event.pay_date is None:
        raise DividendError(
            f"{event.symbol}: dividend on {event.ex_date} has no pay date",
            code=DividendErrorCode.INVALID_INPUT,
            symbol=event.symbol,
        )
    if now.tzinfo is None or now.utcoffset() is None:
        raise DividendError(
            "now must be timezone-aware",
            code=DividendErrorCode.INVALID_INPUT,
        )

    display = resolve_timezone(display_timezone)
    exchange = resolve_timezone(exchange_timezone)
    frequency = parse_frequency(event.frequency)

    periods = 0
    ex_date, pay_date = event.ex_date, event.pay_date
    cutoff = buy_cutoff(ex_date, display, exchange, market_close)
    while now > cutoff:
        periods += 1
        if periods > max_iterations:
            raise DividendError(
                f"{event.symbol}: no actionable dividend within "
                f"{max_iterations} {frequency.value} steps of {event.ex_date}",
                code=DividendErrorCode.PROJECTION_DIVERGED,
                symbol=event.symbol,
            )
        ex_date = step_date(event.ex_date, frequency, periods)
        pay_date = step_date(event.pay_date, frequency, periods)
        cutoff = buy_cutoff(ex_date, display, exchange, market_close)

    return ProjectedDividend(
        symbol=event.symbol,
        next_ex_date=ex_date,
        next_pay_date=pay_date,
        buy_cutoff=cutoff,
        is_past_cutoff=False,
        periods_advanced=periods,
    )


def time_until_cutoff(projection: ProjectedDividend, now: datetime) -> timedelta:
    """Remaining buying window for a projection; negative once it closed."""
    return projection.time_until_cutoff(now)


class DividendProjector:
    """Projector bound to one exchange / display timezone pair.

    Usage::

        projector = DividendProjector.from_config(DividendConfig())
        p = projector.project(event, now)
    """

    def __init__(
        self,
        display_timezone: TimeZoneLike = DEFAULT_DISPLAY_TIMEZONE,
        exchange_timezone: TimeZoneLike = DEFAULT_EXCHANGE_TIMEZONE,
        market_close: time = DEFAULT_MARKET_CLOSE,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> None:
        self.display_timezone = resolve_timezone(display_timezone)
        self.exchange_timezone = resolve_timezone(exchange_timezone)
        self.market_close = market_close
        self.max_iterations = max_iterations

    @classmethod
    def from_config(cls, config: DividendConfig) -> DividendProjector:
        return cls(
            display_timezone=config.display_timezone,
            exchange_timezone=config.exchange_timezone,
            market_close=config.market_close,
            max_iterations=config.max_iterations,
        )

    def project(self, event: DividendEvent, now: datetime) -> ProjectedDividend:
        return project_next_dividend(
            event,
            now,
            self.display_timezone,
            exchange_timezone=self.exchange_timezone,
            market_close=self.market_close,
            max_iterations=self.max_iterations,
        )

    def buy_cutoff(self, ex_date: date) -> datetime:
        return buy_cutoff(
            ex_date, self.display_timezone, self.exchange_timezone, self.market_close,
        )

    def project_many(
        self,
        events: Iterable[DividendEvent],
        now: datetime,
    ) -> dict[str, ProjectedDividend | None]:
        """Project a batch; a failing stock maps to None instead of aborting."""
        results: dict[str, ProjectedDividend | None] = {}
        for event in events:
            try:
                results[event.symbol] = self.project(event, now)
            except DividendError as exc:
                logger.warning("Projection failed for %s: %s", event.symbol, exc)
                results[event.symbol] = None
        return results

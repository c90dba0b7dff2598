"""Single source of truth for whether a shop accepts orders right now.

Holidays, temporary closures and the weekly schedule are layered in a fixed
precedence:

1. An active special holiday closes the shop outright.
2. A temporary closure that is still in effect closes the shop. Closures with
   ``closed_until`` hold until that instant plus a short grace period. Closures
   with only ``reopen_time`` hold until that clock time *today*; once it has
   passed they are ignored for the rest of the day. Closures with neither hold
   until the flag is cleared.
3. Otherwise the weekly schedule for the current weekday decides.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Mapping, Optional
from zoneinfo import ZoneInfo

from ...config import settings
from ...models.domain import (
    DAY_NAMES,
    AvailabilityStatus,
    ClosureReason,
    DaySchedule,
    SpecialHoliday,
    TemporaryClosure,
)
from ..clock import clock_minutes, parse_clock, shop_timezone, to_local
from .time_window import resolve_day

logger = logging.getLogger(__name__)


def holiday_active(holidays: Iterable[SpecialHoliday] | None, today: date) -> bool:
    if not holidays:
        return False
    return any(holiday.start_date <= today <= holiday.end_date for holiday in holidays)


def closure_in_effect(
    closure: TemporaryClosure | None,
    now: datetime,
    *,
    tz: ZoneInfo | None = None,
    grace_seconds: float | None = None,
) -> Optional[ClosureReason]:
    """Return the closure reason when ``closure`` still closes the shop at ``now``."""

    if closure is None or not closure.is_closed:
        return None

    zone = tz or shop_timezone()
    local_now = to_local(now, zone)

    if closure.closed_until is not None:
        grace = settings.closure_grace_seconds if grace_seconds is None else grace_seconds
        deadline = to_local(closure.closed_until, zone) + timedelta(seconds=grace)
        if local_now <= deadline:
            return "temporarily_closed"
        return None

    if closure.reopen_time:
        reopen_minutes = parse_clock(closure.reopen_time)
        if reopen_minutes is None:
            logger.debug(f"Ignoring temporary closure with unparsable reopen time {closure.reopen_time!r}")
            return None
        if clock_minutes(local_now) < reopen_minutes:
            return "temporarily_closed"
        return None

    return "closed"


def closure_has_expired(
    closure: TemporaryClosure | None,
    now: datetime,
    *,
    tz: ZoneInfo | None = None,
    grace_seconds: float | None = None,
) -> bool:
    """True when ``closure`` is flagged closed but no longer holds at ``now``."""

    if closure is None or not closure.is_closed:
        return False
    return closure_in_effect(closure, now, tz=tz, grace_seconds=grace_seconds) is None


def day_schedule_for(
    weekly: Mapping[str, DaySchedule] | None, moment: datetime
) -> DaySchedule | None:
    if not weekly:
        return None
    return weekly.get(DAY_NAMES[moment.weekday()])


def resolve_availability(
    weekly: Mapping[str, DaySchedule] | None,
    closure: TemporaryClosure | None,
    holidays: Iterable[SpecialHoliday] | None,
    now: datetime,
    *,
    tz: ZoneInfo | None = None,
    grace_seconds: float | None = None,
    closing_soon_minutes: int | None = None,
) -> AvailabilityStatus:
    """Decide whether the shop is open at ``now``."""

    zone = tz or shop_timezone()
    local_now = to_local(now, zone)

    if holiday_active(holidays, local_now.date()):
        return AvailabilityStatus(is_open=False, closure_reason="special_holiday")

    reason = closure_in_effect(closure, local_now, tz=zone, grace_seconds=grace_seconds)
    if reason is not None:
        return AvailabilityStatus(is_open=False, closure_reason=reason)

    day = day_schedule_for(weekly, local_now)
    resolution = resolve_day(day, clock_minutes(local_now), closing_soon_minutes)
    return AvailabilityStatus(is_open=resolution.is_open, is_closing_soon=resolution.is_closing_soon)

"""Builders for the temporary closures an owner can request from the dashboard.

A ``reopen_time`` closure only holds until that clock time on the same day, so
any closure whose reopen instant lands on a later date is expressed with
``closed_until`` instead.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta
from typing import Mapping, Optional
from zoneinfo import ZoneInfo

from ...models.domain import DaySchedule, TemporaryClosure
from ..clock import format_clock, parse_clock, shop_timezone, to_local
from .schedule import next_opening


def _closure_reopening_at(local_now: datetime, reopen_at: datetime) -> TemporaryClosure:
    if reopen_at.date() == local_now.date():
        return TemporaryClosure(is_closed=True, reopen_time=format_clock(reopen_at))
    return TemporaryClosure(is_closed=True, closed_until=reopen_at)


def close_for(now: datetime, minutes: int = 60, *, tz: ZoneInfo | None = None) -> TemporaryClosure:
    if minutes <= 0:
        raise ValueError("minutes must be > 0")
    local_now = to_local(now, tz or shop_timezone())
    reopen_at = (local_now + timedelta(minutes=minutes)).replace(second=0, microsecond=0)
    return _closure_reopening_at(local_now, reopen_at)


def close_until_next_opening(
    weekly: Mapping[str, DaySchedule] | None,
    now: datetime,
    *,
    tz: ZoneInfo | None = None,
) -> Optional[TemporaryClosure]:
    """Close until the schedule next opens; ``None`` when the schedule never opens."""

    zone = tz or shop_timezone()
    local_now = to_local(now, zone)
    opening = next_opening(weekly, local_now, tz=zone)
    if opening is None:
        return None
    minutes = parse_clock(opening.time)
    reopen_at = datetime.combine(opening.on_date, time(minutes // 60, minutes % 60), tzinfo=zone)
    return _closure_reopening_at(local_now, reopen_at)


def close_for_days(now: datetime, until: date, *, tz: ZoneInfo | None = None) -> TemporaryClosure:
    """Close through the end of ``until`` (shop-local)."""

    zone = tz or shop_timezone()
    local_now = to_local(now, zone)
    closed_until = datetime.combine(until, time(23, 59, 59, 999000), tzinfo=zone)
    days = math.ceil((closed_until - local_now) / timedelta(days=1))
    if days < 1:
        raise ValueError("Please select a future date")
    return TemporaryClosure(is_closed=True, closed_until=closed_until)


def lift_closure() -> TemporaryClosure:
    return TemporaryClosure(is_closed=False)

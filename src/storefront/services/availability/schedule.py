"""Schedule look-ups used by the owner dashboard."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Mapping, Optional
from zoneinfo import ZoneInfo

from ...models.domain import (
    DAY_NAMES,
    DaySchedule,
    NextOpening,
    OwnerStoreStatus,
    SpecialHoliday,
    TemporaryClosure,
)
from ..clock import clock_minutes, parse_clock, shop_timezone, to_local
from .closures import day_schedule_for, holiday_active, resolve_availability

LOOKAHEAD_DAYS = 8


def _opening_for_day(day: DaySchedule, offset: int, now_minutes: int) -> Optional[str]:
    for slot in day.time_slots:
        if slot.is_24_hours:
            if offset > 0:
                return "00:00"
            continue
        open_minutes = parse_clock(slot.open_time)
        if open_minutes is None:
            continue
        if offset > 0 or now_minutes < open_minutes:
            return slot.open_time.strip()
    return None


def next_opening(
    weekly: Mapping[str, DaySchedule] | None,
    now: datetime,
    *,
    tz: ZoneInfo | None = None,
) -> Optional[NextOpening]:
    """Find the next time the weekly schedule opens, scanning today and the following week.

    Today only counts slots that open later than the current clock time. On later
    days the first usable slot wins, with 24-hour slots opening at ``00:00``.
    """

    if not weekly:
        return None

    local_now = to_local(now, tz or shop_timezone())
    now_minutes = clock_minutes(local_now)
    for offset in range(LOOKAHEAD_DAYS):
        target = local_now + timedelta(days=offset)
        day = weekly.get(DAY_NAMES[target.weekday()])
        if day is None or day.is_closed:
            continue
        opening = _opening_for_day(day, offset, now_minutes)
        if opening:
            return NextOpening(on_date=target.date(), time=opening)
    return None


def auto_accept_until(
    weekly: Mapping[str, DaySchedule] | None,
    now: datetime,
    auto_accept: bool,
    *,
    tz: ZoneInfo | None = None,
) -> Optional[str]:
    """Clock time until which orders are auto-accepted today, if the owner enabled it."""

    if not auto_accept or not weekly:
        return None
    day = day_schedule_for(weekly, to_local(now, tz or shop_timezone()))
    if day is None or day.is_closed or not day.time_slots:
        return None
    first = day.time_slots[0]
    if first.is_24_hours or not first.close_time:
        return None
    return first.close_time


def describe_owner_status(
    weekly: Mapping[str, DaySchedule] | None,
    closure: TemporaryClosure | None,
    holidays: Iterable[SpecialHoliday] | None,
    now: datetime,
    *,
    tz: ZoneInfo | None = None,
) -> OwnerStoreStatus:
    """Availability plus whether a closed shop is closed by a temporary closure or a holiday."""

    zone = tz or shop_timezone()
    holidays = tuple(holidays or ())
    schedule_only = resolve_availability(weekly, None, None, now, tz=zone)
    status = resolve_availability(weekly, closure, holidays, now, tz=zone)
    is_holiday = holiday_active(holidays, to_local(now, zone).date())

    is_temporary = (
        schedule_only.is_open
        and not status.is_open
        and closure is not None
        and closure.is_closed
        and not is_holiday
    )
    return OwnerStoreStatus(status=status, is_temporary_closure=is_temporary, is_special_holiday=is_holiday)

"""Evaluation of one day's recurring time slots against a clock time."""

from __future__ import annotations

import logging
from typing import Optional

from ...config import settings
from ...models.domain import DaySchedule, SlotResolution, TimeSlot
from ..clock import MINUTES_PER_DAY, parse_clock

logger = logging.getLogger(__name__)

OPEN_ALL_DAY = SlotResolution(is_open=True)
CLOSED = SlotResolution(is_open=False)


def minutes_until_close(slot: TimeSlot, now_minutes: int) -> Optional[int]:
    """Minutes left in ``slot`` at ``now_minutes``, or ``None`` when the slot is not open then.

    Open is inclusive and close is exclusive. A close time earlier than the open
    time wraps past midnight.
    """

    open_minutes = parse_clock(slot.open_time)
    close_minutes = parse_clock(slot.close_time)
    if open_minutes is None or close_minutes is None:
        logger.debug(f"Skipping slot with unparsable times: {slot.open_time!r}-{slot.close_time!r}")
        return None

    if close_minutes < open_minutes:
        if now_minutes >= open_minutes:
            return MINUTES_PER_DAY - now_minutes + close_minutes
        if now_minutes < close_minutes:
            return close_minutes - now_minutes
        return None

    if open_minutes <= now_minutes < close_minutes:
        return close_minutes - now_minutes
    return None


def resolve_day(
    day: DaySchedule | None,
    now_minutes: int,
    closing_soon_minutes: int | None = None,
) -> SlotResolution:
    """Resolve whether ``day`` is open at ``now_minutes`` (minutes after midnight).

    A missing day is treated as open. Slots are checked in stored order and the
    first one containing the clock time decides the result.
    """

    if day is None:
        return OPEN_ALL_DAY
    if day.is_closed:
        return CLOSED
    if not day.time_slots:
        # Day record without any hours set.
        return OPEN_ALL_DAY

    threshold = settings.closing_soon_minutes if closing_soon_minutes is None else closing_soon_minutes
    for slot in day.time_slots:
        if slot.is_24_hours:
            return OPEN_ALL_DAY
        remaining = minutes_until_close(slot, now_minutes)
        if remaining is None:
            continue
        return SlotResolution(
            is_open=True,
            is_closing_soon=0 < remaining <= threshold,
            minutes_until_close=remaining,
        )
    return CLOSED

"""Clock helpers: shop-local time conversion and ``HH:MM`` parsing."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..config import settings

MINUTES_PER_DAY = 24 * 60


def shop_timezone(name: str | None = None) -> ZoneInfo:
    """Return the configured shop timezone, falling back to UTC for unknown names."""

    try:
        return ZoneInfo(name or settings.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


def to_local(moment: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Express ``moment`` in the shop timezone. Naive values are taken as already local."""

    zone = tz or shop_timezone()
    if moment.tzinfo is None:
        return moment.replace(tzinfo=zone)
    return moment.astimezone(zone)


def now_local(tz: ZoneInfo | None = None) -> datetime:
    zone = tz or shop_timezone()
    return datetime.now(zone)


def parse_clock(value: Any) -> Optional[int]:
    """Parse ``"HH:MM"`` into minutes after midnight; ``None`` when unparsable."""

    if not isinstance(value, str):
        return None
    parts = value.strip().split(":")
    if len(parts) != 2:
        return None
    try:
        hour, minute = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return hour * 60 + minute


def clock_minutes(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def format_clock(moment: datetime | time) -> str:
    return f"{moment.hour:02d}:{moment.minute:02d}"


def local_date(value: date | datetime, tz: ZoneInfo | None = None) -> date:
    """Reduce a date or timestamp to the shop-local calendar date."""

    if isinstance(value, datetime):
        return to_local(value, tz).date()
    return value

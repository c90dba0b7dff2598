"""Pydantic models for shop availability payloads as stored by the storefront API.

Stored shop records are not always well formed. Flags that are ``null`` read as
false, weekday entries without a ``day`` are dropped, and timestamps that cannot
be parsed are treated as absent rather than failing the whole request.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Literal, Optional, Sequence, Union
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator, model_validator

from ..models.domain import (
    DAY_NAMES,
    DaySchedule,
    SpecialHoliday,
    TemporaryClosure,
    TimeSlot,
    WeeklySchedule,
)
from ..services.clock import local_date, shop_timezone

logger = logging.getLogger(__name__)

_INSTANT = TypeAdapter(datetime)
_CALENDAR_VALUE = TypeAdapter(Union[datetime, date])


def _parse_or_none(adapter: TypeAdapter, value: Any, label: str) -> Any:
    if value is None or value == "":
        return None
    try:
        return adapter.validate_python(value)
    except ValidationError:
        logger.debug(f"Ignoring unparsable {label} {value!r}")
        return None


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TimeSlotPayload(CamelModel):
    open_time: Optional[str] = Field(default=None, alias="openTime")
    close_time: Optional[str] = Field(default=None, alias="closeTime")
    is_24_hours: Optional[bool] = Field(default=False, alias="is24Hours")

    def to_domain(self) -> TimeSlot:
        return TimeSlot(open_time=self.open_time, close_time=self.close_time, is_24_hours=bool(self.is_24_hours))


class BusinessHoursPayload(CamelModel):
    """One weekday entry; legacy records carry flat ``openTime``/``closeTime`` instead of slots."""

    day: Optional[str] = None
    is_closed: Optional[bool] = Field(default=False, alias="isClosed")
    time_slots: Optional[list[TimeSlotPayload]] = Field(default=None, alias="timeSlots")
    open_time: Optional[str] = Field(default=None, alias="openTime")
    close_time: Optional[str] = Field(default=None, alias="closeTime")

    def to_domain(self) -> DaySchedule:
        if self.time_slots:
            slots = tuple(slot.to_domain() for slot in self.time_slots)
        elif self.open_time and self.close_time:
            slots = (TimeSlot(open_time=self.open_time, close_time=self.close_time),)
        else:
            slots = ()
        return DaySchedule(is_closed=bool(self.is_closed), time_slots=slots)


class TemporaryClosurePayload(CamelModel):
    is_closed: Optional[bool] = Field(default=False, alias="isClosed")
    closed_until: Optional[datetime] = Field(default=None, alias="closedUntil")
    reopen_time: Optional[str] = Field(default=None, alias="reopenTime")

    @model_validator(mode="before")
    @classmethod
    def _unreadable_deadline_holds(cls, data: Any) -> Any:
        """An unreadable ``closedUntil`` keeps the shop closed until the flag is cleared."""

        if not isinstance(data, dict):
            return data
        key = "closedUntil" if "closedUntil" in data else "closed_until"
        raw = data.get(key)
        if raw is None or raw == "":
            return {**data, key: None}
        if _parse_or_none(_INSTANT, raw, "closedUntil") is None:
            return {**data, key: None, "reopenTime": None, "reopen_time": None}
        return data

    def to_domain(self) -> TemporaryClosure:
        return TemporaryClosure(
            is_closed=bool(self.is_closed),
            closed_until=self.closed_until,
            reopen_time=self.reopen_time or None,
        )


class SpecialHolidayPayload(CamelModel):
    start_date: Optional[Union[datetime, date]] = Field(default=None, alias="startDate")
    end_date: Optional[Union[datetime, date]] = Field(default=None, alias="endDate")
    holiday_id: Optional[str] = Field(default=None, alias="_id")

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _lenient_date(cls, value: Any) -> Any:
        return _parse_or_none(_CALENDAR_VALUE, value, "holiday date")

    def to_domain(self, tz: ZoneInfo | None = None) -> Optional[SpecialHoliday]:
        if self.start_date is None or self.end_date is None:
            return None
        zone = tz or shop_timezone()
        return SpecialHoliday(
            start_date=local_date(self.start_date, zone),
            end_date=local_date(self.end_date, zone),
            holiday_id=self.holiday_id,
        )


def to_weekly_schedule(entries: Sequence[BusinessHoursPayload] | None) -> WeeklySchedule:
    """Normalise stored business hours into one ``DaySchedule`` per known weekday."""

    weekly: WeeklySchedule = {}
    for entry in entries or ():
        day_name = (entry.day or "").strip().capitalize()
        if day_name not in DAY_NAMES:
            logger.debug(f"Ignoring business hours for unknown day {entry.day!r}")
            continue
        weekly.setdefault(day_name, entry.to_domain())
    return weekly


class ShopAvailabilityPayload(CamelModel):
    business_hours: Optional[list[BusinessHoursPayload]] = Field(default=None, alias="businessHours")
    temporary_closure: Optional[TemporaryClosurePayload] = Field(default=None, alias="temporaryClosure")
    special_holidays: Optional[list[SpecialHolidayPayload]] = Field(default=None, alias="specialHolidays")

    def weekly_schedule(self) -> WeeklySchedule:
        return to_weekly_schedule(self.business_hours)

    def closure(self) -> Optional[TemporaryClosure]:
        return self.temporary_closure.to_domain() if self.temporary_closure else None

    def holidays(self, tz: ZoneInfo | None = None) -> tuple[SpecialHoliday, ...]:
        parsed = (holiday.to_domain(tz) for holiday in self.special_holidays or ())
        return tuple(holiday for holiday in parsed if holiday is not None)


class AvailabilityRequest(ShopAvailabilityPayload):
    now: Optional[datetime] = Field(default=None, description="Instant to evaluate; defaults to the current time.")


class OwnerStatusRequest(AvailabilityRequest):
    auto_accept_orders: bool = Field(default=False, alias="autoAcceptOrders")


class AvailabilityResponse(CamelModel):
    is_open: bool = Field(alias="isOpen")
    is_closing_soon: bool = Field(alias="isClosingSoon")
    closure_reason: Optional[Literal["special_holiday", "temporarily_closed", "closed"]] = Field(
        default=None, alias="closureReason"
    )


class NextOpeningModel(CamelModel):
    on_date: date = Field(alias="date")
    time: str


class OwnerStatusResponse(AvailabilityResponse):
    is_temporary_closure: bool = Field(alias="isTemporaryClosure")
    is_special_holiday: bool = Field(alias="isSpecialHoliday")
    next_opening: Optional[NextOpeningModel] = Field(default=None, alias="nextOpening")
    auto_accept_until: Optional[str] = Field(default=None, alias="autoAcceptUntil")

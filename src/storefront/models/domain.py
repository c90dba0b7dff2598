"""Domain models for shop schedules, closures, coordinates and delivery zones."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Literal, Optional, Union

DAY_NAMES: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
"""Weekday names indexed by ``datetime.weekday()``."""

ClosureReason = Literal["special_holiday", "temporarily_closed", "closed"]

FREE: Literal["free"] = "free"
INFEASIBLE: Literal["infeasible"] = "infeasible"
FeeOutcome = Union[int, Literal["free", "infeasible"]]


@dataclass(frozen=True, slots=True)
class TimeSlot:
    """One open window within a day; ``close_time`` earlier than ``open_time`` spans midnight."""

    open_time: Optional[str] = None
    close_time: Optional[str] = None
    is_24_hours: bool = False


@dataclass(frozen=True, slots=True)
class DaySchedule:
    """Canonical per-day opening rules after legacy flat hours have been folded into slots."""

    is_closed: bool = False
    time_slots: tuple[TimeSlot, ...] = ()


WeeklySchedule = dict[str, DaySchedule]


@dataclass(frozen=True, slots=True)
class TemporaryClosure:
    """Ad-hoc closure layered on top of the weekly schedule."""

    is_closed: bool = False
    closed_until: Optional[datetime] = None
    reopen_time: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SpecialHoliday:
    """Closed calendar date range, inclusive of both ends."""

    start_date: date
    end_date: date
    holiday_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Coordinate:
    lat: Optional[float]
    lon: Optional[float]


@dataclass(frozen=True, slots=True)
class Zone:
    """Admin-drawn delivery zone; the ring closes implicitly from the last point back to the first."""

    zone_id: str
    name: str
    polygon: tuple[Coordinate, ...]


@dataclass(frozen=True, slots=True)
class PricingConfig:
    base_fee: float
    rate_per_km_peak: float
    rate_per_km_normal: float
    free_delivery_threshold: float
    max_delivery_distance_km: float


@dataclass(frozen=True, slots=True)
class SlotResolution:
    """Outcome of evaluating one day's slots against a clock time."""

    is_open: bool
    is_closing_soon: bool = False
    minutes_until_close: Optional[int] = None


@dataclass(frozen=True, slots=True)
class AvailabilityStatus:
    """Final open/closed verdict exposed to consumers."""

    is_open: bool
    is_closing_soon: bool = False
    closure_reason: Optional[ClosureReason] = None

    def as_dict(self) -> dict:
        payload: dict = {"isOpen": self.is_open, "isClosingSoon": self.is_closing_soon}
        if self.closure_reason is not None:
            payload["closureReason"] = self.closure_reason
        return payload


@dataclass(frozen=True, slots=True)
class OwnerStoreStatus:
    """Availability status enriched with the flags shown on the owner dashboard."""

    status: AvailabilityStatus
    is_temporary_closure: bool = False
    is_special_holiday: bool = False


@dataclass(frozen=True, slots=True)
class NextOpening:
    on_date: date
    time: str


@dataclass(frozen=True, slots=True)
class DeliveryQuote:
    """Distance and fee for delivering a basket to a coordinate."""

    distance_km: Optional[float]
    fee: FeeOutcome
    rate: Optional[float] = None
    is_peak: bool = False

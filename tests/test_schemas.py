import logging
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from src.storefront.models.domain import DaySchedule, TemporaryClosure, TimeSlot
from src.storefront.schemas.shop import ShopAvailabilityPayload


def _payload(**fields) -> ShopAvailabilityPayload:
    return ShopAvailabilityPayload.model_validate(fields)


def test_time_slots_are_normalised():
    payload = _payload(
        businessHours=[
            {
                "day": "Monday",
                "isClosed": False,
                "timeSlots": [
                    {"openTime": "09:00", "closeTime": "12:00", "is24Hours": False},
                    {"openTime": "18:00", "closeTime": "02:00"},
                ],
            }
        ]
    )

    weekly = payload.weekly_schedule()

    assert weekly["Monday"] == DaySchedule(
        is_closed=False,
        time_slots=(
            TimeSlot(open_time="09:00", close_time="12:00"),
            TimeSlot(open_time="18:00", close_time="02:00"),
        ),
    )


def test_legacy_flat_hours_become_single_slot():
    payload = _payload(businessHours=[{"day": "Tuesday", "openTime": "10:00", "closeTime": "22:00"}])

    assert payload.weekly_schedule()["Tuesday"].time_slots == (TimeSlot(open_time="10:00", close_time="22:00"),)


def test_slots_take_priority_over_legacy_fields():
    payload = _payload(
        businessHours=[
            {
                "day": "Friday",
                "openTime": "01:00",
                "closeTime": "02:00",
                "timeSlots": [{"is24Hours": True}],
            }
        ]
    )

    assert payload.weekly_schedule()["Friday"].time_slots == (TimeSlot(is_24_hours=True),)


def test_empty_slots_fall_back_to_legacy_then_nothing():
    payload = _payload(
        businessHours=[
            {"day": "Monday", "timeSlots": [], "openTime": "08:00", "closeTime": "16:00"},
            {"day": "Sunday", "timeSlots": [], "isClosed": True},
        ]
    )

    weekly = payload.weekly_schedule()

    assert weekly["Monday"].time_slots == (TimeSlot(open_time="08:00", close_time="16:00"),)
    assert weekly["Sunday"] == DaySchedule(is_closed=True, time_slots=())


def test_unknown_days_are_dropped_and_first_entry_wins():
    payload = _payload(
        businessHours=[
            {"day": "Funday", "isClosed": True},
            {"day": "wednesday", "isClosed": True},
            {"day": "Wednesday", "isClosed": False},
        ]
    )

    weekly = payload.weekly_schedule()

    assert set(weekly) == {"Wednesday"}
    assert weekly["Wednesday"].is_closed is True


def test_missing_business_hours_gives_empty_schedule():
    assert _payload().weekly_schedule() == {}
    assert _payload().closure() is None
    assert _payload().holidays() == ()


def test_temporary_closure_parses_iso_timestamp():
    payload = _payload(temporaryClosure={"isClosed": True, "closedUntil": "2026-10-19T18:30:00.000Z", "reopenTime": ""})

    closure = payload.closure()

    assert closure.is_closed is True
    assert closure.closed_until == datetime(2026, 10, 19, 18, 30, tzinfo=timezone.utc)
    assert closure.reopen_time is None


def test_holiday_timestamps_reduce_to_local_dates():
    payload = _payload(
        specialHolidays=[
            {"_id": "h1", "startDate": "2026-12-24T22:00:00Z", "endDate": "2026-12-26"},
        ]
    )

    utc_holiday = payload.holidays(ZoneInfo("UTC"))[0]
    riyadh_holiday = payload.holidays(ZoneInfo("Asia/Riyadh"))[0]

    assert utc_holiday.holiday_id == "h1"
    assert utc_holiday.start_date == date(2026, 12, 24)
    assert riyadh_holiday.start_date == date(2026, 12, 25)
    assert riyadh_holiday.end_date == date(2026, 12, 26)


def test_null_flags_read_as_false():
    payload = _payload(
        businessHours=[
            {
                "day": "Monday",
                "isClosed": None,
                "timeSlots": [{"openTime": "09:00", "closeTime": "17:00", "is24Hours": None}],
            }
        ],
        temporaryClosure={"isClosed": None},
    )

    assert payload.weekly_schedule()["Monday"] == DaySchedule(
        is_closed=False,
        time_slots=(TimeSlot(open_time="09:00", close_time="17:00"),),
    )
    assert payload.closure().is_closed is False


def test_entries_without_day_are_dropped():
    payload = _payload(
        businessHours=[
            {"isClosed": True},
            {"day": None, "isClosed": True},
            {"day": "Monday", "isClosed": False},
        ]
    )

    assert payload.weekly_schedule() == {"Monday": DaySchedule(is_closed=False, time_slots=())}


def test_unparsable_closed_until_keeps_shop_closed(caplog):
    caplog.set_level(logging.DEBUG, logger="src.storefront.schemas.shop")

    payload = _payload(temporaryClosure={"isClosed": True, "closedUntil": "not-a-date", "reopenTime": "15:00"})

    assert payload.closure() == TemporaryClosure(is_closed=True, closed_until=None, reopen_time=None)
    assert "not-a-date" in caplog.text


def test_empty_closed_until_falls_back_to_reopen_time():
    payload = _payload(temporaryClosure={"isClosed": True, "closedUntil": "", "reopenTime": "15:00"})

    assert payload.closure() == TemporaryClosure(is_closed=True, closed_until=None, reopen_time="15:00")


def test_holidays_with_unreadable_dates_are_skipped():
    payload = _payload(
        specialHolidays=[
            {"_id": "bad", "startDate": "someday", "endDate": "2026-12-26"},
            {"_id": "missing", "endDate": "2026-12-26"},
            {"_id": "ok", "startDate": "2026-12-25", "endDate": "2026-12-26"},
        ]
    )

    holidays = payload.holidays(ZoneInfo("UTC"))

    assert [holiday.holiday_id for holiday in holidays] == ["ok"]

import pytest

from app.services.slot_calendar import (
    DAYS,
    PERIODS,
    SLOT_CATALOG,
    SlotCalendar,
    TimeSlotKey,
    iter_slot_attempts,
    max_attempts,
    parse_time_to_minutes,
    times_overlap,
)


def test_catalog_covers_six_days_of_six_periods():
    assert len(DAYS) == 6
    assert len(PERIODS) == 6
    assert len(SLOT_CATALOG) == 36
    assert SLOT_CATALOG[0] == TimeSlotKey("Monday", "09:00", "10:00")
    assert SLOT_CATALOG[-1] == TimeSlotKey("Saturday", "15:00", "16:00")
    assert SLOT_CATALOG[0].time_key == "09:00-10:00"


def test_attempt_walk_is_bounded_by_room_count():
    assert max_attempts(0) == 36
    assert max_attempts(1) == 36
    assert max_attempts(3) == 108

    attempts = list(iter_slot_attempts(2))
    assert len(attempts) == 72
    assert attempts[0] == TimeSlotKey("Monday", "09:00", "10:00")
    assert attempts[5] == TimeSlotKey("Monday", "15:00", "16:00")
    assert attempts[6] == TimeSlotKey("Tuesday", "09:00", "10:00")
    # The week is walked again for the second room.
    assert attempts[36] == attempts[0]


def test_time_parsing_and_overlap():
    assert parse_time_to_minutes("09:30") == 570
    with pytest.raises(ValueError):
        parse_time_to_minutes("9:30")

    assert times_overlap("10:00", "12:00", "11:15", "12:15")
    assert not times_overlap("10:00", "11:00", "11:00", "12:00")
    assert not times_overlap("14:00", "15:00", "09:00", "10:00")


def test_calendar_reservations_and_loads():
    calendar = SlotCalendar()
    monday_first = SLOT_CATALOG[0]
    monday_second = SLOT_CATALOG[1]

    assert calendar.is_free("f1", monday_first)
    calendar.reserve("f1", monday_first)
    calendar.reserve_many("f2", [monday_first, monday_second])

    assert not calendar.is_free("f1", monday_first)
    assert calendar.is_free("f1", monday_second)
    assert calendar.load("f1") == 1
    assert calendar.load("f2") == 2
    assert calendar.load("unknown") == 0
    assert calendar.first_free(["f1", "f2", "f3"], monday_first) == "f3"
    assert calendar.first_free(["f1", "f2"], monday_first) is None
    assert calendar.busy_count(monday_first) == 2
    assert calendar.busy_count(monday_first, exclude=["f2"]) == 1
    assert calendar.reserved_slots("f2") == {monday_first, monday_second}

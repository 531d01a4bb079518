import pytest

from app.services.priority_timetable import (
    PrioritySubjectLoad,
    CoverageSubject,
    generate_priority_timetable,
    prioritize_subject_loads,
    priority_label,
    priority_multiplier,
    priority_shortfall_message,
)
from app.services.slot_calendar import SLOT_CATALOG
from app.services.timetable_engine import GeneratedSlot, detect_conflicts


def test_priority_labels_follow_coverage_bands():
    assert priority_label(0) == "Critical"
    assert priority_label(24.9) == "Critical"
    assert priority_label(25) == "High"
    assert priority_label(49) == "High"
    assert priority_label(50) == "Medium"
    assert priority_label(74.5) == "Medium"
    assert priority_label(75) == "Low"
    assert priority_label(100) == "Low"


def test_multiplier_prefers_remaining_hours_over_coverage():
    assert priority_multiplier(90, 5, 10) == 1.5
    assert priority_multiplier(20, 0, 10) == pytest.approx(1.8)
    assert priority_multiplier(100, 0, 1) == 1.0


def test_prioritized_hours_are_weighted_capped_and_ordered():
    loads = prioritize_subject_loads(
        [
            CoverageSubject("a", "Algebra", "f1", 3, coverage=20),
            CoverageSubject("b", "Biology", "f2", 4, coverage=80),
            CoverageSubject("c", "Chemistry", "f3", 5, coverage=40, remaining_hours=10),
            CoverageSubject("d", "Drawing", "f4", 8, remaining_hours=5),
        ]
    )

    assert [load.subject_id for load in loads] == ["c", "d", "a", "b"]
    assert {load.subject_id: load.hours_per_week for load in loads} == {"a": 5, "b": 5, "c": 10, "d": 10}
    assert {load.subject_id: load.base_hours for load in loads} == {"a": 3, "b": 4, "c": 5, "d": 8}
    # Missing coverage defaults to 50.
    assert next(load for load in loads if load.subject_id == "d").coverage == 50


def test_half_hours_round_up():
    (load,) = prioritize_subject_loads([CoverageSubject("a", "Algebra", "f1", 3)])
    # 3 * 1.5 = 4.5 rounds up rather than to even.
    assert load.hours_per_week == 5


def test_cap_is_configurable():
    (load,) = prioritize_subject_loads([CoverageSubject("a", "Algebra", "f1", 6, coverage=0)], max_hours=7)
    assert load.hours_per_week == 7


def test_priority_generation_reports_scheduled_hours_and_shortfall():
    existing = [
        GeneratedSlot(key.day, key.start_time, key.end_time, "other", "f1", "r9", "B", 2)
        for key in SLOT_CATALOG[:33]
    ]
    result = generate_priority_timetable(
        [
            CoverageSubject("p", "Physics", "f1", 2, coverage=10),
            CoverageSubject("h", "History", "f2", 2, coverage=90),
        ],
        ["r1"],
        2,
        "A",
        existing_slots=existing,
    )

    assert result.conflicts == ["Could only schedule 3/4 hrs for Physics (coverage: 10%)"]
    assert [(item.subject_name, item.scheduled_hours, item.priority) for item in result.priority_report] == [
        ("Physics", 3, "Critical"),
        ("History", 2, "Low"),
    ]
    assert result.priority_report[0].base_hours == 2
    assert result.priority_report[0].coverage == 10
    assert len(result.slots) == 5
    assert detect_conflicts([*existing, *result.slots]) == []


def test_shortfall_message_reports_coverage():
    load = PrioritySubjectLoad("c", "Chemistry", "f3", 7, base_hours=5, coverage=32.5, remaining_hours=0.0)
    assert priority_shortfall_message(load, 4) == "Could only schedule 4/7 hrs for Chemistry (coverage: 32.5%)"

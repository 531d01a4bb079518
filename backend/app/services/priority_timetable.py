from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
import logging
import math
from typing import Literal

from app.core.exceptions import require_items
from app.services.timetable_engine import (
    GeneratedSlot,
    SubjectLoad,
    SubjectOutcome,
    TimetableResult,
    run_generation,
)

logger = logging.getLogger(__name__)

DEFAULT_COVERAGE = 50.0
MAX_PRIORITIZED_HOURS = 10

PriorityLabel = Literal["Critical", "High", "Medium", "Low"]


@dataclass(frozen=True)
class CoverageSubject:
    subject_id: str
    subject_name: str
    faculty_id: str
    base_hours: int
    coverage: float | None = None
    remaining_hours: float | None = None


@dataclass(frozen=True)
class PrioritySubjectLoad(SubjectLoad):
    base_hours: int = 0
    coverage: float = DEFAULT_COVERAGE
    remaining_hours: float = 0.0


@dataclass(frozen=True)
class PriorityReportItem:
    subject_name: str
    coverage: float
    base_hours: int
    scheduled_hours: int
    priority: PriorityLabel


@dataclass
class PriorityTimetableResult(TimetableResult):
    priority_report: list[PriorityReportItem] = field(default_factory=list)


def priority_label(coverage: float) -> PriorityLabel:
    if coverage < 25:
        return "Critical"
    if coverage < 50:
        return "High"
    if coverage < 75:
        return "Medium"
    return "Low"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def priority_multiplier(coverage: float, remaining_hours: float, max_remaining: float) -> float:
    if remaining_hours > 0:
        return 1 + remaining_hours / max_remaining
    return 1 + (100 - coverage) / 100


def prioritize_subject_loads(
    subjects: Iterable[CoverageSubject],
    *,
    max_hours: int = MAX_PRIORITIZED_HOURS,
) -> list[PrioritySubjectLoad]:
    """Weight each subject's weekly hours by coverage urgency and order by need.

    Subjects with remaining-hours estimates are boosted relative to the
    largest estimate; the rest fall back to inverse coverage. Boosted hours
    are capped at ``max_hours``. The result is sorted by remaining hours
    (descending), then coverage (ascending).
    """
    subjects = list(subjects)
    max_remaining = max([1.0, *(subject.remaining_hours or 0.0 for subject in subjects)])

    loads: list[PrioritySubjectLoad] = []
    for subject in subjects:
        coverage = DEFAULT_COVERAGE if subject.coverage is None else subject.coverage
        remaining = subject.remaining_hours or 0.0
        multiplier = priority_multiplier(coverage, remaining, max_remaining)
        prioritized = min(_round_half_up(subject.base_hours * multiplier), max_hours)
        loads.append(
            PrioritySubjectLoad(
                subject_id=subject.subject_id,
                subject_name=subject.subject_name,
                faculty_id=subject.faculty_id,
                hours_per_week=prioritized,
                base_hours=subject.base_hours,
                coverage=coverage,
                remaining_hours=remaining,
            )
        )

    loads.sort(key=lambda load: (-load.remaining_hours, load.coverage))
    return loads


def _format_percent(value: float) -> str:
    return f"{value:g}"


def priority_shortfall_message(load: PrioritySubjectLoad, placed: int) -> str:
    return (
        f"Could only schedule {placed}/{load.hours_per_week} hrs for {load.subject_name} "
        f"(coverage: {_format_percent(load.coverage)}%)"
    )


def _shortfall_describer(loads: list[PrioritySubjectLoad]) -> Callable[[SubjectOutcome], str]:
    by_subject = {load.subject_id: load for load in loads}

    def describe(outcome: SubjectOutcome) -> str:
        return priority_shortfall_message(by_subject[outcome.load.subject_id], outcome.placed)

    return describe


def generate_priority_timetable(
    subjects: list[CoverageSubject],
    room_ids: list[str],
    semester: int,
    section: str,
    department_hour_subject_id: str | None = None,
    existing_slots: Iterable[GeneratedSlot] = (),
    *,
    max_hours: int = MAX_PRIORITIZED_HOURS,
) -> PriorityTimetableResult:
    require_items("subjects", subjects)
    loads = prioritize_subject_loads(subjects, max_hours=max_hours)
    logger.debug(
        "Priority order for semester %s section %s: %s",
        semester,
        section,
        ", ".join(f"{load.subject_id}={load.hours_per_week}h" for load in loads),
    )

    base, outcomes = run_generation(
        loads,
        room_ids,
        semester=semester,
        section=section,
        department_hour_subject_id=department_hour_subject_id,
        existing_slots=existing_slots,
        describe_shortfall=_shortfall_describer(loads),
    )

    # Outcomes come back one per load, in load order.
    report = [
        PriorityReportItem(
            subject_name=load.subject_name,
            coverage=load.coverage,
            base_hours=load.base_hours,
            scheduled_hours=outcome.placed,
            priority=priority_label(load.coverage),
        )
        for load, outcome in zip(loads, outcomes)
    ]
    return PriorityTimetableResult(slots=base.slots, conflicts=base.conflicts, priority_report=report)

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
import logging
import re

from app.core.exceptions import require_items
from app.services.slot_calendar import (
    SLOT_CATALOG,
    SlotCalendar,
    TimeSlotKey,
    iter_slot_attempts,
)

logger = logging.getLogger(__name__)

DEPARTMENT_HOUR_PATTERN = re.compile(r"department (hour|period)", re.IGNORECASE)


@dataclass(frozen=True)
class SubjectLoad:
    subject_id: str
    subject_name: str
    faculty_id: str
    hours_per_week: int


@dataclass(frozen=True)
class GeneratedSlot:
    day: str
    start_time: str
    end_time: str
    subject_id: str
    faculty_id: str
    room_id: str
    section: str
    semester: int

    @property
    def slot_key(self) -> TimeSlotKey:
        return TimeSlotKey(day=self.day, start_time=self.start_time, end_time=self.end_time)


@dataclass(frozen=True)
class SubjectOutcome:
    load: SubjectLoad
    placed: int

    @property
    def deficit(self) -> int:
        return self.load.hours_per_week - self.placed


@dataclass
class TimetableResult:
    slots: list[GeneratedSlot] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)


def is_department_hour_subject(name: str | None) -> bool:
    return bool(name and DEPARTMENT_HOUR_PATTERN.search(name))


def build_subject_loads(
    subjects: Iterable[tuple[str, str, str | None, int]],
    faculty_ids: list[str],
) -> list[SubjectLoad]:
    """Bind each (id, name, faculty id or None, hours) to a SubjectLoad.

    Subjects without an explicit faculty take ``faculty_ids[index % n]``.
    """
    loads: list[SubjectLoad] = []
    for index, (subject_id, subject_name, faculty_id, hours) in enumerate(subjects):
        if faculty_id is None:
            require_items("facultyIds", faculty_ids)
            faculty_id = faculty_ids[index % len(faculty_ids)]
        loads.append(
            SubjectLoad(
                subject_id=subject_id,
                subject_name=subject_name,
                faculty_id=faculty_id,
                hours_per_week=hours,
            )
        )
    return loads


def seed_calendars(
    existing_slots: Iterable[GeneratedSlot],
    faculty_calendar: SlotCalendar,
    room_calendar: SlotCalendar,
) -> None:
    for slot in existing_slots:
        faculty_calendar.reserve(slot.faculty_id, slot.slot_key)
        room_calendar.reserve(slot.room_id, slot.slot_key)


def place_subject_loads(
    loads: list[SubjectLoad],
    room_ids: list[str],
    *,
    semester: int,
    section: str,
    faculty_calendar: SlotCalendar,
    room_calendar: SlotCalendar,
) -> tuple[list[GeneratedSlot], list[SubjectOutcome]]:
    """Greedy placement shared by both timetable generators.

    Loads are placed in the order given. Each load walks the bounded attempt
    iterator and takes the first free room whenever its faculty is free. A
    load that runs out of attempts keeps whatever it got; earlier placements
    are never undone.
    """
    slots: list[GeneratedSlot] = []
    outcomes: list[SubjectOutcome] = []

    for load in loads:
        placed = 0
        for candidate in iter_slot_attempts(len(room_ids)):
            if placed >= load.hours_per_week:
                break
            if not faculty_calendar.is_free(load.faculty_id, candidate):
                continue
            room_id = room_calendar.first_free(room_ids, candidate)
            if room_id is None:
                continue
            slots.append(
                GeneratedSlot(
                    day=candidate.day,
                    start_time=candidate.start_time,
                    end_time=candidate.end_time,
                    subject_id=load.subject_id,
                    faculty_id=load.faculty_id,
                    room_id=room_id,
                    section=section,
                    semester=semester,
                )
            )
            faculty_calendar.reserve(load.faculty_id, candidate)
            room_calendar.reserve(room_id, candidate)
            placed += 1
        outcomes.append(SubjectOutcome(load=load, placed=placed))
        if placed < load.hours_per_week:
            logger.warning(
                "Subject %s placed %s/%s hours before exhausting attempts",
                load.subject_id,
                placed,
                load.hours_per_week,
            )

    return slots, outcomes


def place_department_hour(
    subject_id: str,
    loads: list[SubjectLoad],
    room_ids: list[str],
    class_slots: list[GeneratedSlot],
    *,
    semester: int,
    section: str,
    faculty_calendar: SlotCalendar,
    room_calendar: SlotCalendar,
) -> GeneratedSlot | None:
    """Place one shared period where the most other faculty are already busy.

    The period goes to the class faculty member with the lowest weekly load.
    Candidates are restricted to periods this class has free and where the
    chosen faculty member and some room are free. Earlier slots win ties.
    """
    class_faculty = list(dict.fromkeys(load.faculty_id for load in loads))
    if not class_faculty:
        return None
    class_busy = {slot.slot_key for slot in class_slots}

    best: tuple[TimeSlotKey, str, str] | None = None
    best_score = -1
    for candidate in SLOT_CATALOG:
        if candidate in class_busy:
            continue
        score = faculty_calendar.busy_count(candidate, exclude=class_faculty)
        if score <= best_score:
            continue
        advisor_id = _least_loaded_free(class_faculty, candidate, faculty_calendar)
        room_id = room_calendar.first_free(room_ids, candidate)
        if advisor_id is None or room_id is None:
            continue
        best = (candidate, advisor_id, room_id)
        best_score = score

    if best is None:
        return None

    candidate, advisor_id, room_id = best
    faculty_calendar.reserve(advisor_id, candidate)
    room_calendar.reserve(room_id, candidate)
    return GeneratedSlot(
        day=candidate.day,
        start_time=candidate.start_time,
        end_time=candidate.end_time,
        subject_id=subject_id,
        faculty_id=advisor_id,
        room_id=room_id,
        section=section,
        semester=semester,
    )


def _least_loaded_free(
    faculty_ids: list[str],
    slot: TimeSlotKey,
    calendar: SlotCalendar,
) -> str | None:
    chosen: str | None = None
    min_load: int | None = None
    for faculty_id in faculty_ids:
        if not calendar.is_free(faculty_id, slot):
            continue
        load = calendar.load(faculty_id)
        if min_load is None or load < min_load:
            chosen = faculty_id
            min_load = load
    return chosen


def shortfall_message(outcome: SubjectOutcome) -> str:
    return (
        f"Could only assign {outcome.placed}/{outcome.load.hours_per_week} hours "
        f"for subject: {outcome.load.subject_name}"
    )


def run_generation(
    loads: list[SubjectLoad],
    room_ids: list[str],
    *,
    semester: int,
    section: str,
    department_hour_subject_id: str | None = None,
    existing_slots: Iterable[GeneratedSlot] = (),
    describe_shortfall: Callable[[SubjectOutcome], str] = shortfall_message,
) -> tuple[TimetableResult, list[SubjectOutcome]]:
    require_items("subjects", loads)
    require_items("roomIds", room_ids)

    faculty_calendar = SlotCalendar()
    room_calendar = SlotCalendar()
    seed_calendars(existing_slots, faculty_calendar, room_calendar)

    slots, outcomes = place_subject_loads(
        loads,
        room_ids,
        semester=semester,
        section=section,
        faculty_calendar=faculty_calendar,
        room_calendar=room_calendar,
    )
    result = TimetableResult(
        slots=slots,
        conflicts=[describe_shortfall(outcome) for outcome in outcomes if outcome.deficit > 0],
    )

    if department_hour_subject_id:
        department_slot = place_department_hour(
            department_hour_subject_id,
            loads,
            room_ids,
            slots,
            semester=semester,
            section=section,
            faculty_calendar=faculty_calendar,
            room_calendar=room_calendar,
        )
        if department_slot is None:
            result.conflicts.append(
                f"Could not place department hour for semester {semester} section {section}: "
                "no free period with an available faculty member and room"
            )
        else:
            result.slots.append(department_slot)

    logger.debug(
        "Generated %s slot(s) with %s conflict(s) for semester %s section %s",
        len(result.slots),
        len(result.conflicts),
        semester,
        section,
    )
    return result, outcomes


def generate_timetable(
    loads: list[SubjectLoad],
    room_ids: list[str],
    semester: int,
    section: str,
    department_hour_subject_id: str | None = None,
    existing_slots: Iterable[GeneratedSlot] = (),
) -> TimetableResult:
    result, _ = run_generation(
        loads,
        room_ids,
        semester=semester,
        section=section,
        department_hour_subject_id=department_hour_subject_id,
        existing_slots=existing_slots,
    )
    return result


def detect_conflicts(slots: Iterable[GeneratedSlot]) -> list[str]:
    grouped: dict[str, list[GeneratedSlot]] = defaultdict(list)
    for slot in slots:
        grouped[f"faculty:{slot.faculty_id}:{slot.day}:{slot.start_time}"].append(slot)
        grouped[f"room:{slot.room_id}:{slot.day}:{slot.start_time}"].append(slot)

    return [
        f"CONFLICT: {key} has {len(items)} overlapping assignments"
        for key, items in grouped.items()
        if len(items) > 1
    ]

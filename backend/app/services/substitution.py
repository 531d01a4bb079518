from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
import logging
import math
from typing import Literal

from app.services.slot_calendar import times_overlap

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
DEFAULT_SUGGESTION_LIMIT = 5

LeaveType = Literal["full_day", "partial"]


@dataclass(frozen=True)
class FacultyProfile:
    faculty_id: str
    name: str
    department_id: str
    is_active: bool = True


@dataclass(frozen=True)
class ClassSlot:
    faculty_id: str
    day: str
    start_time: str
    end_time: str
    subject_id: str | None = None
    room_id: str | None = None
    section: str | None = None
    semester: int | None = None


@dataclass(frozen=True)
class LeaveWindow:
    faculty_id: str
    start_date: date
    end_date: date | None = None
    leave_type: LeaveType = "full_day"
    start_time: str | None = None
    end_time: str | None = None

    @property
    def last_date(self) -> date:
        return self.end_date or self.start_date

    def overlaps_dates(self, start: date, end: date) -> bool:
        return self.start_date <= end and self.last_date >= start

    def blocks(self, start: date, end: date, slot_start: str, slot_end: str) -> bool:
        if not self.overlaps_dates(start, end):
            return False
        if self.leave_type == "full_day":
            return True
        if not self.start_time or not self.end_time:
            return False
        return times_overlap(self.start_time, self.end_time, slot_start, slot_end)


@dataclass(frozen=True)
class AffectedSlot:
    date: date
    day: str
    start_time: str
    end_time: str
    subject_id: str | None = None
    room_id: str | None = None
    section: str | None = None


@dataclass(frozen=True)
class ResolvedSlot:
    slot: AffectedSlot
    substitute_id: str | None = None
    substitute_name: str | None = None


@dataclass
class LeaveResolution:
    slots: list[ResolvedSlot] = field(default_factory=list)
    substitute_id: str | None = None
    substitute_name: str | None = None

    @property
    def unresolved_count(self) -> int:
        return sum(1 for item in self.slots if item.substitute_id is None)


def weekday_name(value: date) -> str:
    return WEEKDAY_NAMES[value.weekday()]


def substitute_score(
    candidate: FacultyProfile,
    *,
    day: str,
    start_time: str,
    end_time: str,
    leave_start: date,
    leave_end: date,
    sibling_leaves: list[LeaveWindow],
    timetable_slots: list[ClassSlot],
) -> float:
    """Number of classes the candidate teaches that day, or infinity if unusable.

    A candidate is unusable when one of their own leaves covers the slot or
    when they already teach at an overlapping time that day.
    """
    for leave in sibling_leaves:
        if leave.faculty_id != candidate.faculty_id:
            continue
        if leave.blocks(leave_start, leave_end, start_time, end_time):
            return math.inf

    day_load = 0
    for slot in timetable_slots:
        if slot.faculty_id != candidate.faculty_id or slot.day != day:
            continue
        day_load += 1
        if times_overlap(slot.start_time, slot.end_time, start_time, end_time):
            return math.inf
    return day_load


def find_substitute(
    *,
    department_id: str,
    exclude_faculty_id: str,
    day: str,
    start_time: str,
    end_time: str,
    leave_start: date,
    leave_end: date | None,
    faculty: list[FacultyProfile],
    sibling_leaves: list[LeaveWindow],
    timetable_slots: list[ClassSlot],
) -> FacultyProfile | None:
    leave_end = leave_end or leave_start
    candidates = [
        item
        for item in faculty
        if item.department_id == department_id and item.is_active and item.faculty_id != exclude_faculty_id
    ]
    ranked: list[tuple[float, FacultyProfile]] = []
    for candidate in candidates:
        score = substitute_score(
            candidate,
            day=day,
            start_time=start_time,
            end_time=end_time,
            leave_start=leave_start,
            leave_end=leave_end,
            sibling_leaves=sibling_leaves,
            timetable_slots=timetable_slots,
        )
        if score < math.inf:
            ranked.append((score, candidate))

    ranked.sort(key=lambda item: item[0])
    return ranked[0][1] if ranked else None


def collect_affected_slots(leave: LeaveWindow, timetable_slots: list[ClassSlot]) -> list[AffectedSlot]:
    own_slots = [slot for slot in timetable_slots if slot.faculty_id == leave.faculty_id]

    if leave.leave_type == "partial":
        if not leave.start_time or not leave.end_time:
            return []
        day = weekday_name(leave.start_date)
        return [
            _affected(leave.start_date, slot)
            for slot in own_slots
            if slot.day == day and times_overlap(slot.start_time, slot.end_time, leave.start_time, leave.end_time)
        ]

    affected: list[AffectedSlot] = []
    current = leave.start_date
    while current <= leave.last_date:
        day = weekday_name(current)
        affected.extend(_affected(current, slot) for slot in own_slots if slot.day == day)
        current += timedelta(days=1)
    return affected


def _affected(on: date, slot: ClassSlot) -> AffectedSlot:
    return AffectedSlot(
        date=on,
        day=slot.day,
        start_time=slot.start_time,
        end_time=slot.end_time,
        subject_id=slot.subject_id,
        room_id=slot.room_id,
        section=slot.section,
    )


def resolve_leave_substitutes(
    leave: LeaveWindow,
    *,
    department_id: str,
    faculty: list[FacultyProfile],
    sibling_leaves: list[LeaveWindow],
    timetable_slots: list[ClassSlot],
) -> LeaveResolution:
    """Pick a substitute for every class the leave takes out, one slot at a time."""
    resolution = LeaveResolution()
    for affected in collect_affected_slots(leave, timetable_slots):
        substitute = find_substitute(
            department_id=department_id,
            exclude_faculty_id=leave.faculty_id,
            day=affected.day,
            start_time=affected.start_time,
            end_time=affected.end_time,
            leave_start=leave.start_date,
            leave_end=leave.last_date,
            faculty=faculty,
            sibling_leaves=sibling_leaves,
            timetable_slots=timetable_slots,
        )
        if substitute is None:
            resolution.slots.append(ResolvedSlot(slot=affected))
            continue
        resolution.slots.append(
            ResolvedSlot(slot=affected, substitute_id=substitute.faculty_id, substitute_name=substitute.name)
        )
        if resolution.substitute_id is None:
            resolution.substitute_id = substitute.faculty_id
            resolution.substitute_name = substitute.name

    if resolution.unresolved_count:
        logger.warning(
            "No substitute found for %s of %s slot(s) of faculty %s",
            resolution.unresolved_count,
            len(resolution.slots),
            leave.faculty_id,
        )
    return resolution


@dataclass(frozen=True)
class FacultyLoad:
    faculty_id: str
    name: str
    department_id: str
    current_load: int
    max_weekly_load: int


@dataclass(frozen=True)
class SubjectMapping:
    faculty_id: str
    subject_id: str


@dataclass(frozen=True)
class ReplacementSuggestion:
    faculty_id: str
    faculty_name: str
    reason: str
    priority: int
    load_percentage: int


def suggest_replacements(
    *,
    subject_id: str,
    department_id: str,
    day: str,
    start_time: str,
    end_time: str,
    faculty: list[FacultyLoad],
    subject_mappings: list[SubjectMapping],
    busy_slots: list[ClassSlot],
    exclude_faculty_id: str,
    limit: int = DEFAULT_SUGGESTION_LIMIT,
) -> list[ReplacementSuggestion]:
    """Rank replacement teachers: same subject first, then same department, then anyone."""
    subject_faculty = {item.faculty_id for item in subject_mappings if item.subject_id == subject_id}
    busy_faculty = {
        slot.faculty_id
        for slot in busy_slots
        if slot.day == day and slot.start_time == start_time and slot.end_time == end_time
    }

    suggestions: list[ReplacementSuggestion] = []
    for item in faculty:
        if item.faculty_id == exclude_faculty_id or item.faculty_id in busy_faculty:
            continue
        if item.current_load >= item.max_weekly_load:
            continue

        load_percentage = int(math.floor(item.current_load / item.max_weekly_load * 100 + 0.5))
        if item.faculty_id in subject_faculty:
            priority, reason = 1, "Teaches same subject"
        elif item.department_id == department_id:
            priority, reason = 2, "Same department, available"
        else:
            priority, reason = 3, "Available (different dept)"
        suggestions.append(
            ReplacementSuggestion(
                faculty_id=item.faculty_id,
                faculty_name=item.name,
                reason=reason,
                priority=priority,
                load_percentage=load_percentage,
            )
        )

    suggestions.sort(key=lambda item: (item.priority, item.load_percentage))
    return suggestions[:limit]

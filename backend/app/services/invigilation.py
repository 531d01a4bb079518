from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
import logging
from typing import Literal

from app.core.exceptions import require_items

logger = logging.getLogger(__name__)

AssignmentStatus = Literal["auto-assigned"]


@dataclass(frozen=True)
class FacultyCandidate:
    faculty_id: str
    department_id: str
    invigilation_count: int = 0
    is_active: bool = True
    name: str | None = None


@dataclass(frozen=True)
class ExamSlot:
    exam_id: str
    room_id: str
    department_id: str
    exam_date: str | None = None
    start_time: str | None = None
    end_time: str | None = None


@dataclass(frozen=True)
class AlreadyAllocated:
    exam_id: str
    faculty_id: str


@dataclass(frozen=True)
class InvigilatorAssignment:
    exam_id: str
    room_id: str
    department_id: str
    primary_invigilator_id: str
    backup_invigilator_id: str | None = None
    status: AssignmentStatus = "auto-assigned"


@dataclass
class InvigilationResult:
    assignments: list[InvigilatorAssignment] = field(default_factory=list)
    unassigned: list[str] = field(default_factory=list)


def allocate_invigilators(
    exam_slots: list[ExamSlot],
    faculty: list[FacultyCandidate],
    already_allocated: list[AlreadyAllocated] | None = None,
) -> InvigilationResult:
    """Give each exam room a primary and, when possible, a backup invigilator.

    Only active faculty of the room's department qualify. Faculty used
    earlier in the run or listed in ``already_allocated`` for the same exam
    are skipped, and the rest are taken in ascending order of duty count.

    Overlap between different exams is not checked here.
    """
    require_items("examSlots", exam_slots)
    require_items("faculty", faculty)

    history: dict[str, set[str]] = {}
    for item in already_allocated or []:
        history.setdefault(item.exam_id, set()).add(item.faculty_id)

    used_this_run: set[str] = set()
    result = InvigilationResult()

    for slot in exam_slots:
        excluded = used_this_run | history.get(slot.exam_id, set())
        available = [
            candidate
            for candidate in faculty
            if candidate.is_active
            and candidate.department_id == slot.department_id
            and candidate.faculty_id not in excluded
        ]
        available.sort(key=lambda candidate: candidate.invigilation_count)

        if not available:
            result.unassigned.append(
                f"Room {slot.room_id} for exam {slot.exam_id}: "
                f"no available faculty in department {slot.department_id}"
            )
            continue

        primary = available[0]
        backup = available[1] if len(available) > 1 else None
        used_this_run.add(primary.faculty_id)
        if backup is not None:
            used_this_run.add(backup.faculty_id)

        result.assignments.append(
            InvigilatorAssignment(
                exam_id=slot.exam_id,
                room_id=slot.room_id,
                department_id=slot.department_id,
                primary_invigilator_id=primary.faculty_id,
                backup_invigilator_id=backup.faculty_id if backup is not None else None,
            )
        )

    if result.unassigned:
        logger.warning("%s exam room(s) left without an invigilator", len(result.unassigned))
    return result


def duty_count_increments(assignments: list[InvigilatorAssignment]) -> dict[str, int]:
    counts: Counter[str] = Counter()
    for assignment in assignments:
        counts[assignment.primary_invigilator_id] += 1
        if assignment.backup_invigilator_id:
            counts[assignment.backup_invigilator_id] += 1
    return dict(counts)

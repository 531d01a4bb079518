from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
import logging
import math

from app.core.exceptions import require_items

logger = logging.getLogger(__name__)

COLS_PER_ROW = 6


@dataclass(frozen=True)
class StudentInfo:
    student_id: str
    roll_number: str
    department_id: str
    name: str | None = None
    semester: int | None = None
    section: str | None = None


@dataclass(frozen=True)
class RoomInfo:
    room_id: str
    room_number: str
    capacity: int
    department_id: str | None = None


@dataclass(frozen=True)
class SeatAssignment:
    student_id: str
    seat_number: str
    row: int
    col: int


@dataclass
class RoomSeating:
    room_id: str
    room_number: str
    capacity: int
    student_allocations: list[SeatAssignment] = field(default_factory=list)

    @property
    def allocated(self) -> int:
        return len(self.student_allocations)


@dataclass
class SeatingResult:
    allocations: list[RoomSeating] = field(default_factory=list)
    unallocated: list[str] = field(default_factory=list)


def seat_coordinates(seat: int, columns: int = COLS_PER_ROW) -> tuple[int, int]:
    return math.ceil(seat / columns), ((seat - 1) % columns) + 1


def format_seat_number(room_number: str, seat: int) -> str:
    return f"{room_number}-{seat:02d}"


def allocate_seating(
    students: list[StudentInfo],
    rooms: list[RoomInfo],
    *,
    columns: int = COLS_PER_ROW,
) -> SeatingResult:
    """Fill rooms in order with students sorted by department then roll number.

    Every student ends up either seated or listed in ``unallocated``.
    """
    require_items("students", students)
    require_items("rooms", rooms)

    queue = deque(sorted(students, key=lambda student: (student.department_id, student.roll_number)))
    result = SeatingResult()

    for room in rooms:
        if not queue:
            break
        seating = RoomSeating(room_id=room.room_id, room_number=room.room_number, capacity=room.capacity)
        for seat in range(1, room.capacity + 1):
            if not queue:
                break
            student = queue.popleft()
            row, col = seat_coordinates(seat, columns)
            seating.student_allocations.append(
                SeatAssignment(
                    student_id=student.student_id,
                    seat_number=format_seat_number(room.room_number, seat),
                    row=row,
                    col=col,
                )
            )
        result.allocations.append(seating)

    result.unallocated = [student.roll_number for student in queue]
    if result.unallocated:
        logger.warning(
            "%s student(s) could not be seated across %s room(s)",
            len(result.unallocated),
            len(rooms),
        )
    return result

import pytest

from app.core.exceptions import InputInvalidError
from app.services.seating import RoomInfo, StudentInfo, allocate_seating, seat_coordinates


def _students(*rolls, department="cse"):
    return [StudentInfo(student_id=f"id-{roll}", roll_number=roll, department_id=department) for roll in rolls]


def test_students_fill_rooms_in_order():
    students = _students("E", "C", "A", "D", "B")
    rooms = [
        RoomInfo("r1", "101", 2),
        RoomInfo("r2", "102", 2),
        RoomInfo("r3", "103", 1),
    ]

    result = allocate_seating(students, rooms)

    assert [[seat.student_id for seat in room.student_allocations] for room in result.allocations] == [
        ["id-A", "id-B"],
        ["id-C", "id-D"],
        ["id-E"],
    ]
    assert [room.allocated for room in result.allocations] == [2, 2, 1]
    assert result.unallocated == []
    assert result.allocations[0].student_allocations[1].seat_number == "101-02"


def test_students_are_grouped_by_department_before_roll_number():
    students = _students("002", "001", department="mech") + _students("009", department="cse")
    result = allocate_seating(students, [RoomInfo("r1", "A1", 10)])

    assert [seat.student_id for seat in result.allocations[0].student_allocations] == [
        "id-009",
        "id-001",
        "id-002",
    ]


def test_overflow_students_are_listed_as_unallocated():
    result = allocate_seating(_students("A", "B", "C", "D"), [RoomInfo("r1", "201", 3)])

    assert result.allocations[0].allocated == 3
    assert result.unallocated == ["D"]


def test_rooms_after_the_last_student_are_skipped():
    result = allocate_seating(
        _students("A"),
        [RoomInfo("r1", "101", 4), RoomInfo("r2", "102", 4)],
    )

    assert [room.room_id for room in result.allocations] == ["r1"]


def test_every_student_is_seated_exactly_once_or_unallocated():
    rolls = [f"R{index:03d}" for index in range(40)]
    result = allocate_seating(
        _students(*rolls),
        [RoomInfo("r1", "301", 13), RoomInfo("r2", "302", 20)],
    )

    seated = [seat.student_id for room in result.allocations for seat in room.student_allocations]
    assert len(seated) == len(set(seated)) == 33
    assert set(seated) | {f"id-{roll}" for roll in result.unallocated} == {f"id-{roll}" for roll in rolls}
    for room in result.allocations:
        assert room.allocated <= room.capacity


def test_seat_grid_coordinates():
    assert seat_coordinates(1) == (1, 1)
    assert seat_coordinates(6) == (1, 6)
    assert seat_coordinates(7) == (2, 1)
    assert seat_coordinates(30) == (5, 6)
    assert seat_coordinates(5, columns=4) == (2, 1)

    result = allocate_seating(_students(*[f"S{index:02d}" for index in range(7)]), [RoomInfo("r1", "B12", 7)])
    last = result.allocations[0].student_allocations[-1]
    assert (last.seat_number, last.row, last.col) == ("B12-07", 2, 1)


def test_empty_inputs_are_rejected():
    with pytest.raises(InputInvalidError):
        allocate_seating([], [RoomInfo("r1", "101", 2)])
    with pytest.raises(InputInvalidError):
        allocate_seating(_students("A"), [])

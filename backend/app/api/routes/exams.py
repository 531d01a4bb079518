import logging
from time import perf_counter

from fastapi import APIRouter, Depends
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.config import get_settings
from app.models.faculty import Faculty
from app.models.invigilator_allocation import InvigilatorAllocation
from app.models.seating_allocation import SeatingAllocation
from app.schemas.exam import (
    InvigilationRequest,
    InvigilationResponse,
    InvigilatorAssignmentOut,
    RoomSeatingOut,
    SeatingRequest,
    SeatingResponse,
)
from app.services.invigilation import (
    AlreadyAllocated,
    ExamSlot,
    FacultyCandidate,
    allocate_invigilators as run_invigilator_allocation,
    duty_count_increments,
)
from app.services.seating import RoomInfo, StudentInfo, allocate_seating as run_seating_allocation

router = APIRouter()
logger = logging.getLogger(__name__)


def _seating_out(record: SeatingAllocation) -> RoomSeatingOut:
    return RoomSeatingOut(
        roomId=record.room_id,
        roomNumber=record.room_number,
        capacity=record.capacity,
        allocated=record.allocated,
        studentAllocations=record.student_allocations,
    )


def _assignment_out(record: InvigilatorAllocation) -> InvigilatorAssignmentOut:
    return InvigilatorAssignmentOut(
        examId=record.exam_id,
        roomId=record.room_id,
        departmentId=record.department_id,
        primaryInvigilatorId=record.primary_invigilator_id,
        backupInvigilatorId=record.backup_invigilator_id,
        status=record.status.value,
    )


def _apply_duty_counts(db: Session, increments: dict[str, int], *, sign: int) -> None:
    if not increments:
        return
    for faculty in db.execute(select(Faculty).where(Faculty.id.in_(list(increments)))).scalars():
        faculty.invigilation_count = max(0, faculty.invigilation_count + sign * increments[faculty.id])


def _roster_candidates(db: Session) -> list[FacultyCandidate]:
    query = select(Faculty).where(Faculty.is_active.is_(True)).order_by(Faculty.name, Faculty.id)
    return [
        FacultyCandidate(
            faculty_id=item.id,
            department_id=item.department_id,
            invigilation_count=item.invigilation_count,
            is_active=item.is_active,
            name=item.name,
        )
        for item in db.execute(query).scalars()
    ]


@router.post("/exams/{exam_id}/seating", response_model=SeatingResponse)
def allocate_seating(
    exam_id: str,
    payload: SeatingRequest,
    db: Session = Depends(get_db),
) -> SeatingResponse:
    started = perf_counter()
    logger.info(
        "SEATING ALLOCATION START | exam_id=%s | students=%s | rooms=%s",
        exam_id,
        len(payload.students),
        len(payload.rooms),
    )
    result = run_seating_allocation(
        [
            StudentInfo(
                student_id=student.id,
                roll_number=student.rollNumber,
                department_id=student.departmentId,
                name=student.name,
                semester=student.semester,
                section=student.section,
            )
            for student in payload.students
        ],
        [
            RoomInfo(
                room_id=room.id,
                room_number=room.roomNumber,
                capacity=room.capacity,
                department_id=room.departmentId,
            )
            for room in payload.rooms
        ],
        columns=get_settings().seat_columns,
    )

    db.execute(delete(SeatingAllocation).where(SeatingAllocation.exam_id == exam_id))
    records: list[SeatingAllocation] = []
    for position, seating in enumerate(result.allocations):
        record = SeatingAllocation(
            exam_id=exam_id,
            room_id=seating.room_id,
            room_number=seating.room_number,
            capacity=seating.capacity,
            allocated=seating.allocated,
            position=position,
            student_allocations=[
                {
                    "studentId": seat.student_id,
                    "seatNumber": seat.seat_number,
                    "row": seat.row,
                    "col": seat.col,
                }
                for seat in seating.student_allocations
            ],
        )
        db.add(record)
        records.append(record)
    db.commit()

    logger.info(
        "SEATING ALLOCATION COMPLETE | exam_id=%s | rooms_used=%s | unallocated=%s | runtime_ms=%s",
        exam_id,
        len(records),
        len(result.unallocated),
        int((perf_counter() - started) * 1000),
    )
    return SeatingResponse(
        examId=exam_id,
        allocations=[_seating_out(record) for record in records],
        unallocated=result.unallocated,
    )


@router.get("/exams/{exam_id}/seating", response_model=list[RoomSeatingOut])
def list_seating(exam_id: str, db: Session = Depends(get_db)) -> list[RoomSeatingOut]:
    query = select(SeatingAllocation).where(SeatingAllocation.exam_id == exam_id).order_by(SeatingAllocation.position)
    return [_seating_out(record) for record in db.execute(query).scalars()]


@router.post("/exams/{exam_id}/invigilators", response_model=InvigilationResponse)
def allocate_invigilators(
    exam_id: str,
    payload: InvigilationRequest,
    db: Session = Depends(get_db),
) -> InvigilationResponse:
    started = perf_counter()
    # Undo the duty counts of this exam's previous run before ranking anyone.
    previous = list(
        db.execute(select(InvigilatorAllocation).where(InvigilatorAllocation.exam_id == exam_id)).scalars()
    )
    _apply_duty_counts(db, duty_count_increments(previous), sign=-1)
    db.flush()

    if payload.faculty is None:
        candidates = _roster_candidates(db)
    else:
        candidates = [
            FacultyCandidate(
                faculty_id=item.id,
                department_id=item.departmentId,
                invigilation_count=item.invigilationCount,
                is_active=item.isActive,
                name=item.name,
            )
            for item in payload.faculty
        ]
    logger.info(
        "INVIGILATOR ALLOCATION START | exam_id=%s | rooms=%s | faculty=%s",
        exam_id,
        len(payload.rooms),
        len(candidates),
    )

    result = run_invigilator_allocation(
        [
            ExamSlot(
                exam_id=exam_id,
                room_id=room.roomId,
                department_id=room.departmentId,
                exam_date=payload.examDate,
                start_time=payload.startTime,
                end_time=payload.endTime,
            )
            for room in payload.rooms
        ],
        candidates,
        [AlreadyAllocated(exam_id=item.examId, faculty_id=item.facultyId) for item in payload.alreadyAllocated],
    )

    db.execute(delete(InvigilatorAllocation).where(InvigilatorAllocation.exam_id == exam_id))

    records: list[InvigilatorAllocation] = []
    for position, assignment in enumerate(result.assignments):
        record = InvigilatorAllocation(
            exam_id=assignment.exam_id,
            room_id=assignment.room_id,
            department_id=assignment.department_id,
            primary_invigilator_id=assignment.primary_invigilator_id,
            backup_invigilator_id=assignment.backup_invigilator_id,
            position=position,
        )
        db.add(record)
        records.append(record)
    _apply_duty_counts(db, duty_count_increments(result.assignments), sign=1)
    db.commit()

    logger.info(
        "INVIGILATOR ALLOCATION COMPLETE | exam_id=%s | assigned=%s | unassigned=%s | runtime_ms=%s",
        exam_id,
        len(records),
        len(result.unassigned),
        int((perf_counter() - started) * 1000),
    )
    return InvigilationResponse(
        examId=exam_id,
        assignments=[_assignment_out(record) for record in records],
        unassigned=result.unassigned,
    )


@router.get("/exams/{exam_id}/invigilators", response_model=list[InvigilatorAssignmentOut])
def list_invigilators(exam_id: str, db: Session = Depends(get_db)) -> list[InvigilatorAssignmentOut]:
    query = (
        select(InvigilatorAllocation)
        .where(InvigilatorAllocation.exam_id == exam_id)
        .order_by(InvigilatorAllocation.position)
    )
    return [_assignment_out(record) for record in db.execute(query).scalars()]

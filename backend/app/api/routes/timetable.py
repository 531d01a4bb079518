import logging
from time import perf_counter

from fastapi import APIRouter, Depends, Query
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.config import get_settings
from app.core.exceptions import ResourceNotFoundError, require_items
from app.models.faculty import Faculty
from app.models.timetable import GeneratorKind, Timetable
from app.schemas.timetable import (
    GeneratePriorityTimetableRequest,
    GeneratePriorityTimetableResponse,
    GenerateTimetableRequest,
    GenerateTimetableResponse,
    SubjectDemand,
    TimetableOut,
)
from app.services.priority_timetable import CoverageSubject, generate_priority_timetable
from app.services.timetable_engine import (
    GeneratedSlot,
    build_subject_loads,
    detect_conflicts,
    generate_timetable as run_timetable_generation,
    is_department_hour_subject,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def slot_to_dict(slot: GeneratedSlot) -> dict:
    return {
        "day": slot.day,
        "startTime": slot.start_time,
        "endTime": slot.end_time,
        "subjectId": slot.subject_id,
        "facultyId": slot.faculty_id,
        "roomId": slot.room_id,
        "section": slot.section,
        "semester": slot.semester,
    }


def slot_from_dict(item: dict) -> GeneratedSlot:
    return GeneratedSlot(
        day=item["day"],
        start_time=item["startTime"],
        end_time=item["endTime"],
        subject_id=item["subjectId"],
        faculty_id=item["facultyId"],
        room_id=item["roomId"],
        section=item["section"],
        semester=int(item["semester"]),
    )


def _reserved_slots_outside_scope(db: Session, *, department_id: str, semester: int, section: str) -> list[GeneratedSlot]:
    reserved: list[GeneratedSlot] = []
    for record in db.execute(select(Timetable).order_by(Timetable.generated_at, Timetable.id)).scalars():
        if record.department_id == department_id and record.semester == semester and record.section == section:
            continue
        reserved.extend(slot_from_dict(item) for item in record.slots or [])
    return reserved


def _split_department_hour(
    subjects: list[SubjectDemand],
    explicit_id: str | None,
) -> tuple[list[SubjectDemand], str | None]:
    department_hour_id = explicit_id
    if department_hour_id is None:
        department_hour_id = next(
            (subject.id for subject in subjects if is_department_hour_subject(subject.name)),
            None,
        )
    # Only one department hour is placed, so no department-hour subject counts as regular demand.
    regular = [
        subject
        for subject in subjects
        if subject.id != department_hour_id and not is_department_hour_subject(subject.name)
    ]
    return regular, department_hour_id


def _resolve_faculty_ids(db: Session, payload: GenerateTimetableRequest, subjects: list[SubjectDemand]) -> list[str]:
    if payload.facultyIds or all(subject.facultyId for subject in subjects):
        return list(payload.facultyIds)
    query = (
        select(Faculty.id)
        .where(Faculty.department_id == payload.departmentId, Faculty.is_active.is_(True))
        .order_by(Faculty.name, Faculty.id)
    )
    return list(db.execute(query).scalars())


def _replace_timetable(
    db: Session,
    *,
    payload: GenerateTimetableRequest,
    generator: GeneratorKind,
    slots: list[GeneratedSlot],
    conflicts: list[str],
    priority_report: list[dict] | None = None,
) -> Timetable:
    # Core delete runs immediately, so the scope's unique key is free before the insert flushes.
    db.execute(
        delete(Timetable).where(
            Timetable.department_id == payload.departmentId,
            Timetable.semester == payload.semester,
            Timetable.section == payload.section,
        )
    )
    record = Timetable(
        department_id=payload.departmentId,
        semester=payload.semester,
        section=payload.section,
        academic_year=payload.academicYear,
        generator=generator,
        slots=[slot_to_dict(slot) for slot in slots],
        conflicts=list(conflicts),
        priority_report=priority_report,
        is_approved=False,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def _log_start(label: str, payload: GenerateTimetableRequest) -> None:
    logger.info(
        "%s START | department_id=%s | semester=%s | section=%s | subjects=%s | rooms=%s",
        label,
        payload.departmentId,
        payload.semester,
        payload.section,
        len(payload.subjects),
        len(payload.roomIds),
    )


def _log_complete(label: str, payload: GenerateTimetableRequest, slots: list[GeneratedSlot], conflicts: list[str], started: float) -> None:
    logger.info(
        "%s COMPLETE | department_id=%s | semester=%s | section=%s | slots=%s | conflicts=%s | runtime_ms=%s",
        label,
        payload.departmentId,
        payload.semester,
        payload.section,
        len(slots),
        len(conflicts),
        int((perf_counter() - started) * 1000),
    )
    overlaps = detect_conflicts(slots)
    if overlaps:
        logger.error("%s OVERLAPS DETECTED | %s", label, "; ".join(overlaps))


@router.post("/timetable/generate", response_model=GenerateTimetableResponse)
def generate_timetable(
    payload: GenerateTimetableRequest,
    db: Session = Depends(get_db),
) -> GenerateTimetableResponse:
    started = perf_counter()
    label = "TIMETABLE GENERATION"
    _log_start(label, payload)
    try:
        require_items("subjects", payload.subjects)
        require_items("roomIds", payload.roomIds)
        subjects, department_hour_id = _split_department_hour(payload.subjects, payload.departmentHourSubjectId)
        require_items("subjects", subjects)
        loads = build_subject_loads(
            ((subject.id, subject.name, subject.facultyId, subject.hoursPerWeek) for subject in subjects),
            _resolve_faculty_ids(db, payload, subjects),
        )
        result = run_timetable_generation(
            loads,
            payload.roomIds,
            payload.semester,
            payload.section,
            department_hour_subject_id=department_hour_id,
            existing_slots=_reserved_slots_outside_scope(
                db,
                department_id=payload.departmentId,
                semester=payload.semester,
                section=payload.section,
            ),
        )
        record = _replace_timetable(
            db,
            payload=payload,
            generator=GeneratorKind.standard,
            slots=result.slots,
            conflicts=result.conflicts,
        )
        _log_complete(label, payload, result.slots, result.conflicts, started)
        return GenerateTimetableResponse(
            timetableId=record.id,
            slots=record.slots,
            conflicts=record.conflicts,
            slotsGenerated=len(result.slots),
        )
    except Exception:
        logger.exception(
            "%s FAILED | department_id=%s | semester=%s | section=%s | wall_ms=%s",
            label,
            payload.departmentId,
            payload.semester,
            payload.section,
            int((perf_counter() - started) * 1000),
        )
        raise


@router.post("/timetable/generate-priority", response_model=GeneratePriorityTimetableResponse)
def generate_priority(
    payload: GeneratePriorityTimetableRequest,
    db: Session = Depends(get_db),
) -> GeneratePriorityTimetableResponse:
    started = perf_counter()
    label = "PRIORITY TIMETABLE GENERATION"
    _log_start(label, payload)
    try:
        require_items("subjects", payload.subjects)
        require_items("roomIds", payload.roomIds)
        subjects, department_hour_id = _split_department_hour(payload.subjects, payload.departmentHourSubjectId)
        require_items("subjects", subjects)
        loads = build_subject_loads(
            ((subject.id, subject.name, subject.facultyId, subject.hoursPerWeek) for subject in subjects),
            _resolve_faculty_ids(db, payload, subjects),
        )
        coverage_by_id = {subject.id: subject for subject in subjects}
        coverage_subjects = [
            CoverageSubject(
                subject_id=load.subject_id,
                subject_name=load.subject_name,
                faculty_id=load.faculty_id,
                base_hours=load.hours_per_week,
                coverage=coverage_by_id[load.subject_id].coveragePercent,
                remaining_hours=coverage_by_id[load.subject_id].remainingHours,
            )
            for load in loads
        ]
        result = generate_priority_timetable(
            coverage_subjects,
            payload.roomIds,
            payload.semester,
            payload.section,
            department_hour_subject_id=department_hour_id,
            existing_slots=_reserved_slots_outside_scope(
                db,
                department_id=payload.departmentId,
                semester=payload.semester,
                section=payload.section,
            ),
            max_hours=get_settings().max_prioritized_hours,
        )
        report = [
            {
                "subjectName": item.subject_name,
                "coverage": item.coverage,
                "baseHours": item.base_hours,
                "scheduledHours": item.scheduled_hours,
                "priority": item.priority,
            }
            for item in result.priority_report
        ]
        record = _replace_timetable(
            db,
            payload=payload,
            generator=GeneratorKind.priority,
            slots=result.slots,
            conflicts=result.conflicts,
            priority_report=report,
        )
        _log_complete(label, payload, result.slots, result.conflicts, started)
        return GeneratePriorityTimetableResponse(
            timetableId=record.id,
            slots=record.slots,
            conflicts=record.conflicts,
            slotsGenerated=len(result.slots),
            priorityReport=report,
        )
    except Exception:
        logger.exception(
            "%s FAILED | department_id=%s | semester=%s | section=%s | wall_ms=%s",
            label,
            payload.departmentId,
            payload.semester,
            payload.section,
            int((perf_counter() - started) * 1000),
        )
        raise


@router.get("/timetable", response_model=list[TimetableOut])
def list_timetables(
    department_id: str | None = Query(default=None, alias="departmentId"),
    semester: int | None = Query(default=None, ge=1, le=20),
    section: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[TimetableOut]:
    query = select(Timetable)
    if department_id is not None:
        query = query.where(Timetable.department_id == department_id)
    if semester is not None:
        query = query.where(Timetable.semester == semester)
    if section is not None:
        query = query.where(Timetable.section == section.strip())
    query = query.order_by(Timetable.department_id, Timetable.semester, Timetable.section)
    return list(db.execute(query).scalars())


@router.get("/timetable/{timetable_id}", response_model=TimetableOut)
def get_timetable(timetable_id: str, db: Session = Depends(get_db)) -> TimetableOut:
    record = db.get(Timetable, timetable_id)
    if record is None:
        raise ResourceNotFoundError("Timetable", timetable_id)
    return record

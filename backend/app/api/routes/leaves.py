import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.config import get_settings
from app.core.exceptions import InputInvalidError, require_items
from app.models.faculty import Faculty
from app.models.leave_request import LeaveRequest
from app.models.timetable import Timetable
from app.schemas.leave import (
    LeaveRequestCreate,
    LeaveRequestOut,
    ReplacementQuery,
    ReplacementSuggestionOut,
    SubstituteCandidateOut,
    SubstituteQuery,
    SubstituteResponse,
)
from app.services.substitution import (
    ClassSlot,
    FacultyLoad,
    FacultyProfile,
    LeaveWindow,
    SubjectMapping,
    find_substitute as run_substitute_search,
    resolve_leave_substitutes,
    suggest_replacements,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _department_faculty(db: Session, department_id: str) -> list[FacultyProfile]:
    query = (
        select(Faculty)
        .where(Faculty.department_id == department_id)
        .order_by(Faculty.name, Faculty.id)
    )
    return [
        FacultyProfile(
            faculty_id=item.id,
            name=item.name,
            department_id=item.department_id,
            is_active=item.is_active,
        )
        for item in db.execute(query).scalars()
    ]


def _department_leaves(db: Session, department_id: str, *, exclude_faculty_id: str) -> list[LeaveWindow]:
    query = select(LeaveRequest).where(
        LeaveRequest.department_id == department_id,
        LeaveRequest.faculty_id != exclude_faculty_id,
    )
    return [
        LeaveWindow(
            faculty_id=item.faculty_id,
            start_date=item.start_date,
            end_date=item.end_date,
            leave_type=item.leave_type.value,
            start_time=item.start_time,
            end_time=item.end_time,
        )
        for item in db.execute(query).scalars()
    ]


def _department_class_slots(db: Session, department_id: str) -> list[ClassSlot]:
    query = select(Timetable).where(Timetable.department_id == department_id).order_by(
        Timetable.semester, Timetable.section
    )
    slots: list[ClassSlot] = []
    for record in db.execute(query).scalars():
        for item in record.slots or []:
            slots.append(
                ClassSlot(
                    faculty_id=item["facultyId"],
                    day=item["day"],
                    start_time=item["startTime"],
                    end_time=item["endTime"],
                    subject_id=item.get("subjectId"),
                    room_id=item.get("roomId"),
                    section=item.get("section", record.section),
                    semester=item.get("semester", record.semester),
                )
            )
    return slots


@router.get("/leaves", response_model=list[LeaveRequestOut])
def list_leave_requests(
    department_id: str | None = Query(default=None, alias="departmentId"),
    faculty_id: str | None = Query(default=None, alias="facultyId"),
    db: Session = Depends(get_db),
) -> list[LeaveRequestOut]:
    query = select(LeaveRequest)
    if department_id is not None:
        query = query.where(LeaveRequest.department_id == department_id)
    if faculty_id is not None:
        query = query.where(LeaveRequest.faculty_id == faculty_id)
    query = query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.start_date.desc())
    return list(db.execute(query).scalars())


@router.post("/leaves", response_model=LeaveRequestOut, status_code=status.HTTP_201_CREATED)
def create_leave_request(
    payload: LeaveRequestCreate,
    db: Session = Depends(get_db),
) -> LeaveRequestOut:
    faculty = db.get(Faculty, payload.facultyId)
    if faculty is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Faculty profile not found")

    # Substitutes come from the faculty's own department, whatever the caller sent.
    department_id = faculty.department_id
    if payload.departmentId is not None and payload.departmentId != department_id:
        raise InputInvalidError(
            "departmentId does not match the faculty profile",
            details={"field": "departmentId", "facultyDepartmentId": department_id},
        )
    leave = LeaveWindow(
        faculty_id=faculty.id,
        start_date=payload.startDate,
        end_date=payload.endDate or payload.startDate,
        leave_type=payload.leaveType.value,
        start_time=payload.startTime,
        end_time=payload.endTime,
    )
    resolution = resolve_leave_substitutes(
        leave,
        department_id=department_id,
        faculty=_department_faculty(db, department_id),
        sibling_leaves=_department_leaves(db, department_id, exclude_faculty_id=faculty.id),
        timetable_slots=_department_class_slots(db, department_id),
    )

    is_partial = payload.leaveType.value == "partial"
    request = LeaveRequest(
        faculty_id=faculty.id,
        department_id=department_id,
        leave_type=payload.leaveType,
        start_date=leave.start_date,
        end_date=leave.last_date,
        start_time=payload.startTime if is_partial else None,
        end_time=payload.endTime if is_partial else None,
        reason=payload.reason.strip(),
        status="applied",
        substitute_id=resolution.substitute_id,
        affected_slots=[
            {
                "date": item.slot.date.isoformat(),
                "day": item.slot.day,
                "startTime": item.slot.start_time,
                "endTime": item.slot.end_time,
                "subjectId": item.slot.subject_id,
                "roomId": item.slot.room_id,
                "section": item.slot.section,
                "substituteId": item.substitute_id,
                "substituteName": item.substitute_name,
            }
            for item in resolution.slots
        ],
    )
    db.add(request)
    db.commit()
    db.refresh(request)

    logger.info(
        "LEAVE APPLIED | leave_id=%s | faculty_id=%s | affected_slots=%s | unresolved=%s",
        request.id,
        faculty.id,
        len(resolution.slots),
        resolution.unresolved_count,
    )
    return request


@router.post("/leaves/substitute", response_model=SubstituteResponse)
def find_substitute(
    payload: SubstituteQuery,
    db: Session = Depends(get_db),
) -> SubstituteResponse:
    substitute = run_substitute_search(
        department_id=payload.departmentId,
        exclude_faculty_id=payload.excludeFacultyId,
        day=payload.day,
        start_time=payload.startTime,
        end_time=payload.endTime,
        leave_start=payload.leaveStartDate,
        leave_end=payload.leaveEndDate,
        faculty=_department_faculty(db, payload.departmentId),
        sibling_leaves=_department_leaves(db, payload.departmentId, exclude_faculty_id=payload.excludeFacultyId),
        timetable_slots=_department_class_slots(db, payload.departmentId),
    )
    if substitute is None:
        return SubstituteResponse(substitute=None)
    return SubstituteResponse(substitute=SubstituteCandidateOut(id=substitute.faculty_id, name=substitute.name))


@router.post("/leaves/replacement-suggestions", response_model=list[ReplacementSuggestionOut])
def replacement_suggestions(payload: ReplacementQuery) -> list[ReplacementSuggestionOut]:
    require_items("faculty", payload.faculty)
    suggestions = suggest_replacements(
        subject_id=payload.subjectId,
        department_id=payload.departmentId,
        day=payload.day,
        start_time=payload.startTime,
        end_time=payload.endTime,
        faculty=[
            FacultyLoad(
                faculty_id=item.id,
                name=item.name,
                department_id=item.departmentId,
                current_load=item.currentLoad,
                max_weekly_load=item.maxWeeklyLoad,
            )
            for item in payload.faculty
        ],
        subject_mappings=[
            SubjectMapping(faculty_id=item.facultyId, subject_id=item.subjectId) for item in payload.subjectMappings
        ],
        busy_slots=[
            ClassSlot(faculty_id=item.facultyId, day=item.day, start_time=item.startTime, end_time=item.endTime)
            for item in payload.busySlots
        ],
        exclude_faculty_id=payload.excludeFacultyId,
        limit=get_settings().replacement_suggestion_limit,
    )
    return [
        ReplacementSuggestionOut(
            facultyId=item.faculty_id,
            facultyName=item.faculty_name,
            reason=item.reason,
            priority=item.priority,
            loadPercentage=item.load_percentage,
        )
        for item in suggestions
    ]

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.timetable import ensure_unique
from app.services.slot_calendar import TIME_PATTERN, parse_time_to_minutes


class StudentPayload(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    rollNumber: str = Field(min_length=1, max_length=50)
    departmentId: str = Field(min_length=1, max_length=36)
    name: str | None = Field(default=None, max_length=200)
    semester: int | None = Field(default=None, ge=1, le=20)
    section: str | None = Field(default=None, max_length=50)


class ExamRoomPayload(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    roomNumber: str = Field(min_length=1, max_length=50)
    capacity: int = Field(ge=1, le=1000)
    departmentId: str | None = Field(default=None, max_length=36)


class SeatingRequest(BaseModel):
    students: list[StudentPayload] = Field(default_factory=list, max_length=20_000)
    rooms: list[ExamRoomPayload] = Field(default_factory=list, max_length=500)

    @model_validator(mode="after")
    def validate_references(self) -> "SeatingRequest":
        ensure_unique("student", [student.id for student in self.students])
        ensure_unique("room", [room.id for room in self.rooms])
        return self


class SeatAssignmentOut(BaseModel):
    studentId: str
    seatNumber: str
    row: int
    col: int


class RoomSeatingOut(BaseModel):
    roomId: str
    roomNumber: str
    capacity: int
    allocated: int
    studentAllocations: list[SeatAssignmentOut]


class SeatingResponse(BaseModel):
    examId: str
    allocations: list[RoomSeatingOut]
    unallocated: list[str]


class InvigilationRoomPayload(BaseModel):
    roomId: str = Field(min_length=1, max_length=36)
    departmentId: str = Field(min_length=1, max_length=36)


class InvigilatorFacultyPayload(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    departmentId: str = Field(min_length=1, max_length=36)
    invigilationCount: int = Field(default=0, ge=0)
    isActive: bool = True
    name: str | None = Field(default=None, max_length=200)


class AlreadyAllocatedPayload(BaseModel):
    examId: str = Field(min_length=1, max_length=36)
    facultyId: str = Field(min_length=1, max_length=36)


class InvigilationRequest(BaseModel):
    rooms: list[InvigilationRoomPayload] = Field(default_factory=list, max_length=500)
    faculty: list[InvigilatorFacultyPayload] | None = Field(default=None, max_length=5000)
    alreadyAllocated: list[AlreadyAllocatedPayload] = Field(default_factory=list)
    examDate: str | None = None
    startTime: str | None = None
    endTime: str | None = None

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_time_format(cls, value: str | None) -> str | None:
        if value is not None and not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value

    @model_validator(mode="after")
    def validate_window(self) -> "InvigilationRequest":
        ensure_unique("room", [room.roomId for room in self.rooms])
        if self.startTime and self.endTime:
            if parse_time_to_minutes(self.endTime) <= parse_time_to_minutes(self.startTime):
                raise ValueError("End time must be after start time")
        return self


class InvigilatorAssignmentOut(BaseModel):
    examId: str
    roomId: str
    departmentId: str
    primaryInvigilatorId: str
    backupInvigilatorId: str | None = None
    status: str = "auto-assigned"


class InvigilationResponse(BaseModel):
    examId: str
    assignments: list[InvigilatorAssignmentOut]
    unassigned: list[str]

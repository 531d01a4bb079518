from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.leave_request import LeaveType
from app.services.slot_calendar import TIME_PATTERN, parse_time_to_minutes
from app.services.substitution import WEEKDAY_NAMES


def _validate_time(value: str | None) -> str | None:
    if value is not None and not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    return value


def _validate_window(start_time: str | None, end_time: str | None) -> None:
    if start_time and end_time and parse_time_to_minutes(end_time) <= parse_time_to_minutes(start_time):
        raise ValueError("End time must be after start time")


class LeaveRequestCreate(BaseModel):
    facultyId: str = Field(min_length=1, max_length=36)
    departmentId: str | None = Field(default=None, min_length=1, max_length=36)
    leaveType: LeaveType = LeaveType.full_day
    startDate: date
    endDate: date | None = None
    startTime: str | None = None
    endTime: str | None = None
    reason: str = Field(min_length=3, max_length=1000)

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_time_format(cls, value: str | None) -> str | None:
        return _validate_time(value)

    @model_validator(mode="after")
    def validate_window(self) -> "LeaveRequestCreate":
        if self.endDate is not None and self.endDate < self.startDate:
            raise ValueError("endDate cannot be before startDate")
        if self.leaveType == LeaveType.partial:
            if not self.startTime or not self.endTime:
                raise ValueError("Partial leave requires startTime and endTime")
            _validate_window(self.startTime, self.endTime)
        return self


class AffectedSlotOut(BaseModel):
    date: date
    day: str
    startTime: str
    endTime: str
    subjectId: str | None = None
    roomId: str | None = None
    section: str | None = None
    substituteId: str | None = None
    substituteName: str | None = None


class LeaveRequestOut(BaseModel):
    id: str
    faculty_id: str = Field(alias="facultyId")
    department_id: str = Field(alias="departmentId")
    leave_type: LeaveType = Field(alias="leaveType")
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    start_time: str | None = Field(default=None, alias="startTime")
    end_time: str | None = Field(default=None, alias="endTime")
    reason: str
    status: str
    substitute_id: str | None = Field(default=None, alias="substituteId")
    affected_slots: list[AffectedSlotOut] = Field(default_factory=list, alias="affectedSlots")
    created_at: datetime | None = Field(default=None, alias="createdAt")

    model_config = {
        "from_attributes": True,
        "populate_by_name": True,
    }


class SubstituteQuery(BaseModel):
    departmentId: str = Field(min_length=1, max_length=36)
    excludeFacultyId: str = Field(min_length=1, max_length=36)
    day: str
    startTime: str
    endTime: str
    leaveStartDate: date
    leaveEndDate: date | None = None

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        day = value.strip()
        if day not in WEEKDAY_NAMES:
            raise ValueError("Invalid day value")
        return day

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        return _validate_time(value)

    @model_validator(mode="after")
    def validate_window(self) -> "SubstituteQuery":
        _validate_window(self.startTime, self.endTime)
        if self.leaveEndDate is not None and self.leaveEndDate < self.leaveStartDate:
            raise ValueError("leaveEndDate cannot be before leaveStartDate")
        return self


class SubstituteCandidateOut(BaseModel):
    id: str
    name: str


class SubstituteResponse(BaseModel):
    substitute: SubstituteCandidateOut | None = None


class FacultyLoadPayload(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=200)
    departmentId: str = Field(min_length=1, max_length=36)
    currentLoad: int = Field(ge=0, le=200)
    maxWeeklyLoad: int = Field(ge=1, le=200)


class SubjectMappingPayload(BaseModel):
    facultyId: str = Field(min_length=1, max_length=36)
    subjectId: str = Field(min_length=1, max_length=36)


class BusySlotPayload(BaseModel):
    facultyId: str = Field(min_length=1, max_length=36)
    day: str
    startTime: str
    endTime: str


class ReplacementQuery(BaseModel):
    subjectId: str = Field(min_length=1, max_length=36)
    departmentId: str = Field(min_length=1, max_length=36)
    day: str
    startTime: str
    endTime: str
    excludeFacultyId: str = Field(min_length=1, max_length=36)
    faculty: list[FacultyLoadPayload] = Field(default_factory=list, max_length=5000)
    subjectMappings: list[SubjectMappingPayload] = Field(default_factory=list)
    busySlots: list[BusySlotPayload] = Field(default_factory=list)

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        return _validate_time(value)


class ReplacementSuggestionOut(BaseModel):
    facultyId: str
    facultyName: str
    reason: str
    priority: Literal[1, 2, 3]
    loadPercentage: int

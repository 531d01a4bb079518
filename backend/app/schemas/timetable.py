from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.timetable import GeneratorKind
from app.services.slot_calendar import DAYS, TIME_PATTERN


def ensure_unique(label: str, values: list[str]) -> None:
    seen: set[str] = set()
    duplicates: set[str] = set()
    for value in values:
        if value in seen:
            duplicates.add(value)
        else:
            seen.add(value)
    if duplicates:
        raise ValueError(f"Duplicate {label} id(s): {', '.join(sorted(duplicates))}")


class SubjectDemand(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=200)
    facultyId: str | None = Field(default=None, min_length=1, max_length=36)
    hoursPerWeek: int = Field(ge=1, le=40)


class PrioritySubjectDemand(SubjectDemand):
    coveragePercent: float | None = Field(default=None, ge=0, le=100)
    remainingHours: float | None = Field(default=None, ge=0, le=1000)


class GenerateTimetableRequest(BaseModel):
    departmentId: str = Field(min_length=1, max_length=36)
    semester: int = Field(ge=1, le=20)
    section: str = Field(min_length=1, max_length=50)
    academicYear: str = Field(default="2024-25", min_length=4, max_length=20)
    subjects: list[SubjectDemand] = Field(default_factory=list, max_length=100)
    roomIds: list[str] = Field(default_factory=list, max_length=200)
    facultyIds: list[str] = Field(default_factory=list, max_length=500)
    departmentHourSubjectId: str | None = Field(default=None, min_length=1, max_length=36)

    @field_validator("section")
    @classmethod
    def normalize_section(cls, value: str) -> str:
        return value.strip()

    @model_validator(mode="after")
    def validate_references(self) -> "GenerateTimetableRequest":
        ensure_unique("subject", [subject.id for subject in self.subjects])
        ensure_unique("room", self.roomIds)
        return self


class GeneratePriorityTimetableRequest(GenerateTimetableRequest):
    subjects: list[PrioritySubjectDemand] = Field(default_factory=list, max_length=100)


class GeneratedSlotOut(BaseModel):
    day: str
    startTime: str
    endTime: str
    subjectId: str
    facultyId: str
    roomId: str
    section: str
    semester: int

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        if value not in DAYS:
            raise ValueError("Invalid day value")
        return value

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value


class PriorityReportItemOut(BaseModel):
    subjectName: str
    coverage: float
    baseHours: int
    scheduledHours: int
    priority: Literal["Critical", "High", "Medium", "Low"]


class GenerateTimetableResponse(BaseModel):
    timetableId: str
    slots: list[GeneratedSlotOut]
    conflicts: list[str]
    slotsGenerated: int


class GeneratePriorityTimetableResponse(GenerateTimetableResponse):
    priorityReport: list[PriorityReportItemOut]


class TimetableOut(BaseModel):
    id: str
    department_id: str = Field(alias="departmentId")
    semester: int
    section: str
    academic_year: str = Field(alias="academicYear")
    generator: GeneratorKind
    slots: list[GeneratedSlotOut]
    conflicts: list[str]
    priority_report: list[PriorityReportItemOut] | None = Field(default=None, alias="priorityReport")
    is_approved: bool = Field(alias="isApproved")
    generated_at: datetime | None = Field(default=None, alias="generatedAt")

    model_config = {
        "from_attributes": True,
        "populate_by_name": True,
    }

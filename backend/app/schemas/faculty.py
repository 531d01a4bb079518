from datetime import datetime

from pydantic import BaseModel, Field


class FacultyCreate(BaseModel):
    id: str | None = Field(default=None, min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=200)
    email: str | None = Field(default=None, max_length=255)
    department_id: str = Field(alias="departmentId", min_length=1, max_length=36)
    invigilation_count: int = Field(default=0, alias="invigilationCount", ge=0)
    max_weekly_load: int = Field(default=18, alias="maxWeeklyLoad", ge=1, le=60)
    is_active: bool = Field(default=True, alias="isActive")

    model_config = {"populate_by_name": True}


class FacultyOut(BaseModel):
    id: str
    name: str
    email: str | None = None
    department_id: str = Field(alias="departmentId")
    invigilation_count: int = Field(alias="invigilationCount")
    max_weekly_load: int = Field(alias="maxWeeklyLoad")
    is_active: bool = Field(alias="isActive")
    created_at: datetime | None = Field(default=None, alias="createdAt")

    model_config = {
        "from_attributes": True,
        "populate_by_name": True,
    }

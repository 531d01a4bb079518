import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, Integer, JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class GeneratorKind(str, Enum):
    standard = "standard"
    priority = "priority"


class Timetable(Base):
    __tablename__ = "timetables"
    __table_args__ = (UniqueConstraint("department_id", "semester", "section", name="uq_timetable_scope"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    department_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    semester: Mapped[int] = mapped_column(Integer, nullable=False)
    section: Mapped[str] = mapped_column(String(50), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(20), nullable=False)
    generator: Mapped[GeneratorKind] = mapped_column(
        SAEnum(GeneratorKind, name="timetable_generator"),
        nullable=False,
        default=GeneratorKind.standard,
    )
    slots: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    conflicts: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    priority_report: Mapped[list[dict] | None] = mapped_column(JSON, nullable=True)
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

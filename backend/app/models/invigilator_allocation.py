import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class AllocationStatus(str, Enum):
    auto_assigned = "auto-assigned"


class InvigilatorAllocation(Base):
    __tablename__ = "invigilator_allocations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    exam_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    room_id: Mapped[str] = mapped_column(String(36), nullable=False)
    department_id: Mapped[str] = mapped_column(String(36), nullable=False)
    primary_invigilator_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    backup_invigilator_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    status: Mapped[AllocationStatus] = mapped_column(
        SAEnum(AllocationStatus, name="allocation_status", values_callable=lambda items: [item.value for item in items]),
        nullable=False,
        default=AllocationStatus.auto_assigned,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

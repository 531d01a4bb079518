"""create allocation tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


timetable_generator = sa.Enum("standard", "priority", name="timetable_generator")
allocation_status = sa.Enum("auto-assigned", name="allocation_status")
leave_type = sa.Enum("full_day", "partial", name="leave_type")


def upgrade() -> None:
    op.create_table(
        "faculty",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("invigilation_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("max_weekly_load", sa.Integer(), nullable=False, server_default="18"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_faculty_email", "faculty", ["email"], unique=True)
    op.create_index("ix_faculty_department_id", "faculty", ["department_id"], unique=False)

    op.create_table(
        "timetables",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("section", sa.String(length=50), nullable=False),
        sa.Column("academic_year", sa.String(length=20), nullable=False),
        sa.Column("generator", timetable_generator, nullable=False, server_default="standard"),
        sa.Column("slots", sa.JSON(), nullable=False),
        sa.Column("conflicts", sa.JSON(), nullable=False),
        sa.Column("priority_report", sa.JSON(), nullable=True),
        sa.Column("is_approved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("generated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("department_id", "semester", "section", name="uq_timetable_scope"),
    )
    op.create_index("ix_timetables_department_id", "timetables", ["department_id"], unique=False)

    op.create_table(
        "seating_allocations",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("exam_id", sa.String(length=36), nullable=False),
        sa.Column("room_id", sa.String(length=36), nullable=False),
        sa.Column("room_number", sa.String(length=50), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("allocated", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("student_allocations", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_seating_allocations_exam_id", "seating_allocations", ["exam_id"], unique=False)

    op.create_table(
        "invigilator_allocations",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("exam_id", sa.String(length=36), nullable=False),
        sa.Column("room_id", sa.String(length=36), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("primary_invigilator_id", sa.String(length=36), nullable=False),
        sa.Column("backup_invigilator_id", sa.String(length=36), nullable=True),
        sa.Column("status", allocation_status, nullable=False, server_default="auto-assigned"),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_invigilator_allocations_exam_id", "invigilator_allocations", ["exam_id"], unique=False)
    op.create_index(
        "ix_invigilator_allocations_primary_invigilator_id",
        "invigilator_allocations",
        ["primary_invigilator_id"],
        unique=False,
    )

    op.create_table(
        "leave_requests",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("faculty_id", sa.String(length=36), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("leave_type", leave_type, nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=True),
        sa.Column("end_time", sa.String(length=5), nullable=True),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="applied"),
        sa.Column("substitute_id", sa.String(length=36), nullable=True),
        sa.Column("affected_slots", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_leave_requests_faculty_id", "leave_requests", ["faculty_id"], unique=False)
    op.create_index("ix_leave_requests_department_id", "leave_requests", ["department_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_leave_requests_department_id", table_name="leave_requests")
    op.drop_index("ix_leave_requests_faculty_id", table_name="leave_requests")
    op.drop_table("leave_requests")
    op.drop_index("ix_invigilator_allocations_primary_invigilator_id", table_name="invigilator_allocations")
    op.drop_index("ix_invigilator_allocations_exam_id", table_name="invigilator_allocations")
    op.drop_table("invigilator_allocations")
    op.drop_index("ix_seating_allocations_exam_id", table_name="seating_allocations")
    op.drop_table("seating_allocations")
    op.drop_index("ix_timetables_department_id", table_name="timetables")
    op.drop_table("timetables")
    op.drop_index("ix_faculty_department_id", table_name="faculty")
    op.drop_index("ix_faculty_email", table_name="faculty")
    op.drop_table("faculty")

    bind = op.get_bind()
    leave_type.drop(bind, checkfirst=True)
    allocation_status.drop(bind, checkfirst=True)
    timetable_generator.drop(bind, checkfirst=True)

from __future__ import annotations

import logging

from sqlalchemy import inspect

import app.models  # noqa: F401
from app.db.base import Base
from app.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "faculty": {"id", "department_id", "invigilation_count", "is_active"},
    "timetables": {"id", "department_id", "semester", "section", "slots", "conflicts"},
    "seating_allocations": {"id", "exam_id", "room_id", "student_allocations"},
    "invigilator_allocations": {"id", "exam_id", "room_id", "primary_invigilator_id"},
    "leave_requests": {"id", "faculty_id", "department_id", "leave_type", "affected_slots"},
}


def missing_schema_items(connection) -> tuple[list[str], dict[str, list[str]]]:
    inspector = inspect(connection)
    table_names = set(inspector.get_table_names())
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    for table_name, columns in REQUIRED_COLUMNS.items():
        if table_name not in table_names:
            missing_tables.append(table_name)
            continue
        existing = {item["name"] for item in inspector.get_columns(table_name)}
        missing = sorted(columns - existing)
        if missing:
            missing_columns[table_name] = missing
    return missing_tables, missing_columns


def ensure_schema() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        with engine.connect() as connection:
            missing_tables, missing_columns = missing_schema_items(connection)
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")
        if missing_columns:
            flattened = [f"{table}.{column}" for table, columns in missing_columns.items() for column in columns]
            raise RuntimeError(f"Missing required columns: {', '.join(flattened)}")
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Schema bootstrap failed")
        raise RuntimeError("Schema bootstrap failed") from exc

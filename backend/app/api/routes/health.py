from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.core.config import get_settings
from app.db.bootstrap import missing_schema_items
from app.db.session import engine
from app.services.slot_calendar import SLOT_CATALOG

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _database_status() -> dict:
    status = {"ok": True, "schema_ok": False, "missing_tables": [], "missing_columns": {}, "error": None}
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            status["missing_tables"], status["missing_columns"] = missing_schema_items(connection)
    except Exception as exc:  # pragma: no cover - environment dependent
        status["ok"] = False
        status["error"] = str(exc)
        return status
    status["schema_ok"] = not status["missing_tables"] and not status["missing_columns"]
    return status


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/live")
def health_live() -> dict:
    return {"status": "ok", "timestamp": _now()}


@router.get("/health/ready")
def health_ready() -> JSONResponse:
    settings = get_settings()
    database = _database_status()
    ready = database["ok"] and database["schema_ok"]
    payload = {
        "status": "ok" if ready else "degraded",
        "timestamp": _now(),
        "database": database,
        "allocation": {
            "weekly_slots": len(SLOT_CATALOG),
            "seat_columns": settings.seat_columns,
            "max_prioritized_hours": settings.max_prioritized_hours,
        },
    }
    return JSONResponse(status_code=200 if ready else 503, content=payload)

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.models.faculty import Faculty
from app.schemas.faculty import FacultyCreate, FacultyOut

router = APIRouter()


@router.get("/", response_model=list[FacultyOut])
def list_faculty(
    department_id: str | None = Query(default=None, alias="departmentId"),
    active_only: bool = Query(default=False, alias="activeOnly"),
    db: Session = Depends(get_db),
) -> list[FacultyOut]:
    query = select(Faculty)
    if department_id is not None:
        query = query.where(Faculty.department_id == department_id)
    if active_only:
        query = query.where(Faculty.is_active.is_(True))
    return list(db.execute(query.order_by(Faculty.name, Faculty.id)).scalars())


@router.post("/", response_model=FacultyOut, status_code=status.HTTP_201_CREATED)
def create_faculty(payload: FacultyCreate, db: Session = Depends(get_db)) -> FacultyOut:
    if payload.id is not None and db.get(Faculty, payload.id) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Faculty id already exists")
    if payload.email:
        existing = db.execute(select(Faculty).where(Faculty.email == payload.email)).scalar_one_or_none()
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Faculty email already exists")

    faculty = Faculty(**payload.model_dump(exclude_none=True))
    db.add(faculty)
    db.commit()
    db.refresh(faculty)
    return faculty


@router.get("/{faculty_id}", response_model=FacultyOut)
def get_faculty(faculty_id: str, db: Session = Depends(get_db)) -> FacultyOut:
    faculty = db.get(Faculty, faculty_id)
    if faculty is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Faculty not found")
    return faculty

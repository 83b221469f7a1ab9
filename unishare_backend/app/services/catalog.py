from fastapi import HTTPException
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.major import Major
from app.models.subject import Subject
from app.schemas.catalog import (
    MajorCreateRequest,
    MajorUpdateRequest,
    SubjectCreateRequest,
    SubjectUpdateRequest,
)

PUBLIC_SUBJECT_FIELDS = ("name", "code")
ADMIN_SUBJECT_FIELDS = ("name", "code", "managing_faculty")


def _commit_unique(db: Session, detail: str) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=detail)


# ── Subjects ──────────────────────────────────────────────────────────────────

def list_subjects(db: Session) -> list[Subject]:
    return db.query(Subject).order_by(Subject.name).all()


def get_subject(db: Session, subject_id: int) -> Subject:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise HTTPException(status_code=404, detail="Subject not found.")
    return subject


def create_subject(db: Session, payload: SubjectCreateRequest) -> Subject:
    existing = (
        db.query(Subject)
        .filter(or_(Subject.code == payload.code, Subject.name == payload.name))
        .first()
    )
    if existing:
        raise HTTPException(status_code=409, detail="Subject code or name already exists.")
    subject = Subject(**payload.model_dump())
    db.add(subject)
    _commit_unique(db, "Subject code or name already exists.")
    db.refresh(subject)
    return subject


def update_subject(db: Session, subject_id: int, payload: SubjectUpdateRequest) -> Subject:
    subject = get_subject(db, subject_id)
    for field, value in payload.model_dump(exclude_none=True).items():
        setattr(subject, field, value)
    _commit_unique(db, "Subject code or name already exists.")
    db.refresh(subject)
    return subject


def remove_subject(db: Session, subject_id: int) -> dict:
    # Documents keep their dangling subject_id; read paths resolve it to None.
    subject = get_subject(db, subject_id)
    db.delete(subject)
    db.commit()
    return {"message": "Subject deleted successfully."}


# ── Majors ────────────────────────────────────────────────────────────────────

def major_payload(major: Major, subject_fields: tuple[str, ...]) -> dict:
    return {
        "id": major.id,
        "name": major.name,
        "code": major.code,
        "description": major.description,
        "subjects": [
            {"id": s.id, **{field: getattr(s, field) for field in subject_fields}}
            for s in major.subjects
        ],
    }


def _resolve_subjects(db: Session, subject_ids: list[int]) -> list[Subject]:
    wanted = set(subject_ids)
    if not wanted:
        return []
    found = db.query(Subject).filter(Subject.id.in_(wanted)).all()
    missing = wanted - {s.id for s in found}
    if missing:
        raise HTTPException(status_code=404, detail=f"Subject(s) not found: {sorted(missing)}")
    return found


def list_majors(db: Session) -> list[Major]:
    return db.query(Major).order_by(Major.name).all()


def get_major(db: Session, major_id: int) -> Major:
    major = db.get(Major, major_id)
    if major is None:
        raise HTTPException(status_code=404, detail="Major not found.")
    return major


def create_major(db: Session, payload: MajorCreateRequest) -> Major:
    if db.query(Major).filter(Major.name == payload.name).first():
        raise HTTPException(status_code=409, detail="Major name already exists.")
    major = Major(name=payload.name, code=payload.code, description=payload.description)
    major.subjects = _resolve_subjects(db, payload.subject_ids)
    db.add(major)
    _commit_unique(db, "Major name already exists.")
    db.refresh(major)
    return major


def update_major(db: Session, major_id: int, payload: MajorUpdateRequest) -> Major:
    major = get_major(db, major_id)
    changes = payload.model_dump(exclude_unset=True)
    subject_ids = changes.pop("subject_ids", None)
    for field, value in changes.items():
        if field == "name" and value is None:
            continue
        setattr(major, field, value)
    if subject_ids is not None:
        major.subjects = _resolve_subjects(db, subject_ids)
    _commit_unique(db, "Major name already exists.")
    db.refresh(major)
    return major


def remove_major(db: Session, major_id: int) -> dict:
    major = get_major(db, major_id)
    db.delete(major)
    db.commit()
    return {"message": "Major deleted successfully."}

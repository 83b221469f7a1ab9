import logging
from datetime import datetime, time, timedelta
from pathlib import Path

from fastapi import HTTPException, UploadFile
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from app.core.config import settings
from app.models.document import Document, DocumentStatus
from app.models.log import LogAction
from app.models.subject import Subject
from app.models.user import User
from app.schemas.document import DocumentCreate, DocumentQuery, DocumentUpdateRequest
from app.services import storage
from app.services.logs import create_log
from app.services.pagination import paginate
from app.services.statistics import increment_total_downloads, increment_total_uploads
from app.services.users import increment_download_count, increment_upload_count

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    "upload_date": Document.upload_date,
    "download_count": Document.download_count,
    "downloads": Document.download_count,
}

# Field subsets expanded onto each document, per call site.
_CARD_UPLOADER = ("full_name", "avatar_url")
_CARD_SUBJECT = ("name", "code")
_DETAIL_SUBJECT = ("name", "code", "managing_faculty")
_ADMIN_UPLOADER = ("full_name", "email")
_ADMIN_SUBJECT = ("name",)


# ── Reference expansion ───────────────────────────────────────────────────────

def _select(record, fields: tuple[str, ...]) -> dict:
    return {"id": record.id, **{field: getattr(record, field) for field in fields}}


def _expand(
    db: Session,
    docs: list[Document],
    uploader_fields: tuple[str, ...] | None,
    subject_fields: tuple[str, ...] | None,
) -> list[dict]:
    """Attach uploader/subject summaries after the primary read.

    References that no longer resolve are returned as None.
    """
    users: dict[int, User] = {}
    subjects: dict[int, Subject] = {}
    if uploader_fields is not None:
        ids = {d.uploader_id for d in docs if d.uploader_id is not None}
        if ids:
            users = {u.id: u for u in db.query(User).filter(User.id.in_(ids)).all()}
    if subject_fields is not None:
        ids = {d.subject_id for d in docs if d.subject_id is not None}
        if ids:
            subjects = {s.id: s for s in db.query(Subject).filter(Subject.id.in_(ids)).all()}

    results = []
    for doc in docs:
        uploader = users.get(doc.uploader_id)
        subject = subjects.get(doc.subject_id)
        results.append(
            {
                "id": doc.id,
                "title": doc.title,
                "description": doc.description,
                "file_url": doc.file_url,
                "file_type": doc.file_type,
                "file_size": doc.file_size,
                "status": doc.status,
                "document_type": doc.document_type,
                "school_year": doc.school_year,
                "faculty": doc.faculty,
                "tags": [t for t in (doc.tags or "").split(",") if t],
                "download_count": doc.download_count,
                "view_count": doc.view_count,
                "upload_date": doc.upload_date,
                "uploader": _select(uploader, uploader_fields) if uploader else None,
                "subject": _select(subject, subject_fields) if subject else None,
            }
        )
    return results


def _expand_one(db: Session, doc: Document, uploader_fields, subject_fields) -> dict:
    return _expand(db, [doc], uploader_fields, subject_fields)[0]


# ── Query building ────────────────────────────────────────────────────────────

def _parse_subject_id(raw: str) -> int:
    raw = (raw or "").strip()
    if not raw.isdigit():
        raise HTTPException(status_code=400, detail="Invalid subject ID format.")
    return int(raw)


def _require_subject(db: Session, subject_id: int) -> Subject:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise HTTPException(status_code=404, detail="Subject not found.")
    return subject


def _join_tags(tags: list[str] | None) -> str | None:
    cleaned = [t.strip() for t in tags or [] if t and t.strip()]
    return ",".join(cleaned) or None


def _filtered(db: Session, params: DocumentQuery, base: Query | None = None) -> Query:
    query = base if base is not None else db.query(Document)

    if params.search:
        pattern = f"%{params.search}%"
        query = query.filter(
            or_(Document.title.ilike(pattern), Document.description.ilike(pattern))
        )
    if params.subjects:
        query = query.filter(Document.subject_id.in_(params.subjects))
    elif params.subject is not None:
        query = query.filter(Document.subject_id == params.subject)
    if params.document_type:
        query = query.filter(Document.document_type == params.document_type)
    if params.faculty:
        query = query.filter(Document.faculty == params.faculty)
    if params.uploader_id is not None:
        query = query.filter(Document.uploader_id == params.uploader_id)
    if params.from_date is not None:
        query = query.filter(Document.upload_date >= datetime.combine(params.from_date, time.min))
    if params.to_date is not None:
        end = datetime.combine(params.to_date, time.min) + timedelta(days=1)
        query = query.filter(Document.upload_date < end)

    column = _SORT_COLUMNS[params.sort_by]
    if params.sort_order == "asc":
        return query.order_by(column.asc(), Document.id.asc())
    return query.order_by(column.desc(), Document.id.desc())


def _search(
    db: Session,
    params: DocumentQuery,
    base: Query,
    uploader_fields: tuple[str, ...] | None,
    subject_fields: tuple[str, ...] | None,
) -> dict:
    docs, pagination = paginate(_filtered(db, params, base), params.page, params.limit)
    return {
        "data": _expand(db, docs, uploader_fields, subject_fields),
        "pagination": pagination,
    }


# ── Operations ────────────────────────────────────────────────────────────────

def create_document(db: Session, payload: DocumentCreate, upload: UploadFile, uploader: User) -> dict:
    if upload.content_type not in settings.allowed_mime_types:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported file type '{upload.content_type}'.",
        )
    subject_id = _parse_subject_id(payload.subject_id)
    _require_subject(db, subject_id)

    stored = storage.save_upload(upload)
    doc = Document(
        title=payload.title,
        description=payload.description,
        file_url=stored.url,
        file_path=str(stored.path),
        file_type=upload.content_type,
        file_size=stored.size,
        uploader_id=uploader.id,
        subject_id=subject_id,
        status=DocumentStatus.VISIBLE.value,
        document_type=payload.document_type,
        school_year=payload.school_year,
        faculty=payload.faculty,
        tags=_join_tags(payload.tags),
    )
    db.add(doc)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        storage.delete(str(stored.path))
        raise
    db.refresh(doc)

    increment_upload_count(db, uploader.id, 1)
    increment_total_uploads(db, 1)
    logger.info("User %s uploaded document %s (%d bytes)", uploader.id, doc.id, stored.size)
    return _expand_one(db, doc, _CARD_UPLOADER, _CARD_SUBJECT)


def list_documents(db: Session, params: DocumentQuery) -> dict:
    base = db.query(Document).filter(Document.status == DocumentStatus.VISIBLE.value)
    return _search(db, params, base, _CARD_UPLOADER, _CARD_SUBJECT)


def list_my_documents(db: Session, user_id: int, params: DocumentQuery) -> dict:
    # Owners also see their PROCESSING and BLOCKED documents.
    base = db.query(Document).filter(Document.uploader_id == user_id)
    return _search(db, params, base, None, _CARD_SUBJECT)


def list_user_documents(db: Session, user_id: int, params: DocumentQuery) -> dict:
    base = db.query(Document).filter(
        Document.uploader_id == user_id,
        Document.status == DocumentStatus.VISIBLE.value,
    )
    return _search(db, params, base, ("full_name",), _CARD_SUBJECT)


def list_documents_admin(db: Session, params: DocumentQuery) -> dict:
    base = db.query(Document)
    if params.status is not None:
        base = base.filter(Document.status == params.status.value)
    return _search(db, params, base, _ADMIN_UPLOADER, _ADMIN_SUBJECT)


def get_document_or_404(db: Session, document_id: int) -> Document:
    doc = db.get(Document, document_id)
    if doc is None:
        raise HTTPException(status_code=404, detail="Document not found.")
    return doc


def get_document(db: Session, document_id: int) -> dict:
    """Fetch one document and count the view.

    The increment is committed before the response is built, so the returned
    ``view_count`` includes this view.
    """
    doc = get_document_or_404(db, document_id)
    db.query(Document).filter(Document.id == document_id).update(
        {Document.view_count: Document.view_count + 1}, synchronize_session=False
    )
    db.commit()
    db.refresh(doc)
    return _expand_one(db, doc, _CARD_UPLOADER, _DETAIL_SUBJECT)


def _get_owned_document(db: Session, document_id: int, user_id: int) -> Document:
    doc = get_document_or_404(db, document_id)
    if doc.uploader_id != user_id:
        raise HTTPException(status_code=403, detail="You do not have permission to modify this document.")
    return doc


def update_document(db: Session, document_id: int, payload: DocumentUpdateRequest, user_id: int) -> dict:
    doc = _get_owned_document(db, document_id, user_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("subject_id") is not None:
        _require_subject(db, changes["subject_id"])
    for field, value in changes.items():
        if field in ("title", "subject_id") and value is None:
            continue
        if field == "tags":
            value = _join_tags(value)
        setattr(doc, field, value)
    doc.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(doc)
    return _expand_one(db, doc, _CARD_UPLOADER, _CARD_SUBJECT)


def delete_document_record(db: Session, doc: Document) -> None:
    """Delete a document with its stored file and roll back its upload counters.

    Each step commits on its own; a failure part-way leaves the earlier steps
    applied.
    """
    uploader_id = doc.uploader_id
    file_path = doc.file_path
    db.delete(doc)
    db.commit()
    storage.delete(file_path)
    increment_upload_count(db, uploader_id, -1)
    increment_total_uploads(db, -1)


def remove_document(db: Session, document_id: int, user_id: int) -> dict:
    doc = _get_owned_document(db, document_id, user_id)
    delete_document_record(db, doc)
    create_log(db, user_id, LogAction.DELETE_OWN_DOCUMENT, document_id)
    logger.info("User %s deleted own document %s", user_id, document_id)
    return {"message": "Document deleted successfully."}


def _open_file(db: Session, document_id: int) -> tuple[Document, Path]:
    doc = get_document_or_404(db, document_id)
    path = storage.resolve(doc.file_path)
    if path is None:
        logger.warning("Stored file missing for document %s: %s", doc.id, doc.file_path)
        raise HTTPException(status_code=404, detail="File not found on server storage.")
    return doc, path


def download_document(db: Session, document_id: int) -> tuple[Document, Path]:
    doc, path = _open_file(db, document_id)
    db.query(Document).filter(Document.id == document_id).update(
        {Document.download_count: Document.download_count + 1}, synchronize_session=False
    )
    db.commit()
    increment_download_count(db, doc.uploader_id, 1)
    increment_total_downloads(db, 1)
    db.refresh(doc)
    return doc, path


def preview_document(db: Session, document_id: int) -> tuple[Document, Path]:
    return _open_file(db, document_id)


def admin_document_view(db: Session, doc: Document) -> dict:
    return _expand_one(db, doc, _ADMIN_UPLOADER, _ADMIN_SUBJECT)

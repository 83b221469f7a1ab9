from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.document import DocumentStatus
from app.models.log import LogAction
from app.models.user import User, UserRole
from app.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from app.schemas.catalog import (
    AdminMajorOut,
    MajorCreateRequest,
    MajorOut,
    MajorUpdateRequest,
    SubjectCreateRequest,
    SubjectOut,
    SubjectUpdateRequest,
)
from app.schemas.common import MessageResponse
from app.schemas.document import (
    DocumentCreate,
    DocumentListResponse,
    DocumentOut,
    DocumentQuery,
    DocumentUpdateRequest,
)
from app.schemas.log import LogListResponse, ResetPasswordResponse
from app.schemas.statistics import PlatformStatsResponse, UploadsOverTimeBucket
from app.schemas.user import (
    ChangePasswordRequest,
    DeleteAccountRequest,
    RoleUpdateRequest,
    UploadStatsResponse,
    UserListResponse,
    UserOut,
    UserQuery,
    UserStatsResponse,
    UserUpdateRequest,
)
from app.services import admin as admin_service
from app.services import catalog as catalog_service
from app.services import documents as document_service
from app.services import statistics as statistics_service
from app.services import users as user_service
from app.services.auth import get_current_user, login_user, register_user, require_admin, require_staff
from app.services.logs import list_logs

router = APIRouter(prefix="/api")


def document_query(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    search: str | None = None,
    subject: int | None = None,
    subjects: list[int] = Query([]),
    document_type: str | None = None,
    faculty: str | None = None,
    uploader_id: int | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
    status: DocumentStatus | None = None,
    sort_by: Literal["upload_date", "download_count", "downloads"] = "upload_date",
    sort_order: Literal["asc", "desc"] = "desc",
) -> DocumentQuery:
    return DocumentQuery(
        page=page,
        limit=limit,
        search=search,
        subject=subject,
        subjects=subjects,
        document_type=document_type,
        faculty=faculty,
        uploader_id=uploader_id,
        from_date=from_date,
        to_date=to_date,
        status=status,
        sort_by=sort_by,
        sort_order=sort_order,
    )


def _file_response(doc, path, disposition: str) -> FileResponse:
    return FileResponse(
        path,
        media_type=doc.file_type,
        filename=path.name,
        content_disposition_type=disposition,
    )


# ── Auth ──────────────────────────────────────────────────────────────────────

@router.post("/auth/register", response_model=UserOut, status_code=201)
def register_endpoint(payload: RegisterRequest, db: Session = Depends(get_db)):
    return register_user(db, payload)


@router.post("/auth/login", response_model=TokenResponse)
def login_endpoint(payload: LoginRequest, db: Session = Depends(get_db)):
    return login_user(db, payload)


# ── Users ─────────────────────────────────────────────────────────────────────
# NOTE: /users/me/* routes MUST be registered BEFORE /users/{user_id}/* or the
# literal "me" is captured as a user id.

@router.get("/users/me/profile", response_model=UserOut)
def my_profile_endpoint(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("/users/me/profile", response_model=UserOut)
def update_my_profile_endpoint(
    payload: UserUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return user_service.update_profile(db, current_user.id, payload)


@router.post("/users/me/change-password", response_model=UserOut)
def change_my_password_endpoint(
    payload: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return user_service.change_password(db, current_user.id, payload)


@router.delete("/users/me/account", response_model=MessageResponse)
def delete_my_account_endpoint(
    payload: DeleteAccountRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return user_service.delete_own_account(db, current_user.id, payload.password)


@router.get("/users/me/stats", response_model=UserStatsResponse)
def my_stats_endpoint(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return user_service.get_user_stats(db, current_user.id)


@router.get("/users/me/upload-stats", response_model=UploadStatsResponse)
def my_upload_stats_endpoint(
    period: str = "all",
    from_date: date | None = None,
    to_date: date | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return user_service.get_upload_stats(db, current_user.id, period, from_date, to_date)


@router.get("/users/profile/{user_id}", response_model=UserOut)
def user_profile_endpoint(user_id: int, db: Session = Depends(get_db)):
    return user_service.get_user(db, user_id)


@router.get("/users/{user_id}/profile", response_model=UserOut)
def user_profile_alt_endpoint(user_id: int, db: Session = Depends(get_db)):
    return user_service.get_user(db, user_id)


@router.get("/users/{user_id}/stats", response_model=UserStatsResponse)
def user_stats_endpoint(user_id: int, db: Session = Depends(get_db)):
    return user_service.get_user_stats(db, user_id)


# ── Documents ─────────────────────────────────────────────────────────────────

@router.post("/documents/upload", response_model=DocumentOut, status_code=201)
def upload_document_endpoint(
    title: str = Form(..., min_length=1),
    subject_id: str = Form(...),
    description: str | None = Form(None),
    document_type: str | None = Form(None),
    school_year: str | None = Form(None),
    faculty: str | None = Form(None),
    tags: str | None = Form(None, description="Comma-separated tags"),
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    payload = DocumentCreate(
        title=title,
        subject_id=subject_id,
        description=description,
        document_type=document_type,
        school_year=school_year,
        faculty=faculty,
        tags=(tags or "").split(","),
    )
    return document_service.create_document(db, payload, file, current_user)


@router.get("/documents", response_model=DocumentListResponse)
def list_documents_endpoint(
    params: DocumentQuery = Depends(document_query),
    db: Session = Depends(get_db),
):
    return document_service.list_documents(db, params)


@router.get("/documents/my-uploads", response_model=DocumentListResponse)
def my_uploads_endpoint(
    params: DocumentQuery = Depends(document_query),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return document_service.list_my_documents(db, current_user.id, params)


@router.get("/documents/user/{user_id}/uploads", response_model=DocumentListResponse)
def user_uploads_endpoint(
    user_id: int,
    params: DocumentQuery = Depends(document_query),
    db: Session = Depends(get_db),
):
    return document_service.list_user_documents(db, user_id, params)


@router.get("/documents/{document_id}/download")
def download_document_endpoint(
    document_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    doc, path = document_service.download_document(db, document_id)
    return _file_response(doc, path, "attachment")


@router.get("/documents/{document_id}/preview")
def preview_document_endpoint(document_id: int, db: Session = Depends(get_db)):
    doc, path = document_service.preview_document(db, document_id)
    return _file_response(doc, path, "inline")


@router.get("/documents/{document_id}", response_model=DocumentOut)
def get_document_endpoint(document_id: int, db: Session = Depends(get_db)):
    return document_service.get_document(db, document_id)


@router.patch("/documents/{document_id}", response_model=DocumentOut)
def update_document_endpoint(
    document_id: int,
    payload: DocumentUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return document_service.update_document(db, document_id, payload, current_user.id)


@router.delete("/documents/{document_id}", response_model=MessageResponse)
def delete_document_endpoint(
    document_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return document_service.remove_document(db, document_id, current_user.id)


# ── Categories (public catalog) ───────────────────────────────────────────────

@router.get("/categories/subjects", response_model=list[SubjectOut])
def list_subjects_endpoint(db: Session = Depends(get_db)):
    return catalog_service.list_subjects(db)


@router.get("/categories/majors", response_model=list[MajorOut])
def list_majors_endpoint(db: Session = Depends(get_db)):
    return [
        catalog_service.major_payload(m, catalog_service.PUBLIC_SUBJECT_FIELDS)
        for m in catalog_service.list_majors(db)
    ]


@router.get("/categories/majors/{major_id}", response_model=MajorOut)
def get_major_endpoint(major_id: int, db: Session = Depends(get_db)):
    major = catalog_service.get_major(db, major_id)
    return catalog_service.major_payload(major, catalog_service.PUBLIC_SUBJECT_FIELDS)


# ── Admin: users ──────────────────────────────────────────────────────────────

@router.get("/admin/users", response_model=UserListResponse)
def admin_list_users_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    search: str | None = None,
    role: UserRole | None = None,
    sort_by: Literal["joined_date", "full_name", "email"] = "joined_date",
    sort_order: Literal["asc", "desc"] = "desc",
    _: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    params = UserQuery(
        page=page, limit=limit, search=search, role=role, sort_by=sort_by, sort_order=sort_order
    )
    return admin_service.list_users(db, params)


@router.post("/admin/users/{user_id}/block", response_model=UserOut)
def block_user_endpoint(
    user_id: int,
    actor: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return admin_service.block_user(db, user_id, actor.id)


@router.post("/admin/users/{user_id}/unblock", response_model=UserOut)
def unblock_user_endpoint(
    user_id: int,
    actor: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return admin_service.unblock_user(db, user_id, actor.id)


@router.post("/admin/users/{user_id}/reset-password", response_model=ResetPasswordResponse)
def reset_password_endpoint(
    user_id: int,
    actor: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return admin_service.reset_password(db, user_id, actor.id)


@router.delete("/admin/users/{user_id}", response_model=MessageResponse)
def delete_user_endpoint(
    user_id: int,
    actor: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return admin_service.delete_user(db, user_id, actor.id)


@router.patch("/admin/users/{user_id}/role", response_model=UserOut)
def set_user_role_endpoint(
    user_id: int,
    payload: RoleUpdateRequest,
    actor: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return admin_service.set_user_role(db, user_id, payload.role, actor.id)


@router.post("/admin/delegate-admin/{user_id}", response_model=UserOut)
def delegate_admin_endpoint(
    user_id: int,
    actor: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return admin_service.delegate_admin(db, user_id, actor.id)


# ── Admin: documents ──────────────────────────────────────────────────────────

@router.get("/admin/documents", response_model=DocumentListResponse)
def admin_list_documents_endpoint(
    params: DocumentQuery = Depends(document_query),
    _: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return document_service.list_documents_admin(db, params)


@router.post("/admin/documents/{document_id}/block", response_model=DocumentOut)
def block_document_endpoint(
    document_id: int,
    actor: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return admin_service.block_document(db, document_id, actor.id)


@router.post("/admin/documents/{document_id}/unblock", response_model=DocumentOut)
def unblock_document_endpoint(
    document_id: int,
    actor: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return admin_service.unblock_document(db, document_id, actor.id)


@router.delete("/admin/documents/{document_id}", response_model=MessageResponse)
def admin_delete_document_endpoint(
    document_id: int,
    actor: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return admin_service.delete_document(db, document_id, actor.id)


# ── Admin: catalog ────────────────────────────────────────────────────────────

@router.post("/admin/subjects", response_model=SubjectOut, status_code=201)
def create_subject_endpoint(
    payload: SubjectCreateRequest,
    _: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return catalog_service.create_subject(db, payload)


@router.get("/admin/subjects", response_model=list[SubjectOut])
def admin_list_subjects_endpoint(
    _: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return catalog_service.list_subjects(db)


@router.patch("/admin/subjects/{subject_id}", response_model=SubjectOut)
def update_subject_endpoint(
    subject_id: int,
    payload: SubjectUpdateRequest,
    _: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return catalog_service.update_subject(db, subject_id, payload)


@router.delete("/admin/subjects/{subject_id}", response_model=MessageResponse)
def remove_subject_endpoint(
    subject_id: int,
    _: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return catalog_service.remove_subject(db, subject_id)


@router.post("/admin/majors", response_model=AdminMajorOut, status_code=201)
def create_major_endpoint(
    payload: MajorCreateRequest,
    _: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    major = catalog_service.create_major(db, payload)
    return catalog_service.major_payload(major, catalog_service.ADMIN_SUBJECT_FIELDS)


@router.get("/admin/majors", response_model=list[AdminMajorOut])
def admin_list_majors_endpoint(
    _: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return [
        catalog_service.major_payload(m, catalog_service.ADMIN_SUBJECT_FIELDS)
        for m in catalog_service.list_majors(db)
    ]


@router.patch("/admin/majors/{major_id}", response_model=AdminMajorOut)
def update_major_endpoint(
    major_id: int,
    payload: MajorUpdateRequest,
    _: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    major = catalog_service.update_major(db, major_id, payload)
    return catalog_service.major_payload(major, catalog_service.ADMIN_SUBJECT_FIELDS)


@router.delete("/admin/majors/{major_id}", response_model=MessageResponse)
def remove_major_endpoint(
    major_id: int,
    _: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return catalog_service.remove_major(db, major_id)


# ── Admin: audit log ──────────────────────────────────────────────────────────

@router.get("/admin/logs", response_model=LogListResponse)
def list_logs_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    action: LogAction | None = None,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return list_logs(db, page, limit, action)


# ── Statistics ────────────────────────────────────────────────────────────────

@router.get("/statistics/platform", response_model=PlatformStatsResponse)
def platform_stats_endpoint(
    _: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return statistics_service.get_platform_stats(db)


@router.get("/statistics/uploads-over-time", response_model=list[UploadsOverTimeBucket])
def uploads_over_time_endpoint(
    days: int = Query(30, ge=1),
    _: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return statistics_service.get_uploads_over_time(db, days)

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

from app.models.document import DocumentStatus
from app.schemas.common import Pagination


class UploaderSummary(BaseModel):
    id: int
    full_name: str | None = None
    avatar_url: str | None = None
    email: str | None = None


class SubjectSummary(BaseModel):
    id: int
    name: str | None = None
    code: str | None = None
    managing_faculty: str | None = None


class DocumentCreate(BaseModel):
    title: str = Field(..., min_length=1)
    subject_id: str  # raw form value, parsed by the service
    description: str | None = None
    document_type: str | None = None
    school_year: str | None = None
    faculty: str | None = None
    tags: list[str] = []


class DocumentUpdateRequest(BaseModel):
    """All fields optional; only provided fields are written."""

    title: str | None = Field(None, min_length=1)
    description: str | None = None
    subject_id: int | None = None
    document_type: str | None = None
    school_year: str | None = None
    faculty: str | None = None
    tags: list[str] | None = None


class DocumentOut(BaseModel):
    id: int
    title: str
    description: str | None = None
    file_url: str
    file_type: str
    file_size: int
    status: DocumentStatus
    document_type: str | None = None
    school_year: str | None = None
    faculty: str | None = None
    tags: list[str] = []
    download_count: int = 0
    view_count: int = 0
    upload_date: datetime | None = None
    uploader: UploaderSummary | None = None
    subject: SubjectSummary | None = None


class DocumentQuery(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1)
    search: str | None = None
    subject: int | None = None
    subjects: list[int] = []
    document_type: str | None = None
    faculty: str | None = None
    uploader_id: int | None = None
    from_date: date | None = None
    to_date: date | None = None
    status: DocumentStatus | None = None  # honoured on the admin listing only
    sort_by: Literal["upload_date", "download_count", "downloads"] = "upload_date"
    sort_order: Literal["asc", "desc"] = "desc"


class DocumentListResponse(BaseModel):
    data: list[DocumentOut]
    pagination: Pagination

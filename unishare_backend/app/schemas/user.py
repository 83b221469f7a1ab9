from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from app.models.user import UserRole
from app.schemas.common import Pagination


class UserOut(BaseModel):
    """Public projection of a user; never carries the password hash."""

    id: int
    email: str
    full_name: str
    avatar_url: str | None = None
    role: UserRole
    status: str
    uploads_count: int = 0
    downloads_count: int = 0
    joined_date: datetime | None = None

    model_config = {"from_attributes": True}


class UserUpdateRequest(BaseModel):
    """All fields optional; only provided fields are written."""

    full_name: str | None = Field(None, min_length=1)
    avatar_url: str | None = None


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str = Field(..., min_length=6)


class DeleteAccountRequest(BaseModel):
    password: str


class RoleUpdateRequest(BaseModel):
    role: UserRole


class UserStatsResponse(BaseModel):
    total_uploads: int
    total_downloads: int
    avg_downloads_per_doc: float


class UploadStatsBucket(BaseModel):
    date: str
    count: int
    total_downloads: int


class UploadStatsResponse(BaseModel):
    period: str
    total_documents: int
    total_downloads: int
    data: list[UploadStatsBucket]


class UserQuery(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1)
    search: str | None = None
    role: UserRole | None = None
    sort_by: Literal["joined_date", "full_name", "email"] = "joined_date"
    sort_order: Literal["asc", "desc"] = "desc"


class UserListResponse(BaseModel):
    data: list[UserOut]
    pagination: Pagination

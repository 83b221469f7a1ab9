from datetime import datetime

from pydantic import BaseModel, Field


class SubjectCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)
    managing_faculty: str = Field(..., min_length=1)


class SubjectUpdateRequest(BaseModel):
    """All fields optional; only provided fields are written."""

    name: str | None = Field(None, min_length=1)
    code: str | None = Field(None, min_length=1)
    managing_faculty: str | None = Field(None, min_length=1)


class SubjectOut(BaseModel):
    id: int
    name: str
    code: str
    managing_faculty: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class MajorCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    code: str | None = None
    description: str | None = None
    subject_ids: list[int] = []


class MajorUpdateRequest(BaseModel):
    """All fields optional; only provided fields are written."""

    name: str | None = Field(None, min_length=1)
    code: str | None = None
    description: str | None = None
    subject_ids: list[int] | None = None


class MajorSubjectOut(BaseModel):
    id: int
    name: str
    code: str


class AdminMajorSubjectOut(MajorSubjectOut):
    managing_faculty: str


class MajorOut(BaseModel):
    id: int
    name: str
    code: str | None = None
    description: str | None = None
    subjects: list[MajorSubjectOut] = []


class AdminMajorOut(MajorOut):
    subjects: list[AdminMajorSubjectOut] = []

from datetime import datetime

from pydantic import BaseModel

from app.schemas.common import Pagination


class LogOut(BaseModel):
    id: int
    actor_id: int
    action: str
    target_id: int
    detail: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class LogListResponse(BaseModel):
    data: list[LogOut]
    pagination: Pagination


class ResetPasswordResponse(BaseModel):
    message: str
    new_password: str

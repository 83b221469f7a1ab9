import logging
from datetime import datetime, time, timedelta

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.security import hash_password, verify_password
from app.models.document import Document
from app.models.user import User, UserRole, UserStatus
from app.schemas.user import ChangePasswordRequest, UserUpdateRequest
from app.services.statistics import increment_active_users

logger = logging.getLogger(__name__)

_UPLOAD_STATS_PERIODS = {"all", "day", "month", "year", "custom"}


def normalize_email(email: str) -> str:
    return email.strip().lower()


def find_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found.")
    return user


def update_profile(db: Session, user_id: int, payload: UserUpdateRequest) -> User:
    user = get_user(db, user_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if field == "full_name" and value is None:
            continue
        setattr(user, field, value)
    user.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(user)
    return user


def change_password(db: Session, user_id: int, payload: ChangePasswordRequest) -> User:
    user = get_user(db, user_id)
    if not verify_password(payload.old_password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Old password is incorrect.")
    user.hashed_password = hash_password(payload.new_password)
    db.commit()
    db.refresh(user)
    logger.info("User %s changed their password", user.id)
    return user


def delete_own_account(db: Session, user_id: int, password: str) -> dict:
    user = get_user(db, user_id)
    if user.role == UserRole.ADMIN:
        raise HTTPException(
            status_code=403,
            detail="Admins must delegate the admin role before deleting their account.",
        )
    if not verify_password(password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Password is incorrect.")
    was_active = user.status == UserStatus.ACTIVE
    db.delete(user)
    db.commit()
    if was_active:
        increment_active_users(db, -1)
    logger.info("User %s deleted their account", user_id)
    return {"message": "Account deleted successfully."}


def increment_upload_count(db: Session, user_id: int | None, amount: int = 1) -> None:
    if user_id is None:
        return
    db.query(User).filter(User.id == user_id).update(
        {User.uploads_count: User.uploads_count + amount}, synchronize_session=False
    )
    db.commit()


def increment_download_count(db: Session, user_id: int | None, amount: int = 1) -> None:
    if user_id is None:
        return
    db.query(User).filter(User.id == user_id).update(
        {User.downloads_count: User.downloads_count + amount}, synchronize_session=False
    )
    db.commit()


def get_user_stats(db: Session, user_id: int) -> dict:
    user = get_user(db, user_id)
    db.refresh(user)
    avg = user.downloads_count / user.uploads_count if user.uploads_count > 0 else 0
    return {
        "total_uploads": user.uploads_count,
        "total_downloads": user.downloads_count,
        "avg_downloads_per_doc": round(avg, 2),
    }


def _period_bounds(period: str, from_date, to_date) -> tuple[datetime | None, datetime | None]:
    now = datetime.utcnow()
    if period == "day":
        return datetime.combine(now.date(), time.min), None
    if period == "month":
        return datetime(now.year, now.month, 1), None
    if period == "year":
        return datetime(now.year, 1, 1), None
    if period == "custom" and from_date is not None:
        end = datetime.combine(to_date, time.min) + timedelta(days=1) if to_date else None
        return datetime.combine(from_date, time.min), end
    return None, None


def get_upload_stats(db: Session, user_id: int, period: str = "all", from_date=None, to_date=None) -> dict:
    """Per-day upload counts and downloads for one uploader's documents."""
    if period not in _UPLOAD_STATS_PERIODS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid period '{period}'. Must be one of: {sorted(_UPLOAD_STATS_PERIODS)}",
        )
    start, end = _period_bounds(period, from_date, to_date)
    day = func.date(Document.upload_date)
    query = db.query(
        day.label("date"),
        func.count(Document.id).label("count"),
        func.coalesce(func.sum(Document.download_count), 0).label("total_downloads"),
    ).filter(Document.uploader_id == user_id)
    if start is not None:
        query = query.filter(Document.upload_date >= start)
    if end is not None:
        query = query.filter(Document.upload_date < end)
    rows = query.group_by(day).order_by(day).all()

    data = [
        {"date": str(row.date), "count": row.count, "total_downloads": int(row.total_downloads)}
        for row in rows
    ]
    return {
        "period": period,
        "total_documents": sum(item["count"] for item in data),
        "total_downloads": sum(item["total_downloads"] for item in data),
        "data": data,
    }

from datetime import datetime, timedelta

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.document import Document
from app.models.platform_stats import PLATFORM_STATS_ID, PlatformStats


def _get_or_create_stats(db: Session) -> PlatformStats:
    stats = db.get(PlatformStats, PLATFORM_STATS_ID)
    if stats is not None:
        return stats
    db.add(PlatformStats(id=PLATFORM_STATS_ID))
    try:
        db.commit()
    except IntegrityError:
        # Another request created the row first.
        db.rollback()
    return db.get(PlatformStats, PLATFORM_STATS_ID)


def get_platform_stats(db: Session) -> dict:
    stats = _get_or_create_stats(db)
    db.refresh(stats)
    avg = stats.total_downloads / stats.total_uploads if stats.total_uploads > 0 else 0
    return {
        "total_uploads": stats.total_uploads,
        "total_downloads": stats.total_downloads,
        "active_users": stats.active_users,
        "avg_dl_per_doc": round(avg, 2),
    }


def get_uploads_over_time(db: Session, days: int = 30) -> list[dict]:
    start = (datetime.utcnow() - timedelta(days=days)).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    day = func.date(Document.upload_date)
    rows = (
        db.query(day.label("date"), func.count(Document.id).label("count"))
        .filter(Document.upload_date >= start)
        .group_by(day)
        .order_by(day)
        .all()
    )
    return [{"date": str(row.date), "count": row.count} for row in rows]


def _increment(db: Session, field: str, amount: int) -> None:
    # Single UPDATE with a delta so concurrent requests never lose increments.
    column = getattr(PlatformStats, field)
    updated = (
        db.query(PlatformStats)
        .filter(PlatformStats.id == PLATFORM_STATS_ID)
        .update({column: column + amount}, synchronize_session=False)
    )
    if updated:
        db.commit()
        return
    db.add(PlatformStats(id=PLATFORM_STATS_ID, **{field: amount}))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        db.query(PlatformStats).filter(PlatformStats.id == PLATFORM_STATS_ID).update(
            {column: column + amount}, synchronize_session=False
        )
        db.commit()


def increment_total_uploads(db: Session, amount: int = 1) -> None:
    _increment(db, "total_uploads", amount)


def increment_total_downloads(db: Session, amount: int = 1) -> None:
    _increment(db, "total_downloads", amount)


def increment_active_users(db: Session, amount: int = 1) -> None:
    _increment(db, "active_users", amount)

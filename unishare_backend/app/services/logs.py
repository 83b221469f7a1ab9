from sqlalchemy.orm import Session

from app.models.log import Log, LogAction
from app.services.pagination import paginate


def create_log(
    db: Session,
    actor_id: int,
    action: LogAction,
    target_id: int,
    detail: str | None = None,
) -> Log:
    entry = Log(actor_id=actor_id, action=action.value, target_id=target_id, detail=detail)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def list_logs(db: Session, page: int, limit: int, action: LogAction | None = None) -> dict:
    query = db.query(Log)
    if action is not None:
        query = query.filter(Log.action == action.value)
    query = query.order_by(Log.created_at.desc(), Log.id.desc())
    items, pagination = paginate(query, page, limit)
    return {"data": items, "pagination": pagination}

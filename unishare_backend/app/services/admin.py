import logging

from fastapi import HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import hash_password
from app.models.document import DocumentStatus
from app.models.log import LogAction
from app.models.user import User, UserRole, UserStatus
from app.schemas.user import UserQuery
from app.services.documents import admin_document_view, delete_document_record, get_document_or_404
from app.services.logs import create_log
from app.services.pagination import paginate
from app.services.statistics import increment_active_users
from app.services.users import get_user

logger = logging.getLogger(__name__)

_USER_SORT_COLUMNS = {
    "joined_date": User.joined_date,
    "full_name": User.full_name,
    "email": User.email,
}


# ── Users ─────────────────────────────────────────────────────────────────────

def list_users(db: Session, params: UserQuery) -> dict:
    query = db.query(User)
    if params.search:
        pattern = f"%{params.search}%"
        query = query.filter(or_(User.full_name.ilike(pattern), User.email.ilike(pattern)))
    if params.role is not None:
        query = query.filter(User.role == params.role.value)
    column = _USER_SORT_COLUMNS[params.sort_by]
    if params.sort_order == "asc":
        query = query.order_by(column.asc(), User.id.asc())
    else:
        query = query.order_by(column.desc(), User.id.desc())
    users, pagination = paginate(query, params.page, params.limit)
    return {"data": users, "pagination": pagination}


def _set_user_status(db: Session, user_id: int, new_status: UserStatus, actor_id: int, action: LogAction) -> User:
    user = get_user(db, user_id)
    create_log(db, actor_id, action, user_id)
    # activeUsers only moves when the status actually flips.
    if user.status != new_status.value:
        increment_active_users(db, -1 if new_status == UserStatus.BLOCKED else 1)
    user.status = new_status.value
    db.commit()
    db.refresh(user)
    logger.info("User %s set user %s status to %s", actor_id, user_id, new_status.value)
    return user


def block_user(db: Session, user_id: int, actor_id: int) -> User:
    return _set_user_status(db, user_id, UserStatus.BLOCKED, actor_id, LogAction.BLOCK_USER)


def unblock_user(db: Session, user_id: int, actor_id: int) -> User:
    return _set_user_status(db, user_id, UserStatus.ACTIVE, actor_id, LogAction.UNBLOCK_USER)


def delete_user(db: Session, user_id: int, actor_id: int) -> dict:
    user = get_user(db, user_id)
    was_active = user.status == UserStatus.ACTIVE
    db.delete(user)
    db.commit()
    if was_active:
        increment_active_users(db, -1)
    create_log(db, actor_id, LogAction.DELETE_USER, user_id)
    logger.info("User %s deleted user %s", actor_id, user_id)
    return {"message": "User deleted successfully."}


def set_user_role(db: Session, user_id: int, role: UserRole, actor_id: int) -> User:
    user = get_user(db, user_id)
    user.role = role.value
    db.commit()
    db.refresh(user)
    create_log(db, actor_id, LogAction.CHANGE_ROLE, user_id, f"Role changed to {role.value}")
    logger.info("User %s changed role of user %s to %s", actor_id, user_id, role.value)
    return user


def delegate_admin(db: Session, target_user_id: int, actor_id: int) -> User:
    """Hand the ADMIN role to a moderator and step the actor down to MODERATOR."""
    if target_user_id == actor_id:
        raise HTTPException(status_code=400, detail="Cannot delegate the admin role to yourself.")
    target = get_user(db, target_user_id)
    if target.role != UserRole.MODERATOR:
        raise HTTPException(status_code=403, detail="The admin role can only be delegated to a moderator.")

    db.query(User).filter(User.id == actor_id).update({User.role: UserRole.MODERATOR.value}, synchronize_session=False)
    target.role = UserRole.ADMIN.value
    db.commit()
    db.refresh(target)
    create_log(db, actor_id, LogAction.DELEGATE_ADMIN, target_user_id, f"Delegated admin to {target.full_name}")
    logger.info("User %s delegated admin to user %s", actor_id, target_user_id)
    return target


def reset_password(db: Session, user_id: int, actor_id: int) -> dict:
    # TODO: replace the fixed value with a random one-time password that must be changed on next login.
    user = get_user(db, user_id)
    new_password = settings.reset_password_value
    user.hashed_password = hash_password(new_password)
    db.commit()
    create_log(db, actor_id, LogAction.RESET_PASSWORD, user_id)
    logger.info("User %s reset the password of user %s", actor_id, user_id)
    return {
        "message": f"Password for {user.email} has been reset.",
        "new_password": new_password,
    }


# ── Documents ─────────────────────────────────────────────────────────────────

def _set_document_status(db: Session, document_id: int, new_status: DocumentStatus, actor_id: int, action: LogAction) -> dict:
    doc = get_document_or_404(db, document_id)
    create_log(db, actor_id, action, document_id)
    doc.status = new_status.value
    db.commit()
    db.refresh(doc)
    logger.info("User %s set document %s status to %s", actor_id, document_id, new_status.value)
    return admin_document_view(db, doc)


def block_document(db: Session, document_id: int, actor_id: int) -> dict:
    return _set_document_status(db, document_id, DocumentStatus.BLOCKED, actor_id, LogAction.BLOCK_DOCUMENT)


def unblock_document(db: Session, document_id: int, actor_id: int) -> dict:
    return _set_document_status(db, document_id, DocumentStatus.VISIBLE, actor_id, LogAction.UNBLOCK_DOCUMENT)


def delete_document(db: Session, document_id: int, actor_id: int) -> dict:
    doc = get_document_or_404(db, document_id)
    delete_document_record(db, doc)
    create_log(db, actor_id, LogAction.DELETE_DOCUMENT, document_id)
    logger.info("User %s deleted document %s", actor_id, document_id)
    return {"message": "Document deleted successfully."}

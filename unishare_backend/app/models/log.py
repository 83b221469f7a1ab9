import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from app.models.base import Base


class LogAction(str, enum.Enum):
    BLOCK_USER = "BLOCK_USER"
    UNBLOCK_USER = "UNBLOCK_USER"
    DELETE_USER = "DELETE_USER"
    CHANGE_ROLE = "CHANGE_ROLE"
    DELEGATE_ADMIN = "DELEGATE_ADMIN"
    RESET_PASSWORD = "RESET_PASSWORD"
    BLOCK_DOCUMENT = "BLOCK_DOCUMENT"
    UNBLOCK_DOCUMENT = "UNBLOCK_DOCUMENT"
    DELETE_DOCUMENT = "DELETE_DOCUMENT"
    DELETE_OWN_DOCUMENT = "DELETE_OWN_DOCUMENT"
    SYSTEM_SEED = "SYSTEM_SEED"


class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)
    # Plain ids rather than foreign keys: entries outlive their actors and targets.
    actor_id = Column(Integer, nullable=False, index=True)
    action = Column(String, nullable=False, index=True)
    target_id = Column(Integer, nullable=False)
    detail = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

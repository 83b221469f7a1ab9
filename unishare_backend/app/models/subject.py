from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from app.models.base import Base


class Subject(Base):
    __tablename__ = "subjects"
    # Deleted ids are never handed out again on SQLite.
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True, index=True)
    code = Column(String, nullable=False, unique=True, index=True)  # e.g. "MATH101"
    managing_faculty = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from app.models.base import Base


class DocumentStatus(str, enum.Enum):
    PROCESSING = "PROCESSING"
    VISIBLE = "VISIBLE"
    BLOCKED = "BLOCKED"


class Document(Base):
    __tablename__ = "documents"
    # Deleted ids are never handed out again on SQLite.
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    file_url = Column(String, nullable=False)
    file_path = Column(String, nullable=False)  # location on local storage
    file_type = Column(String, nullable=False)  # MIME type
    file_size = Column(Integer, nullable=False)
    # Orphaned references are tolerated; read paths resolve them to None.
    uploader_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(String, nullable=False, default=DocumentStatus.VISIBLE.value, index=True)
    document_type = Column(String, nullable=True)  # e.g. "Lecture Notes", "Exam Paper"
    school_year = Column(String, nullable=True)  # e.g. "2024-2025"
    faculty = Column(String, nullable=True)
    tags = Column(String, nullable=True)  # comma-separated
    download_count = Column(Integer, nullable=False, default=0)
    view_count = Column(Integer, nullable=False, default=0)
    upload_date = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

from sqlalchemy import Column, Integer

from app.models.base import Base

# Every service instance reads and updates this single row.
PLATFORM_STATS_ID = 1


class PlatformStats(Base):
    __tablename__ = "platform_stats"

    id = Column(Integer, primary_key=True, default=PLATFORM_STATS_ID)
    total_uploads = Column(Integer, nullable=False, default=0)
    total_downloads = Column(Integer, nullable=False, default=0)
    active_users = Column(Integer, nullable=False, default=0)

from pydantic import BaseModel


class PlatformStatsResponse(BaseModel):
    total_uploads: int
    total_downloads: int
    active_users: int
    avg_dl_per_doc: float


class UploadsOverTimeBucket(BaseModel):
    date: str
    count: int

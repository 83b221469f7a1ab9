"""
Remove every document and its stored file, then zero the upload/download
counters on the platform stats row and on every user.
"""
from app.core.database import SessionLocal
from app.models.document import Document
from app.models.platform_stats import PLATFORM_STATS_ID, PlatformStats
from app.models.user import User
from app.services import storage
import app.models  # noqa: F401


def main() -> None:
    db = SessionLocal()
    try:
        paths = [path for (path,) in db.query(Document.file_path).all()]
        deleted = db.query(Document).delete(synchronize_session=False)
        print(f"Deleted {deleted} documents from database")

        for path in paths:
            storage.delete(path)
        print(f"Removed {len(paths)} stored files")

        db.query(PlatformStats).filter(PlatformStats.id == PLATFORM_STATS_ID).update(
            {PlatformStats.total_uploads: 0, PlatformStats.total_downloads: 0},
            synchronize_session=False,
        )
        db.query(User).update(
            {User.uploads_count: 0, User.downloads_count: 0},
            synchronize_session=False,
        )
        db.commit()
        print("Reset upload/download counters")
    finally:
        db.close()


if __name__ == "__main__":
    main()

"""
Reset the database to a demo dataset: one account per staff role, five
students, a subject catalog grouped into majors, sample documents with
placeholder files, matching platform counters and a seed log entry.

    python -m scripts.seed_database

Every existing row and stored document file is removed first.
"""
import os

from sqlalchemy.orm import Session

from app.core.database import SessionLocal, engine
from app.core.security import hash_password
from app.models.base import Base
from app.models.document import Document, DocumentStatus
from app.models.log import Log, LogAction
from app.models.major import Major, major_subjects
from app.models.platform_stats import PLATFORM_STATS_ID, PlatformStats
from app.models.subject import Subject
from app.models.user import User, UserRole, UserStatus
from app.services import storage
import app.models  # noqa: F401

DEMO_PASSWORD = "123456"
SCHOOL_YEAR = "2024-2025"

PLACEHOLDER_PDF = (
    b"%PDF-1.4\n"
    b"1 0 obj\n<< /Type /Catalog >>\nendobj\n"
    b"trailer\n<< /Root 1 0 R >>\n%%EOF\n"
)

# (email, full name, role)
USERS = [
    ("mod@st.phenikaa-uni.edu.vn", "Nguyễn Văn Moderator", UserRole.MODERATOR),
    ("huy@st.phenikaa-uni.edu.vn", "Vũ Viết Huy", UserRole.USER),
    ("minh@st.phenikaa-uni.edu.vn", "Phạm Quang Minh", UserRole.USER),
    ("quang@st.phenikaa-uni.edu.vn", "Nguyễn Văn Quang", UserRole.USER),
    ("tien@st.phenikaa-uni.edu.vn", "Nguyễn Duy Tiến", UserRole.USER),
    ("linh@st.phenikaa-uni.edu.vn", "Hà Nguyễn Trúc Linh", UserRole.USER),
]

# (name, code, managing faculty)
SUBJECTS = [
    ("Nhập môn lập trình", "CSE101", "CSE"),
    ("Cấu trúc dữ liệu và giải thuật", "CSE201", "CSE"),
    ("Cơ sở dữ liệu", "CSE301", "CSE"),
    ("Lập trình hướng đối tượng", "CSE202", "CSE"),
    ("Mạng máy tính", "CSE302", "CSE"),
    ("Phân tích và thiết kế phần mềm", "CSE401", "CSE"),
    ("Công nghệ phần mềm", "CSE402", "CSE"),
    ("Trí tuệ nhân tạo", "CSE501", "CSE"),
    ("Toán rời rạc", "CSE703024", "CSE"),
    ("Giải tích 1", "MATH101", "FFS"),
    ("Giải tích 2", "MATH102", "FFS"),
    ("Đại số tuyến tính", "MATH201", "FFS"),
    ("Xác suất thống kê", "MATH301", "FFS"),
    ("Vật lý đại cương", "PHY101", "FFS"),
    ("Kinh tế vi mô", "ECO101", "FEB"),
    ("Kinh tế vĩ mô", "ECO102", "FEB"),
    ("Tiếng Anh 1", "ENG101", "FFL"),
    ("Tiếng Anh 2", "ENG102", "FFL"),
]

# (name, code, description, subject codes)
MAJORS = [
    (
        "Công nghệ thông tin",
        "CSE",
        "Khoa Công nghệ thông tin - Đại học Phenikaa",
        [code for _, code, faculty in SUBJECTS if faculty in ("CSE", "FFS")],
    ),
    (
        "Khoa học máy tính",
        "CS",
        "Ngành Khoa học máy tính - Đại học Phenikaa",
        [code for _, code, faculty in SUBJECTS if faculty == "CSE"],
    ),
    (
        "Kinh tế",
        "FEB",
        "Khoa Kinh tế và Kinh doanh - Đại học Phenikaa",
        ["ECO101", "ECO102", "MATH101", "MATH102", "MATH201"],
    ),
    (
        "Ngoại ngữ",
        "FFL",
        "Khoa Ngoại ngữ - Đại học Phenikaa",
        ["ENG101", "ENG102"],
    ),
]

# (title, description, subject code, uploader email prefix, document type, downloads, views)
DOCUMENTS = [
    ("Slide bài giảng Nhập môn lập trình - Chương 1", "Giới thiệu về lập trình C/C++, biến, kiểu dữ liệu",
     "CSE101", "huy", "Slide bài giảng", 15, 42),
    ("Đề thi giữa kỳ Cấu trúc dữ liệu 2024", "Đề thi giữa kỳ kèm đáp án chi tiết",
     "CSE201", "minh", "Đề thi", 89, 200),
    ("Tổng hợp lý thuyết Cơ sở dữ liệu", "Tóm tắt toàn bộ lý thuyết CSDL: ER, SQL, chuẩn hóa",
     "CSE301", "quang", "Tài liệu tổng hợp", 56, 130),
    ("Bài tập OOP Java có lời giải", "Bài tập lập trình hướng đối tượng Java kèm lời giải",
     "CSE202", "huy", "Bài tập", 34, 78),
    ("Đề cương ôn tập Mạng máy tính", "Đề cương chi tiết cho kỳ thi cuối kỳ",
     "CSE302", "tien", "Đề cương", 23, 67),
    ("Báo cáo đồ án Phân tích thiết kế phần mềm", "Báo cáo nhóm 8 - Hệ thống chia sẻ tài liệu UniShare",
     "CSE401", "huy", "Báo cáo", 12, 35),
    ("Slide Trí tuệ nhân tạo - Machine Learning", "Bài giảng về các thuật toán ML cơ bản",
     "CSE501", "linh", "Slide bài giảng", 45, 112),
    ("Cheat sheet Toán rời rạc", "Tóm tắt công thức tổ hợp, đồ thị, logic",
     "CSE703024", "minh", "Tài liệu tổng hợp", 67, 155),
    ("Đề thi cuối kỳ Giải tích 1 (5 năm)", "Tổng hợp đề thi cuối kỳ Giải tích 1 từ 2019-2024",
     "MATH101", "quang", "Đề thi", 120, 310),
    ("Công thức Xác suất thống kê", "Tổng hợp công thức cần nhớ cho kỳ thi",
     "MATH301", "tien", "Tài liệu tổng hợp", 78, 190),
    ("Slide Kinh tế vi mô - Chương 1-5", "Slide bài giảng cung cầu, co giãn, thị trường",
     "ECO101", "linh", "Slide bài giảng", 19, 45),
    ("Vocabulary Tiếng Anh 1 - Unit 1-6", "Danh sách từ vựng theo từng unit",
     "ENG101", "minh", "Tài liệu tổng hợp", 30, 85),
]


def clear(db: Session) -> None:
    for (path,) in db.query(Document.file_path).all():
        storage.delete(path)
    db.query(Log).delete(synchronize_session=False)
    db.query(Document).delete(synchronize_session=False)
    db.execute(major_subjects.delete())
    db.query(Major).delete(synchronize_session=False)
    db.query(Subject).delete(synchronize_session=False)
    db.query(User).delete(synchronize_session=False)
    db.query(PlatformStats).delete(synchronize_session=False)
    db.commit()
    db.expunge_all()


def seed(db: Session, admin_email: str = "admin@unishare.com", admin_password: str = "admin123") -> dict:
    """Replace all data with the demo dataset and return row counts."""
    clear(db)

    admin = User(
        email=admin_email,
        hashed_password=hash_password(admin_password),
        full_name="System Admin",
        role=UserRole.ADMIN.value,
        status=UserStatus.ACTIVE.value,
    )
    shared_hash = hash_password(DEMO_PASSWORD)
    users = [admin] + [
        User(email=email, hashed_password=shared_hash, full_name=name, role=role.value, status=UserStatus.ACTIVE.value)
        for email, name, role in USERS
    ]
    subjects = {code: Subject(name=name, code=code, managing_faculty=faculty) for name, code, faculty in SUBJECTS}
    majors = [
        Major(name=name, code=code, description=description, subjects=[subjects[c] for c in codes])
        for name, code, description, codes in MAJORS
    ]
    db.add_all(users + list(subjects.values()) + majors)
    db.flush()

    by_prefix = {user.email.split("@")[0]: user for user in users}
    documents = []
    for title, description, subject_code, uploader, document_type, downloads, views in DOCUMENTS:
        subject = subjects[subject_code]
        owner = by_prefix[uploader]
        stored = storage.save_bytes(PLACEHOLDER_PDF, ".pdf")
        documents.append(
            Document(
                title=title,
                description=description,
                file_url=stored.url,
                file_path=str(stored.path),
                file_type="application/pdf",
                file_size=stored.size,
                uploader_id=owner.id,
                subject_id=subject.id,
                status=DocumentStatus.VISIBLE.value,
                document_type=document_type,
                school_year=SCHOOL_YEAR,
                faculty=subject.managing_faculty,
                download_count=downloads,
                view_count=views,
            )
        )
        owner.uploads_count = (owner.uploads_count or 0) + 1
        owner.downloads_count = (owner.downloads_count or 0) + downloads
    db.add_all(documents)

    total_downloads = sum(row[5] for row in DOCUMENTS)
    db.add(
        PlatformStats(
            id=PLATFORM_STATS_ID,
            total_uploads=len(documents),
            total_downloads=total_downloads,
            active_users=len(users),
        )
    )
    db.flush()
    db.add(Log(actor_id=admin.id, action=LogAction.SYSTEM_SEED.value, target_id=admin.id, detail="Demo data seeded"))
    db.commit()

    return {
        "users": len(users),
        "subjects": len(subjects),
        "majors": len(majors),
        "documents": len(documents),
        "downloads": total_downloads,
    }


def main() -> None:
    admin_email = os.getenv("ADMIN_EMAIL", "admin@unishare.com")
    admin_password = os.getenv("ADMIN_PASSWORD", "admin123")

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        counts = seed(db, admin_email.strip().lower(), admin_password)
    finally:
        db.close()

    print(
        f"Seeded {counts['users']} users, {counts['subjects']} subjects, "
        f"{counts['majors']} majors, {counts['documents']} documents "
        f"({counts['downloads']} downloads)"
    )
    print(f"  Admin:    {admin_email} / {admin_password}")
    print(f"  Others:   <name>@st.phenikaa-uni.edu.vn / {DEMO_PASSWORD}")


if __name__ == "__main__":
    main()

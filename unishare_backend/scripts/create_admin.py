"""
Create the bootstrap ADMIN account if it does not exist yet.

    ADMIN_EMAIL=... ADMIN_PASSWORD=... python -m scripts.create_admin
"""
import os

from app.core.database import SessionLocal, engine
from app.core.security import hash_password
from app.models.base import Base
from app.models.user import User, UserRole, UserStatus
from app.services.statistics import increment_active_users
from app.services.users import find_by_email, normalize_email
import app.models  # noqa: F401


def main() -> None:
    email = normalize_email(os.getenv("ADMIN_EMAIL", "admin@unishare.com"))
    password = os.getenv("ADMIN_PASSWORD", "admin123")
    full_name = os.getenv("ADMIN_FULL_NAME", "System Admin")

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if find_by_email(db, email):
            print(f"Admin account already exists: {email}")
            return
        admin = User(
            email=email,
            hashed_password=hash_password(password),
            full_name=full_name,
            role=UserRole.ADMIN.value,
            status=UserStatus.ACTIVE.value,
        )
        db.add(admin)
        db.commit()
        increment_active_users(db, 1)
        print(f"Admin account created: {email} (id={admin.id})")
    finally:
        db.close()


if __name__ == "__main__":
    main()

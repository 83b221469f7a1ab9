"""Test configuration for the UniShare backend."""

from __future__ import annotations

import io
import os
import sys
import tempfile
from pathlib import Path
from typing import Callable, Generator

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# The engine is bound at import time, so point it at a scratch database first.
_DB_DIR = Path(tempfile.mkdtemp(prefix="unishare-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'test.db'}"
os.environ["JWT_SECRET"] = "test-secret"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.core.database import SessionLocal, engine  # noqa: E402
from app.main import app as fastapi_app  # noqa: E402
from app.models.base import Base  # noqa: E402
from app.models.subject import Subject  # noqa: E402
from app.models.user import User, UserRole  # noqa: E402

PASSWORD = "secret123"
PDF_BYTES = (
    b"%PDF-1.4\n"
    b"1 0 obj\n<< /Type /Catalog >>\nendobj\n"
    b"trailer\n<< /Root 1 0 R >>\n%%EOF\n"
)


@pytest.fixture(autouse=True)
def _isolate_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    """Give every test empty tables and its own upload directory."""

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(settings, "upload_dir", str(tmp_path / "uploads"))
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    """Return a test client for the FastAPI application."""

    with TestClient(fastapi_app) as test_client:
        yield test_client


@pytest.fixture()
def db() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def auth_headers(client: TestClient, email: str, password: str = PASSWORD) -> dict[str, str]:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
def make_user(client: TestClient) -> Callable[..., tuple[int, dict[str, str]]]:
    """Register a user, optionally promote them, and return ``(id, headers)``."""

    def _make(email: str, role: UserRole = UserRole.USER, full_name: str | None = None):
        response = client.post(
            "/api/auth/register",
            json={"email": email, "password": PASSWORD, "full_name": full_name or email.split("@")[0]},
        )
        assert response.status_code == 201, response.text
        user_id = response.json()["id"]
        if role != UserRole.USER:
            with SessionLocal() as session:
                session.query(User).filter(User.id == user_id).update({User.role: role.value})
                session.commit()
        return user_id, auth_headers(client, email)

    return _make


@pytest.fixture()
def subject() -> Subject:
    with SessionLocal() as session:
        record = Subject(name="Calculus", code="MATH101", managing_faculty="Science")
        session.add(record)
        session.commit()
        session.refresh(record)
        session.expunge(record)
        return record


@pytest.fixture()
def upload(client: TestClient) -> Callable[..., dict]:
    """Upload a document and return the created record."""

    def _upload(
        headers: dict[str, str],
        subject_id: int | str,
        title: str = "Lecture notes",
        content: bytes = PDF_BYTES,
        content_type: str = "application/pdf",
        filename: str = "notes.pdf",
        expected_status: int = 201,
        **fields: str,
    ) -> dict:
        response = client.post(
            "/api/documents/upload",
            headers=headers,
            data={"title": title, "subject_id": str(subject_id), **fields},
            files={"file": (filename, io.BytesIO(content), content_type)},
        )
        assert response.status_code == expected_status, response.text
        return response.json()

    return _upload


def fetch_user(user_id: int) -> User:
    with SessionLocal() as session:
        user = session.get(User, user_id)
        if user is not None:
            session.expunge(user)
        return user

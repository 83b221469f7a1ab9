"""Tests for the platform-wide counters and the statistics endpoints."""

from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.user import UserRole
from app.services import statistics


def test_platform_stats_start_at_zero(db: Session) -> None:
    assert statistics.get_platform_stats(db) == {
        "total_uploads": 0,
        "total_downloads": 0,
        "active_users": 0,
        "avg_dl_per_doc": 0,
    }


def test_average_downloads_per_document(db: Session) -> None:
    statistics.increment_total_uploads(db, 3)
    statistics.increment_total_downloads(db, 10)

    stats = statistics.get_platform_stats(db)
    assert stats["avg_dl_per_doc"] == 3.33


def test_increments_accept_negative_amounts(db: Session) -> None:
    statistics.increment_active_users(db, 5)
    statistics.increment_active_users(db, -2)
    statistics.increment_total_uploads(db)
    statistics.increment_total_uploads(db, -1)

    stats = statistics.get_platform_stats(db)
    assert stats["active_users"] == 3
    assert stats["total_uploads"] == 0
    assert stats["avg_dl_per_doc"] == 0


def test_counters_follow_activity(client: TestClient, make_user, subject, upload) -> None:
    _, admin = make_user("admin@example.com", role=UserRole.ADMIN)
    _, owner = make_user("ada@example.com")
    document = upload(owner, subject.id)
    upload(owner, subject.id, title="Second")
    client.get(f"/api/documents/{document['id']}/download", headers=owner)
    client.get(f"/api/documents/{document['id']}/preview")

    response = client.get("/api/statistics/platform", headers=admin)
    assert response.status_code == 200
    assert response.json() == {
        "total_uploads": 2,
        "total_downloads": 1,
        "active_users": 2,
        "avg_dl_per_doc": 0.5,
    }


def test_uploads_over_time(client: TestClient, make_user, subject, upload) -> None:
    _, moderator = make_user("mod@example.com", role=UserRole.MODERATOR)
    _, owner = make_user("ada@example.com")
    for i in range(3):
        upload(owner, subject.id, title=f"Doc {i}")

    response = client.get("/api/statistics/uploads-over-time", headers=moderator, params={"days": 7})
    assert response.status_code == 200
    buckets = response.json()
    assert len(buckets) == 1
    assert buckets[0]["count"] == 3

    assert client.get("/api/statistics/uploads-over-time", headers=moderator, params={"days": 0}).status_code == 422


def test_statistics_require_staff(client: TestClient, make_user) -> None:
    _, user = make_user("ada@example.com")
    assert client.get("/api/statistics/platform", headers=user).status_code == 403
    assert client.get("/api/statistics/uploads-over-time", headers=user).status_code == 403
    assert client.get("/api/statistics/platform").status_code == 401

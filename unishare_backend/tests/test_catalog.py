"""Tests for the subject and major catalog."""

from __future__ import annotations

from fastapi.testclient import TestClient

from app.models.user import UserRole

SUBJECT = {"name": "Calculus", "code": "MATH101", "managing_faculty": "Science"}


def _create_subject(client: TestClient, headers: dict[str, str], **overrides: str) -> dict:
    response = client.post("/api/admin/subjects", headers=headers, json={**SUBJECT, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


def test_create_and_list_subjects(client: TestClient, make_user) -> None:
    _, moderator = make_user("mod@example.com", role=UserRole.MODERATOR)
    created = _create_subject(client, moderator)
    _create_subject(client, moderator, name="Algebra", code="MATH102")

    assert created["managing_faculty"] == "Science"
    public = client.get("/api/categories/subjects").json()
    assert [s["name"] for s in public] == ["Algebra", "Calculus"]
    assert len(client.get("/api/admin/subjects", headers=moderator).json()) == 2


def test_duplicate_subject_is_a_conflict(client: TestClient, make_user) -> None:
    _, moderator = make_user("mod@example.com", role=UserRole.MODERATOR)
    _create_subject(client, moderator)

    same_code = client.post("/api/admin/subjects", headers=moderator, json={**SUBJECT, "name": "Other"})
    assert same_code.status_code == 409
    assert same_code.json()["detail"] == "Subject code or name already exists."

    same_name = client.post("/api/admin/subjects", headers=moderator, json={**SUBJECT, "code": "X1"})
    assert same_name.status_code == 409
    assert len(client.get("/api/categories/subjects").json()) == 1


def test_update_and_remove_subject(client: TestClient, make_user) -> None:
    _, moderator = make_user("mod@example.com", role=UserRole.MODERATOR)
    calculus = _create_subject(client, moderator)
    algebra = _create_subject(client, moderator, name="Algebra", code="MATH102")

    renamed = client.patch(f"/api/admin/subjects/{calculus['id']}", headers=moderator, json={"name": "Calculus I"})
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "Calculus I"
    assert renamed.json()["code"] == "MATH101"

    clash = client.patch(f"/api/admin/subjects/{calculus['id']}", headers=moderator, json={"code": "MATH102"})
    assert clash.status_code == 409

    assert client.delete(f"/api/admin/subjects/{algebra['id']}", headers=moderator).status_code == 200
    assert client.delete(f"/api/admin/subjects/{algebra['id']}", headers=moderator).status_code == 404
    assert client.patch("/api/admin/subjects/999", headers=moderator, json={"name": "x"}).status_code == 404


def test_catalog_management_requires_staff(client: TestClient, make_user) -> None:
    _, user = make_user("ada@example.com")
    assert client.post("/api/admin/subjects", headers=user, json=SUBJECT).status_code == 403
    assert client.post("/api/admin/subjects", json=SUBJECT).status_code == 401
    assert client.post("/api/admin/majors", headers=user, json={"name": "Maths"}).status_code == 403


def test_majors_with_subjects(client: TestClient, make_user) -> None:
    _, moderator = make_user("mod@example.com", role=UserRole.MODERATOR)
    calculus = _create_subject(client, moderator)
    algebra = _create_subject(client, moderator, name="Algebra", code="MATH102")

    response = client.post(
        "/api/admin/majors",
        headers=moderator,
        json={"name": "Mathematics", "code": "MATH", "subject_ids": [calculus["id"], algebra["id"]]},
    )
    assert response.status_code == 201
    major = response.json()
    assert [s["name"] for s in major["subjects"]] == ["Algebra", "Calculus"]
    assert major["subjects"][0]["managing_faculty"] == "Science"

    public = client.get(f"/api/categories/majors/{major['id']}").json()
    assert public["subjects"][0] == {"id": algebra["id"], "name": "Algebra", "code": "MATH102"}
    listed = client.get("/api/categories/majors").json()
    assert all(set(s) == {"id", "name", "code"} for m in listed for s in m["subjects"])
    assert [m["name"] for m in client.get("/api/categories/majors").json()] == ["Mathematics"]

    updated = client.patch(
        f"/api/admin/majors/{major['id']}", headers=moderator, json={"subject_ids": [calculus["id"]]}
    ).json()
    assert [s["id"] for s in updated["subjects"]] == [calculus["id"]]
    assert updated["code"] == "MATH"


def test_major_errors(client: TestClient, make_user) -> None:
    _, moderator = make_user("mod@example.com", role=UserRole.MODERATOR)
    client.post("/api/admin/majors", headers=moderator, json={"name": "Mathematics"})

    duplicate = client.post("/api/admin/majors", headers=moderator, json={"name": "Mathematics"})
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"] == "Major name already exists."

    unknown_subject = client.post("/api/admin/majors", headers=moderator, json={"name": "Physics", "subject_ids": [999]})
    assert unknown_subject.status_code == 404

    assert client.get("/api/categories/majors/999").status_code == 404
    assert client.delete("/api/admin/majors/999", headers=moderator).status_code == 404


def test_remove_major_keeps_subjects(client: TestClient, make_user) -> None:
    _, moderator = make_user("mod@example.com", role=UserRole.MODERATOR)
    calculus = _create_subject(client, moderator)
    major = client.post(
        "/api/admin/majors", headers=moderator, json={"name": "Mathematics", "subject_ids": [calculus["id"]]}
    ).json()

    assert client.delete(f"/api/admin/majors/{major['id']}", headers=moderator).status_code == 200
    assert client.get("/api/categories/majors").json() == []
    assert [s["id"] for s in client.get("/api/categories/subjects").json()] == [calculus["id"]]


def test_removed_subject_leaves_documents_unclassified(client: TestClient, make_user, upload) -> None:
    _, moderator = make_user("mod@example.com", role=UserRole.MODERATOR)
    _, owner = make_user("ada@example.com")
    calculus = _create_subject(client, moderator)
    major = client.post(
        "/api/admin/majors", headers=moderator, json={"name": "Mathematics", "subject_ids": [calculus["id"]]}
    ).json()
    document = upload(owner, calculus["id"])

    assert client.delete(f"/api/admin/subjects/{calculus['id']}", headers=moderator).status_code == 200

    listed = client.get("/api/documents").json()["data"]
    assert [(d["id"], d["subject"]) for d in listed] == [(document["id"], None)]
    assert client.get(f"/api/documents/{document['id']}").json()["subject"] is None
    assert client.get(f"/api/categories/majors/{major['id']}").json()["subjects"] == []

    poetry = _create_subject(client, moderator, name="Poetry", code="LIT101", managing_faculty="Arts")
    assert poetry["id"] != calculus["id"]
    assert client.get(f"/api/documents/{document['id']}").json()["subject"] is None
    assert client.get(f"/api/categories/majors/{major['id']}").json()["subjects"] == []
    assert client.get("/api/documents", params={"subject": poetry["id"]}).json()["pagination"]["total"] == 0

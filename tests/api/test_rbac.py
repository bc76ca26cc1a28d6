"""Role checks on every router: no token is 401, the wrong role is 403."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tests.conftest import auth, make_user

SOME_ID = "3f0c4a0e-0000-4000-8000-00000000abcd"

STUDENT_ROUTES = [
    ("GET", "/v1/student/dashboard"),
    ("GET", f"/v1/student/weeks/{SOME_ID}"),
    ("PUT", f"/v1/student/weeks/{SOME_ID}/video-progress"),
    ("POST", f"/v1/student/weeks/{SOME_ID}/quiz"),
    ("POST", f"/v1/student/weeks/{SOME_ID}/assignment"),
    ("DELETE", f"/v1/student/submissions/{SOME_ID}"),
    ("GET", "/v1/student/progress-summary"),
    ("POST", "/v1/student/check-unlock"),
    ("GET", "/v1/student/certificate"),
]

ADMIN_ROUTES = [
    ("GET", "/v1/admin/dashboard"),
    ("GET", "/v1/admin/course-structure"),
    ("GET", "/v1/admin/students"),
    ("POST", f"/v1/admin/students/{SOME_ID}/approve-phase/{SOME_ID}"),
    ("GET", "/v1/admin/submissions"),
    ("PUT", f"/v1/admin/submissions/{SOME_ID}/review"),
    ("DELETE", f"/v1/admin/weeks/{SOME_ID}"),
    ("PUT", f"/v1/admin/weeks/{SOME_ID}/content"),
]


def _ids(routes: list[tuple[str, str]]) -> list[str]:
    return [f"{m} {p.replace(SOME_ID, '{id}')}" for m, p in routes]


@pytest.mark.parametrize("method,path", STUDENT_ROUTES + ADMIN_ROUTES, ids=_ids(STUDENT_ROUTES + ADMIN_ROUTES))
def test_anonymous_is_401(client: TestClient, method: str, path: str) -> None:
    resp = client.request(method, path, json={})
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


@pytest.mark.parametrize("method,path", STUDENT_ROUTES, ids=_ids(STUDENT_ROUTES))
def test_admin_cannot_use_student_routes(client: TestClient, method: str, path: str) -> None:
    resp = client.request(method, path, json={}, headers=auth(make_user("admin")))
    assert resp.status_code == 403


@pytest.mark.parametrize("method,path", ADMIN_ROUTES, ids=_ids(ADMIN_ROUTES))
def test_student_cannot_use_admin_routes(client: TestClient, method: str, path: str) -> None:
    resp = client.request(method, path, json={}, headers=auth(make_user()))
    assert resp.status_code == 403


@pytest.mark.parametrize(
    "role,path",
    [("student", "/v1/student/progress-summary"), ("admin", "/v1/admin/students")],
    ids=["student", "admin"],
)
def test_matching_role_is_allowed(client: TestClient, role: str, path: str) -> None:
    assert client.get(path, headers=auth(make_user(role))).status_code == 200


def test_garbage_token_is_401(client: TestClient) -> None:
    resp = client.get("/v1/student/dashboard", headers={"Authorization": "Bearer not.a.jwt"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"

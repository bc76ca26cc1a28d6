from __future__ import annotations

import asyncio
from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from app.models.course import Phase, Week
from app.models.user import User
from app.repos.store import Store
from tests.conftest import SmallCourse, auth, make_user


@pytest.fixture
def admin() -> User:
    return make_user("admin")


def _points(store: Store, student: User, week: Week, points: int) -> None:
    asyncio.run(
        store.progress.update(
            student.id,
            week.id,
            lambda r: replace(r, assignment_points=points, points=points),
        )
    )


def _submit(client: TestClient, student: User, week: Week) -> str:
    resp = client.post(
        f"/v1/student/weeks/{week.id}/assignment",
        json={"file_name": "app.zip"},
        headers=auth(student),
    )
    assert resp.status_code == 201
    return resp.json()["id"]


# ---- overview ----


def test_dashboard_counts(
    client: TestClient, store: Store, course: SmallCourse, admin: User
) -> None:
    leader, other = make_user(name="Leader"), make_user()
    _points(store, leader, course.week(1), 90)
    _submit(client, other, course.week(1))

    resp = client.get("/v1/admin/dashboard", headers=auth(admin))

    assert resp.status_code == 200
    body = resp.json()
    assert body["total_students"] == 2
    assert body["active_students"] == 2
    assert body["pending_submissions"] == 1
    assert body["total_submissions"] == 1
    assert body["certificates_issued"] == 0
    assert body["top_students"][0]["user"]["id"] == str(leader.id)
    assert body["top_students"][0]["earned_points"] == 90


def test_course_structure_reveals_answers(
    client: TestClient, course: SmallCourse, admin: User
) -> None:
    resp = client.get("/v1/admin/course-structure", headers=auth(admin))

    assert resp.status_code == 200
    phases = resp.json()
    assert [p["phase"]["number"] for p in phases] == [1, 2]
    first = phases[0]["weeks"][0]
    assert first["week"]["week_number"] == 1
    quiz = next(b for b in first["content"]["blocks"] if b["kind"] == "quiz")
    assert [q["correct_answer"] for q in quiz["questions"]] == [1, 0]
    assert phases[0]["weeks"][1]["content"] is None


# ---- students ----


def test_students_search_and_paging(client: TestClient, course: SmallCourse, admin: User) -> None:
    make_user(name="Grace Hopper")
    for _ in range(3):
        make_user()
    h = auth(admin)

    page = client.get("/v1/admin/students", params={"page": 2, "limit": 3}, headers=h).json()
    assert page["total"] == 4
    assert len(page["items"]) == 1

    found = client.get("/v1/admin/students", params={"search": "grace"}, headers=h).json()
    assert [s["user"]["name"] for s in found["items"]] == ["Grace Hopper"]

    assert client.get("/v1/admin/students", params={"limit": 101}, headers=h).status_code == 422
    assert client.get("/v1/admin/students", params={"page": 0}, headers=h).status_code == 422


def test_student_detail(
    client: TestClient, store: Store, course: SmallCourse, admin: User
) -> None:
    student = make_user()
    _points(store, student, course.week(1), 100)
    _submit(client, student, course.week(2))

    resp = client.get(f"/v1/admin/students/{student.id}", headers=auth(admin))

    assert resp.status_code == 200
    body = resp.json()
    assert body["student"]["earned_points"] == 100
    assert body["progress"]["overall_percent"] == 25
    assert len(body["records"]) == 1
    assert len(body["submissions"]) == 1
    assert body["certificate"] is None


def test_unknown_student_is_404(client: TestClient, course: SmallCourse, admin: User) -> None:
    resp = client.get(
        "/v1/admin/students/00000000-0000-0000-0000-000000000000", headers=auth(admin)
    )
    assert resp.status_code == 404


def test_approve_phase_at_threshold(
    client: TestClient, store: Store, course: SmallCourse, admin: User
) -> None:
    student = make_user()
    _points(store, student, course.week(1), 100)
    _points(store, student, course.week(2), 60)
    url = f"/v1/admin/students/{student.id}/approve-phase/{course.phases[0].id}"

    resp = client.post(url, headers=auth(admin))

    assert resp.status_code == 200
    assert resp.json()["user"]["current_phase"] == 2
    assert resp.json()["certificate"] is None
    # phase 1 is no longer current
    assert client.post(url, headers=auth(admin)).status_code == 409


def test_approve_phase_below_threshold(
    client: TestClient, store: Store, course: SmallCourse, admin: User
) -> None:
    student = make_user()
    _points(store, student, course.week(1), 100)
    _points(store, student, course.week(2), 59)

    resp = client.post(
        f"/v1/admin/students/{student.id}/approve-phase/{course.phases[0].id}",
        headers=auth(admin),
    )

    assert resp.status_code == 409
    assert resp.json()["detail"] == "phase progress is below the unlock threshold"


def test_approve_last_phase_issues_certificate(
    client: TestClient, store: Store, course: SmallCourse, admin: User
) -> None:
    student = make_user(current_phase=2)
    _points(store, student, course.week(3), 100)
    _points(store, student, course.week(4), 80)
    url = f"/v1/admin/students/{student.id}/approve-phase/{course.phases[1].id}"

    resp = client.post(url, headers=auth(admin))

    assert resp.status_code == 200
    assert resp.json()["certificate"]["certificate_code"].startswith("CERT-")
    assert client.get("/v1/student/certificate", headers=auth(student)).status_code == 200
    assert client.post(url, headers=auth(admin)).json()["detail"] == "course already completed"


# ---- submissions ----


def test_list_submissions_filters(client: TestClient, course: SmallCourse, admin: User) -> None:
    student = make_user()
    _submit(client, student, course.week(1))
    client.post(
        f"/v1/student/weeks/{course.week(1).id}/quiz",
        json={"answers": [0, 0]},
        headers=auth(student),
    )
    h = auth(admin)

    everything = client.get("/v1/admin/submissions", headers=h).json()
    assert everything["total"] == 2

    quizzes = client.get("/v1/admin/submissions", params={"type": "quiz"}, headers=h).json()
    assert [s["type"] for s in quizzes["items"]] == ["quiz"]
    assert quizzes["items"][0]["score"] == 1

    pending = client.get(
        "/v1/admin/submissions", params={"status": "submitted", "type": "assignment"}, headers=h
    ).json()
    assert pending["total"] == 1

    assert client.get("/v1/admin/submissions", params={"status": "lost"}, headers=h).status_code == 422


def test_review_awards_assignment_points(
    client: TestClient, store: Store, course: SmallCourse, admin: User
) -> None:
    student = make_user()
    sub_id = _submit(client, student, course.week(1))

    resp = client.put(
        f"/v1/admin/submissions/{sub_id}/review",
        json={"score": 75, "status": "reviewed", "feedback": "Nice"},
        headers=auth(admin),
    )

    assert resp.status_code == 200
    assert resp.json()["status"] == "reviewed"
    assert resp.json()["feedback"] == "Nice"
    record = asyncio.run(store.progress.get(student.id, course.week(1).id))
    assert record is not None
    assert record.assignment_points == 45
    assert record.assignment_submitted is True


@pytest.mark.parametrize(
    "body",
    [
        {"score": 101, "status": "reviewed"},
        {"score": -1, "status": "reviewed"},
        {"score": 50, "status": "graded"},
    ],
    ids=["score-too-high", "negative-score", "unknown-status"],
)
def test_review_rejects_bad_input(
    client: TestClient, course: SmallCourse, admin: User, body: dict
) -> None:
    sub_id = _submit(client, make_user(), course.week(1))
    resp = client.put(f"/v1/admin/submissions/{sub_id}/review", json=body, headers=auth(admin))
    assert resp.status_code == 422


def test_admin_delete_submission(client: TestClient, course: SmallCourse, admin: User) -> None:
    student = make_user()
    reviewed = _submit(client, student, course.week(1))
    approved = _submit(client, student, course.week(2))
    h = auth(admin)
    client.put(
        f"/v1/admin/submissions/{reviewed}/review", json={"score": 50, "status": "reviewed"}, headers=h
    )
    client.put(
        f"/v1/admin/submissions/{approved}/review", json={"score": 90, "status": "approved"}, headers=h
    )

    assert client.delete(f"/v1/admin/submissions/{reviewed}", headers=h).status_code == 204
    resp = client.delete(f"/v1/admin/submissions/{approved}", headers=h)
    assert resp.status_code == 409
    assert resp.json()["detail"] == "approved submissions cannot be deleted"


# ---- course structure ----


def test_update_phase(client: TestClient, course: SmallCourse, admin: User) -> None:
    url = f"/v1/admin/phases/{course.phases[0].id}"
    resp = client.put(url, json={"title": "Basics"}, headers=auth(admin))
    assert resp.status_code == 200
    assert resp.json()["title"] == "Basics"
    assert resp.json()["start_week"] == 1
    assert client.put(url, json={"title": " "}, headers=auth(admin)).status_code == 422


def test_week_lifecycle(client: TestClient, store: Store, course: SmallCourse, admin: User) -> None:
    capstone = Phase.new(number=3, title="Capstone", start_week=5, end_week=6)
    asyncio.run(store.courses.add_phase(capstone))
    h = auth(admin)

    resp = client.post(
        "/v1/admin/weeks",
        json={"phase_id": str(capstone.id), "week_number": 5, "title": "Ship it"},
        headers=h,
    )
    assert resp.status_code == 201
    week = resp.json()
    assert week["max_points"] == 100

    dup = client.post(
        "/v1/admin/weeks",
        json={"phase_id": str(capstone.id), "week_number": 5, "title": "Again"},
        headers=h,
    )
    assert dup.status_code == 409

    updated = client.put(
        f"/v1/admin/weeks/{week['id']}",
        json={"video_points": 30, "assignment_points": 70, "max_points": 100},
        headers=h,
    )
    assert updated.status_code == 200
    assert updated.json()["video_points"] == 30

    assert client.delete(f"/v1/admin/weeks/{week['id']}", headers=h).status_code == 204
    assert client.delete(f"/v1/admin/weeks/{week['id']}", headers=h).status_code == 404


@pytest.mark.parametrize(
    "body",
    [
        {"week_number": 9, "title": "Out of range"},
        {"week_number": 5, "title": "Bad sum", "max_points": 90},
        {"week_number": 5, "title": "", "video_points": 40},
    ],
    ids=["outside-phase", "max-points-mismatch", "empty-title"],
)
def test_create_week_validation(
    client: TestClient, store: Store, course: SmallCourse, admin: User, body: dict
) -> None:
    capstone = Phase.new(number=3, title="Capstone", start_week=5, end_week=6)
    asyncio.run(store.courses.add_phase(capstone))
    resp = client.post(
        "/v1/admin/weeks", json={"phase_id": str(capstone.id), **body}, headers=auth(admin)
    )
    assert resp.status_code == 422


def test_week_with_progress_cannot_be_deleted(
    client: TestClient, store: Store, course: SmallCourse, admin: User
) -> None:
    _points(store, make_user(), course.week(1), 10)
    resp = client.delete(f"/v1/admin/weeks/{course.week(1).id}", headers=auth(admin))
    assert resp.status_code == 409


# ---- week content ----


QUIZ_BLOCK = {
    "kind": "quiz",
    "questions": [{"prompt": "Widgets?", "options": ["yes", "no"], "correct_answer": 0}],
}


def test_content_put_get_delete(client: TestClient, course: SmallCourse, admin: User) -> None:
    url = f"/v1/admin/weeks/{course.week(2).id}/content"
    h = auth(admin)
    assert client.get(url, headers=h).status_code == 404

    resp = client.put(
        url,
        json={
            "is_published": True,
            "blocks": [
                {"kind": "notes", "text": "Bring coffee"},
                {"kind": "videos", "videos": [{"title": "A", "url": "https://v.test/a"}]},
                QUIZ_BLOCK,
                {"kind": "assignment", "description": "Build", "deadline": "2026-03-01T12:00:00Z"},
            ],
        },
        headers=h,
    )
    assert resp.status_code == 200
    assert [b["kind"] for b in resp.json()["blocks"]] == ["notes", "videos", "quiz", "assignment"]

    fetched = client.get(url, headers=h).json()
    assert fetched["is_published"] is True
    assert fetched["blocks"][2]["questions"][0]["correct_answer"] == 0

    assert client.delete(url, headers=h).status_code == 204
    assert client.delete(url, headers=h).status_code == 404


@pytest.mark.parametrize(
    "blocks",
    [
        [{"kind": "poll", "text": "?"}],
        [{"kind": "notes", "text": "a"}, {"kind": "notes", "text": "b"}],
        [{"kind": "quiz", "questions": [{"prompt": "?", "options": ["a", "b"], "correct_answer": 2}]}],
        [{"kind": "quiz", "questions": []}],
    ],
    ids=["unknown-kind", "duplicate-kind", "answer-out-of-range", "no-questions"],
)
def test_content_put_rejects_bad_blocks(
    client: TestClient, course: SmallCourse, admin: User, blocks: list
) -> None:
    resp = client.put(
        f"/v1/admin/weeks/{course.week(2).id}/content",
        json={"blocks": blocks},
        headers=auth(admin),
    )
    assert resp.status_code == 422


def test_unpublished_content_is_hidden_from_students(
    client: TestClient, course: SmallCourse, admin: User
) -> None:
    client.put(
        f"/v1/admin/weeks/{course.week(2).id}/content",
        json={"is_published": False, "blocks": [QUIZ_BLOCK]},
        headers=auth(admin),
    )
    student = make_user()

    detail = client.get(f"/v1/student/weeks/{course.week(2).id}", headers=auth(student))
    quiz = client.post(
        f"/v1/student/weeks/{course.week(2).id}/quiz", json={"answers": [0]}, headers=auth(student)
    )

    assert detail.json()["content"] is None
    assert quiz.status_code == 409

from __future__ import annotations

import asyncio

from app.repos.store import Store
from app.services.seed import seed_admin, seed_course


def test_seed_course_builds_default_course_once(store: Store) -> None:
    assert asyncio.run(seed_course(store)) is True
    assert asyncio.run(seed_course(store)) is False

    phases = asyncio.run(store.courses.list_phases())
    weeks = asyncio.run(store.courses.list_weeks())
    assert [(p.number, p.start_week, p.end_week) for p in phases] == [(1, 1, 8), (2, 9, 16), (3, 17, 26)]
    assert [w.week_number for w in weeks] == list(range(1, 27))
    assert all(w.max_points == 100 for w in weeks)

    content = asyncio.run(store.courses.get_content(weeks[0].id))
    assert content is not None
    assert content.is_published is True
    assert content.quiz_questions == ()


def test_seed_admin_is_idempotent(store: Store) -> None:
    assert asyncio.run(seed_admin(store, email="admin@example.com", password="s3cret-pass")) is True
    assert asyncio.run(seed_admin(store, email="admin@example.com", password="other-pass")) is False

    admin = asyncio.run(store.users.get_by_email("admin@example.com"))
    assert admin is not None
    assert admin.role == "admin"
    assert asyncio.run(store.users.list_students()) == []

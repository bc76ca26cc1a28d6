from __future__ import annotations

import asyncio

import pytest

from app.core.errors import Forbidden, NotFound
from app.repos.store import Store
from app.services import certificate_service, progress_service
from tests.conftest import SmallCourse, make_user, principal_of


def test_issue_once_is_idempotent(store: Store) -> None:
    student = make_user()

    first = asyncio.run(certificate_service.issue_once(store, student.id, now=100))
    second = asyncio.run(certificate_service.issue_once(store, student.id, now=200))

    assert first == second
    assert first.issued_at == 100
    assert first.certificate_code.startswith("CERT-100-")
    assert asyncio.run(store.certificates.count()) == 1


def test_get_certificate_owner_or_admin(store: Store) -> None:
    student, other, admin = make_user(), make_user(), make_user("admin")

    with pytest.raises(NotFound):
        asyncio.run(certificate_service.get_certificate(store, principal_of(student), student.id))

    cert = asyncio.run(certificate_service.issue_once(store, student.id))
    assert (
        asyncio.run(certificate_service.get_certificate(store, principal_of(admin), student.id))
        == cert
    )
    with pytest.raises(Forbidden):
        asyncio.run(certificate_service.get_certificate(store, principal_of(other), student.id))


def test_progress_summary_of_another_student_is_forbidden(
    store: Store, course: SmallCourse
) -> None:
    student, other = make_user(), make_user()
    with pytest.raises(Forbidden):
        asyncio.run(progress_service.progress_summary(store, principal_of(other), student.id))


def test_phase_progress_unknown_phase(store: Store, course: SmallCourse) -> None:
    student = make_user()
    with pytest.raises(NotFound, match="phase"):
        asyncio.run(
            progress_service.phase_progress(store, principal_of(student), student.id, student.id)
        )

"""The set of repositories a service call works against.

Services never reach for module globals; they receive a Store.  The API
builds one per request: the process-wide in-memory store when no database
is configured, otherwise a Pg store bound to the request's session.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.repos.certificate_repo import CertificateRepo, InMemoryCertificateRepo
from app.repos.course_repo import CourseRepo, InMemoryCourseRepo
from app.repos.pg_certificate_repo import PgCertificateRepo
from app.repos.pg_course_repo import PgCourseRepo
from app.repos.pg_progress_repo import PgProgressRepo
from app.repos.pg_submission_repo import PgSubmissionRepo
from app.repos.pg_user_repo import PgUserRepo
from app.repos.progress_repo import InMemoryProgressRepo, ProgressRepo
from app.repos.submission_repo import InMemorySubmissionRepo, SubmissionRepo
from app.repos.user_repo import InMemoryUserRepo, UserRepo


@dataclass(frozen=True, slots=True)
class Store:
    users: UserRepo
    courses: CourseRepo
    progress: ProgressRepo
    submissions: SubmissionRepo
    certificates: CertificateRepo


def in_memory_store() -> Store:
    return Store(
        users=InMemoryUserRepo(),
        courses=InMemoryCourseRepo(),
        progress=InMemoryProgressRepo(),
        submissions=InMemorySubmissionRepo(),
        certificates=InMemoryCertificateRepo(),
    )


def pg_store(session: AsyncSession) -> Store:
    return Store(
        users=PgUserRepo(session),
        courses=PgCourseRepo(session),
        progress=PgProgressRepo(session),
        submissions=PgSubmissionRepo(session),
        certificates=PgCertificateRepo(session),
    )


def reset(store: Store) -> None:
    """Empty an in-memory store (tests)."""
    for repo in (
        store.users,
        store.courses,
        store.progress,
        store.submissions,
        store.certificates,
    ):
        repo.clear()  # type: ignore[attr-defined]


# process-wide store used when DATABASE_URL is unset
memory_store = in_memory_store()

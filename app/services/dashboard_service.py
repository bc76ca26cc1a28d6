"""Read models for the student and admin dashboards.

All percentages come from the Progress Aggregator; nothing here computes
progress on its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from app.models.certificate import Certificate
from app.models.principal import Principal
from app.models.progress import ProgressRecord
from app.models.submission import Submission
from app.models.user import User
from app.repos.store import Store
from app.services.access import require_admin, require_student
from app.services.progress_aggregator import CourseProgress, aggregate
from app.services.progress_service import load_course_progress, load_student

RECENT_SUBMISSIONS = 5
TOP_STUDENTS = 10


def _page(items: list, page: int, limit: int) -> list:
    start = (page - 1) * limit
    return items[start : start + limit]


@dataclass(frozen=True, slots=True)
class StudentDashboard:
    student: User
    course: CourseProgress
    recent_submissions: tuple[Submission, ...]
    certificate: Certificate | None


async def student_dashboard(store: Store, principal: Principal) -> StudentDashboard:
    require_student(principal)
    student = await load_student(store, principal.id)
    submissions = await store.submissions.list(student_id=student.id)
    return StudentDashboard(
        student=student,
        course=await load_course_progress(store, student.id),
        recent_submissions=tuple(submissions[:RECENT_SUBMISSIONS]),
        certificate=await store.certificates.get_for_student(student.id),
    )


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StudentStanding:
    student: User
    course: CourseProgress


async def _standings(store: Store, students: list[User]) -> list[StudentStanding]:
    phases = await store.courses.list_phases()
    weeks = await store.courses.list_weeks()
    out = []
    for s in students:
        records = await store.progress.list_for_student(s.id)
        out.append(StudentStanding(student=s, course=aggregate(phases, weeks, records)))
    return out


@dataclass(frozen=True, slots=True)
class AdminDashboard:
    total_students: int
    active_students: int
    pending_submissions: int
    total_submissions: int
    certificates_issued: int
    top_students: tuple[StudentStanding, ...]


async def admin_dashboard(store: Store, principal: Principal) -> AdminDashboard:
    require_admin(principal)
    students = await store.users.list_students()
    standings = await _standings(store, students)
    standings.sort(key=lambda s: s.course.earned_points, reverse=True)
    return AdminDashboard(
        total_students=len(students),
        active_students=sum(1 for s in students if s.is_active),
        pending_submissions=len(await store.submissions.list(status="submitted")),
        total_submissions=len(await store.submissions.list()),
        certificates_issued=await store.certificates.count(),
        top_students=tuple(standings[:TOP_STUDENTS]),
    )


async def list_students(
    store: Store,
    principal: Principal,
    *,
    search: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[StudentStanding], int]:
    require_admin(principal)
    students = await store.users.list_students()
    if search:
        needle = search.strip().lower()
        students = [
            s for s in students if needle in s.email or needle in s.name.lower()
        ]
    return await _standings(store, _page(students, page, limit)), len(students)


@dataclass(frozen=True, slots=True)
class StudentDetail:
    student: User
    course: CourseProgress
    records: tuple[ProgressRecord, ...]
    submissions: tuple[Submission, ...]
    certificate: Certificate | None


async def student_detail(
    store: Store, principal: Principal, student_id: UUID
) -> StudentDetail:
    require_admin(principal)
    student = await load_student(store, student_id)
    return StudentDetail(
        student=student,
        course=await load_course_progress(store, student.id),
        records=tuple(await store.progress.list_for_student(student.id)),
        submissions=tuple(await store.submissions.list(student_id=student.id)),
        certificate=await store.certificates.get_for_student(student.id),
    )


async def list_submissions(
    store: Store,
    principal: Principal,
    *,
    status: str | None = None,
    type: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[Submission], int]:
    require_admin(principal)
    items = await store.submissions.list(status=status, type=type)
    return _page(items, page, limit), len(items)

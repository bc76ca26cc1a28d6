from __future__ import annotations

from uuid import UUID

from app.core.errors import NotFound
from app.models.principal import Principal
from app.models.user import User
from app.repos.store import Store
from app.services.access import check_owner_or_admin
from app.services.progress_aggregator import CourseProgress, PhaseProgress, aggregate


async def load_student(store: Store, student_id: UUID) -> User:
    user = await store.users.get_by_id(student_id)
    if user is None or user.role != "student":
        raise NotFound("student not found")
    return user


async def load_course_progress(store: Store, student_id: UUID) -> CourseProgress:
    """Read the course tree and the student's records and roll them up."""
    phases = await store.courses.list_phases()
    weeks = await store.courses.list_weeks()
    records = await store.progress.list_for_student(student_id)
    return aggregate(phases, weeks, records)


async def progress_summary(
    store: Store, principal: Principal, student_id: UUID
) -> tuple[User, CourseProgress]:
    check_owner_or_admin(principal, student_id)
    student = await load_student(store, student_id)
    return student, await load_course_progress(store, student_id)


async def phase_progress(
    store: Store, principal: Principal, student_id: UUID, phase_id: UUID
) -> tuple[User, PhaseProgress]:
    check_owner_or_admin(principal, student_id)
    student = await load_student(store, student_id)
    phase = await store.courses.get_phase(phase_id)
    if phase is None:
        raise NotFound("phase not found")
    course = await load_course_progress(store, student_id)
    summary = course.phase(phase.number)
    if summary is None:
        raise NotFound("phase not found")
    return student, summary

"""Admin endpoints: course structure, students, submissions and approvals."""

from __future__ import annotations

from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Query, Response, status
from pydantic import BaseModel, Field

from app.api.auth import UserOut
from app.api.dependencies import AdminPrincipal, StoreDep
from app.api.errors import to_http
from app.api.views import (
    BlockIn,
    CertificateOut,
    ContentOut,
    CourseProgressOut,
    PhaseOut,
    ProgressOut,
    StudentOut,
    SubmissionOut,
    WeekOut,
    to_domain,
)
from app.core.errors import CourseError
from app.services import content_service, dashboard_service, scoring, unlock_evaluator

router = APIRouter(prefix="/v1/admin", tags=["admin"])

Page = Annotated[int, Query(ge=1)]
Limit = Annotated[int, Query(ge=1, le=100)]


# --- Schemas --------------------------------------------------------------


class AdminDashboardOut(BaseModel):
    total_students: int
    active_students: int
    pending_submissions: int
    total_submissions: int
    certificates_issued: int
    top_students: list[StudentOut]


class WeekOutlineOut(BaseModel):
    week: WeekOut
    content: ContentOut | None = None


class PhaseOutlineOut(BaseModel):
    phase: PhaseOut
    weeks: list[WeekOutlineOut]


class StudentPage(BaseModel):
    items: list[StudentOut]
    total: int
    page: int
    limit: int


class StudentDetailOut(BaseModel):
    student: StudentOut
    progress: CourseProgressOut
    records: list[ProgressOut]
    submissions: list[SubmissionOut]
    certificate: CertificateOut | None = None


class SubmissionPage(BaseModel):
    items: list[SubmissionOut]
    total: int
    page: int
    limit: int


class ReviewIn(BaseModel):
    score: int
    status: Literal["reviewed", "approved", "rejected"]
    feedback: str | None = Field(default=None, max_length=5000)


class ApprovalOut(BaseModel):
    user: UserOut
    certificate: CertificateOut | None = None


class WeekCreateIn(BaseModel):
    phase_id: UUID
    week_number: int
    title: str
    description: str = ""
    video_points: int = 40
    assignment_points: int = 60
    max_points: int | None = None


class WeekUpdateIn(BaseModel):
    title: str | None = None
    description: str | None = None
    week_number: int | None = None
    video_points: int | None = None
    assignment_points: int | None = None
    max_points: int | None = None


class PhaseUpdateIn(BaseModel):
    title: str | None = None
    description: str | None = None


class ContentIn(BaseModel):
    is_published: bool = False
    blocks: list[BlockIn] = []


# --- Overview ---------------------------------------------------------------


@router.get("/dashboard", response_model=AdminDashboardOut)
async def dashboard(principal: AdminPrincipal, store: StoreDep) -> AdminDashboardOut:
    try:
        d = await dashboard_service.admin_dashboard(store, principal)
    except CourseError as exc:
        raise to_http(exc) from None
    return AdminDashboardOut(
        total_students=d.total_students,
        active_students=d.active_students,
        pending_submissions=d.pending_submissions,
        total_submissions=d.total_submissions,
        certificates_issued=d.certificates_issued,
        top_students=[StudentOut.of(s.student, s.course) for s in d.top_students],
    )


@router.get("/course-structure", response_model=list[PhaseOutlineOut])
async def course_structure(principal: AdminPrincipal, store: StoreDep) -> list[PhaseOutlineOut]:
    try:
        outline = await content_service.course_structure(store, principal)
    except CourseError as exc:
        raise to_http(exc) from None
    return [
        PhaseOutlineOut(
            phase=PhaseOut.of(o.phase),
            weeks=[
                WeekOutlineOut(
                    week=WeekOut.of(w),
                    content=ContentOut.of(c, reveal_answers=True) if c else None,
                )
                for w, c in o.weeks
            ],
        )
        for o in outline
    ]


# --- Students ---------------------------------------------------------------


@router.get("/students", response_model=StudentPage)
async def list_students(
    principal: AdminPrincipal,
    store: StoreDep,
    search: str | None = None,
    page: Page = 1,
    limit: Limit = 20,
) -> StudentPage:
    try:
        standings, total = await dashboard_service.list_students(
            store, principal, search=search, page=page, limit=limit
        )
    except CourseError as exc:
        raise to_http(exc) from None
    return StudentPage(
        items=[StudentOut.of(s.student, s.course) for s in standings],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/students/{student_id}", response_model=StudentDetailOut)
async def get_student(
    student_id: UUID, principal: AdminPrincipal, store: StoreDep
) -> StudentDetailOut:
    try:
        d = await dashboard_service.student_detail(store, principal, student_id)
    except CourseError as exc:
        raise to_http(exc) from None
    return StudentDetailOut(
        student=StudentOut.of(d.student, d.course),
        progress=CourseProgressOut.of(
            d.course,
            current_phase=d.student.current_phase,
            awaiting_approval_phase=d.student.awaiting_approval_phase,
            with_weeks=False,
        ),
        records=[ProgressOut.of(r) for r in d.records],
        submissions=[SubmissionOut.of(s) for s in d.submissions],
        certificate=CertificateOut.of(d.certificate) if d.certificate else None,
    )


@router.post(
    "/students/{student_id}/approve-phase/{phase_id}",
    response_model=ApprovalOut,
)
async def approve_phase(
    student_id: UUID,
    phase_id: UUID,
    principal: AdminPrincipal,
    store: StoreDep,
) -> ApprovalOut:
    try:
        user, cert = await unlock_evaluator.approve_phase(store, principal, student_id, phase_id)
    except CourseError as exc:
        raise to_http(exc) from None
    return ApprovalOut(
        user=UserOut.of(user),
        certificate=CertificateOut.of(cert) if cert else None,
    )


# --- Submissions ------------------------------------------------------------


@router.get("/submissions", response_model=SubmissionPage)
async def list_submissions(
    principal: AdminPrincipal,
    store: StoreDep,
    status_: Annotated[
        Literal["submitted", "reviewed", "approved", "rejected"] | None,
        Query(alias="status"),
    ] = None,
    type_: Annotated[Literal["quiz", "assignment"] | None, Query(alias="type")] = None,
    page: Page = 1,
    limit: Limit = 20,
) -> SubmissionPage:
    try:
        items, total = await dashboard_service.list_submissions(
            store, principal, status=status_, type=type_, page=page, limit=limit
        )
    except CourseError as exc:
        raise to_http(exc) from None
    return SubmissionPage(
        items=[SubmissionOut.of(s) for s in items], total=total, page=page, limit=limit
    )


@router.put("/submissions/{submission_id}/review", response_model=SubmissionOut)
async def review_submission(
    submission_id: UUID,
    payload: ReviewIn,
    principal: AdminPrincipal,
    store: StoreDep,
) -> SubmissionOut:
    try:
        sub = await scoring.review_submission(
            store,
            principal,
            submission_id,
            score=payload.score,
            status=payload.status,
            feedback=payload.feedback,
        )
    except CourseError as exc:
        raise to_http(exc) from None
    return SubmissionOut.of(sub)


@router.delete("/submissions/{submission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_submission(
    submission_id: UUID, principal: AdminPrincipal, store: StoreDep
) -> Response:
    try:
        await scoring.delete_submission(store, principal, submission_id)
    except CourseError as exc:
        raise to_http(exc) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Course structure -------------------------------------------------------


@router.put("/phases/{phase_id}", response_model=PhaseOut)
async def update_phase(
    phase_id: UUID,
    payload: PhaseUpdateIn,
    principal: AdminPrincipal,
    store: StoreDep,
) -> PhaseOut:
    try:
        phase = await content_service.update_phase(
            store, principal, phase_id, title=payload.title, description=payload.description
        )
    except CourseError as exc:
        raise to_http(exc) from None
    return PhaseOut.of(phase)


@router.post("/weeks", response_model=WeekOut, status_code=status.HTTP_201_CREATED)
async def create_week(payload: WeekCreateIn, principal: AdminPrincipal, store: StoreDep) -> WeekOut:
    try:
        week = await content_service.create_week(store, principal, **payload.model_dump())
    except CourseError as exc:
        raise to_http(exc) from None
    return WeekOut.of(week)


@router.put("/weeks/{week_id}", response_model=WeekOut)
async def update_week(
    week_id: UUID,
    payload: WeekUpdateIn,
    principal: AdminPrincipal,
    store: StoreDep,
) -> WeekOut:
    try:
        week = await content_service.update_week(store, principal, week_id, **payload.model_dump())
    except CourseError as exc:
        raise to_http(exc) from None
    return WeekOut.of(week)


@router.delete("/weeks/{week_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_week(week_id: UUID, principal: AdminPrincipal, store: StoreDep) -> Response:
    try:
        await content_service.delete_week(store, principal, week_id)
    except CourseError as exc:
        raise to_http(exc) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Week content -----------------------------------------------------------


@router.get("/weeks/{week_id}/content", response_model=ContentOut)
async def get_content(week_id: UUID, principal: AdminPrincipal, store: StoreDep) -> ContentOut:
    try:
        content = await content_service.get_content(store, principal, week_id)
    except CourseError as exc:
        raise to_http(exc) from None
    return ContentOut.of(content, reveal_answers=True)


@router.put("/weeks/{week_id}/content", response_model=ContentOut)
async def put_content(
    week_id: UUID,
    payload: ContentIn,
    principal: AdminPrincipal,
    store: StoreDep,
) -> ContentOut:
    try:
        content = await content_service.put_content(
            store,
            principal,
            week_id,
            blocks=tuple(to_domain(b) for b in payload.blocks),
            is_published=payload.is_published,
        )
    except CourseError as exc:
        raise to_http(exc) from None
    return ContentOut.of(content, reveal_answers=True)


@router.delete("/weeks/{week_id}/content", status_code=status.HTTP_204_NO_CONTENT)
async def delete_content(week_id: UUID, principal: AdminPrincipal, store: StoreDep) -> Response:
    try:
        await content_service.delete_content(store, principal, week_id)
    except CourseError as exc:
        raise to_http(exc) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)

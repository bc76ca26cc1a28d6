"""Student endpoints: the dashboard, week work and unlock checks.

Every handler is a thin shell around one service call.  The caller is always
the student the data belongs to; ids of other students never appear in these
paths.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from app.api.auth import UserOut
from app.api.dependencies import StoreDep, StudentPrincipal
from app.api.errors import to_http
from app.api.views import (
    CertificateOut,
    ContentOut,
    CourseProgressOut,
    PhaseOut,
    PhaseProgressOut,
    ProgressOut,
    SubmissionOut,
    WeekOut,
)
from app.core.errors import CourseError
from app.services import (
    certificate_service,
    content_service,
    dashboard_service,
    progress_service,
    scoring,
    unlock_evaluator,
)
from app.services.progress_aggregator import display_percent

router = APIRouter(prefix="/v1/student", tags=["student"])


# --- Schemas --------------------------------------------------------------


class VideoProgressIn(BaseModel):
    played_fraction: float


class QuizIn(BaseModel):
    answers: list[int]


class AssignmentIn(BaseModel):
    github_url: str | None = None
    file_name: str | None = None
    description: str | None = Field(default=None, max_length=5000)


class DashboardOut(BaseModel):
    user: UserOut
    progress: CourseProgressOut
    recent_submissions: list[SubmissionOut]
    certificate: CertificateOut | None = None


class WeekDetailOut(BaseModel):
    week: WeekOut
    phase: PhaseOut
    content: ContentOut | None = None
    progress: ProgressOut | None = None
    submissions: list[SubmissionOut]


class UnlockOut(BaseModel):
    outcome: str
    current_phase: int
    awaiting_approval_phase: int | None = None
    needs_approval: bool
    advanced_to: list[int]
    overall_percent: int
    certificate: CertificateOut | None = None


# --- Dashboard and week view ------------------------------------------------


@router.get("/dashboard", response_model=DashboardOut)
async def dashboard(principal: StudentPrincipal, store: StoreDep) -> DashboardOut:
    try:
        d = await dashboard_service.student_dashboard(store, principal)
    except CourseError as exc:
        raise to_http(exc) from None
    return DashboardOut(
        user=UserOut.of(d.student),
        progress=CourseProgressOut.of(
            d.course,
            current_phase=d.student.current_phase,
            awaiting_approval_phase=d.student.awaiting_approval_phase,
        ),
        recent_submissions=[SubmissionOut.of(s) for s in d.recent_submissions],
        certificate=CertificateOut.of(d.certificate) if d.certificate else None,
    )


@router.get("/weeks/{week_id}", response_model=WeekDetailOut)
async def get_week(week_id: UUID, principal: StudentPrincipal, store: StoreDep) -> WeekDetailOut:
    try:
        d = await content_service.week_detail(store, principal, week_id)
    except CourseError as exc:
        raise to_http(exc) from None
    return WeekDetailOut(
        week=WeekOut.of(d.week),
        phase=PhaseOut.of(d.phase),
        content=ContentOut.of(d.content, reveal_answers=False) if d.content else None,
        progress=ProgressOut.of(d.record) if d.record else None,
        submissions=[SubmissionOut.of(s) for s in d.submissions],
    )


# --- Learning events ------------------------------------------------------


@router.put("/weeks/{week_id}/video-progress", response_model=ProgressOut)
async def video_progress(
    week_id: UUID,
    payload: VideoProgressIn,
    principal: StudentPrincipal,
    store: StoreDep,
) -> ProgressOut:
    try:
        record = await scoring.record_video_watch(
            store, principal, week_id, payload.played_fraction
        )
    except CourseError as exc:
        raise to_http(exc) from None
    return ProgressOut.of(record)


@router.post(
    "/weeks/{week_id}/quiz",
    response_model=SubmissionOut,
    status_code=status.HTTP_201_CREATED,
)
async def submit_quiz(
    week_id: UUID,
    payload: QuizIn,
    principal: StudentPrincipal,
    store: StoreDep,
) -> SubmissionOut:
    try:
        sub = await scoring.submit_quiz(store, principal, week_id, payload.answers)
    except CourseError as exc:
        raise to_http(exc) from None
    return SubmissionOut.of(sub)


@router.get("/weeks/{week_id}/quiz", response_model=SubmissionOut)
async def get_quiz(week_id: UUID, principal: StudentPrincipal, store: StoreDep) -> SubmissionOut:
    try:
        sub = await scoring.get_quiz_submission(store, principal, week_id)
    except CourseError as exc:
        raise to_http(exc) from None
    return SubmissionOut.of(sub)


@router.post(
    "/weeks/{week_id}/assignment",
    response_model=SubmissionOut,
    status_code=status.HTTP_201_CREATED,
)
async def submit_assignment(
    week_id: UUID,
    payload: AssignmentIn,
    principal: StudentPrincipal,
    store: StoreDep,
) -> SubmissionOut:
    try:
        sub = await scoring.submit_assignment(
            store,
            principal,
            week_id,
            github_url=payload.github_url,
            file_name=payload.file_name,
            description=payload.description,
        )
    except CourseError as exc:
        raise to_http(exc) from None
    return SubmissionOut.of(sub)


@router.delete("/submissions/{submission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_submission(
    submission_id: UUID, principal: StudentPrincipal, store: StoreDep
) -> Response:
    try:
        await scoring.delete_submission(store, principal, submission_id)
    except CourseError as exc:
        raise to_http(exc) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Progress and unlocking -------------------------------------------------


@router.get("/progress-summary", response_model=CourseProgressOut)
async def progress_summary(principal: StudentPrincipal, store: StoreDep) -> CourseProgressOut:
    try:
        student, course = await progress_service.progress_summary(store, principal, principal.id)
    except CourseError as exc:
        raise to_http(exc) from None
    return CourseProgressOut.of(
        course,
        current_phase=student.current_phase,
        awaiting_approval_phase=student.awaiting_approval_phase,
        with_weeks=False,
    )


@router.get("/phases/{phase_id}/progress", response_model=PhaseProgressOut)
async def phase_progress(
    phase_id: UUID, principal: StudentPrincipal, store: StoreDep
) -> PhaseProgressOut:
    try:
        student, summary = await progress_service.phase_progress(
            store, principal, principal.id, phase_id
        )
    except CourseError as exc:
        raise to_http(exc) from None
    return PhaseProgressOut.of(summary, current_phase=student.current_phase)


@router.post("/check-unlock", response_model=UnlockOut)
async def check_unlock(principal: StudentPrincipal, store: StoreDep) -> UnlockOut:
    try:
        result = await unlock_evaluator.check_unlock(store, principal)
    except CourseError as exc:
        raise to_http(exc) from None
    d = result.decision
    return UnlockOut(
        outcome=d.outcome,
        current_phase=d.current_phase,
        awaiting_approval_phase=d.awaiting_approval_phase,
        needs_approval=d.needs_approval,
        advanced_to=list(d.advanced_to),
        overall_percent=display_percent(result.course.percent),
        certificate=CertificateOut.of(result.certificate) if result.certificate else None,
    )


@router.get("/certificate", response_model=CertificateOut)
async def certificate(principal: StudentPrincipal, store: StoreDep) -> CertificateOut:
    try:
        cert = await certificate_service.get_certificate(store, principal, principal.id)
    except CourseError as exc:
        raise to_http(exc) from None
    return CertificateOut.of(cert)

"""Pydantic schemas shared by the student and admin routers.

Request bodies for week content are a discriminated union on ``kind``, so a
malformed block is rejected by FastAPI with a 422 before any service runs.
Responses are built from domain objects through the ``*Out.of`` helpers;
percentages in responses are display-rounded integers.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from app.api.auth import UserOut
from app.models.certificate import Certificate
from app.models.content import ContentBlock, WeekContent, block_from_dict, block_to_dict
from app.models.course import Phase, Week
from app.models.progress import ProgressRecord
from app.models.submission import Submission
from app.models.user import User
from app.services.progress_aggregator import (
    CourseProgress,
    PhaseProgress,
    WeekProgress,
    display_percent,
)
from app.services.unlock_evaluator import is_phase_unlocked

# ---------------------------------------------------------------------------
# Week content (input)
# ---------------------------------------------------------------------------


class InstructionsBlock(BaseModel):
    kind: Literal["instructions"]
    text: str


class NotesBlock(BaseModel):
    kind: Literal["notes"]
    text: str


class VideoIn(BaseModel):
    title: str
    url: str = Field(min_length=1)
    duration_seconds: int = Field(default=0, ge=0)


class VideosBlock(BaseModel):
    kind: Literal["videos"]
    videos: list[VideoIn]


class QuizQuestionIn(BaseModel):
    prompt: str
    options: list[str] = Field(min_length=2)
    correct_answer: int = Field(ge=0)


class QuizBlock(BaseModel):
    kind: Literal["quiz"]
    questions: list[QuizQuestionIn] = Field(min_length=1)


class AssignmentBlock(BaseModel):
    kind: Literal["assignment"]
    description: str
    deadline: datetime | None = None
    grading_criteria: str = ""


class ResourceIn(BaseModel):
    title: str
    url: str


class ResourcesBlock(BaseModel):
    kind: Literal["resources"]
    resources: list[ResourceIn]


BlockIn = Annotated[
    InstructionsBlock | NotesBlock | VideosBlock | QuizBlock | AssignmentBlock | ResourcesBlock,
    Field(discriminator="kind"),
]


def to_domain(block: BlockIn) -> ContentBlock:
    return block_from_dict(block.model_dump(mode="json"))


def blocks_out(blocks: tuple[ContentBlock, ...], *, reveal_answers: bool) -> list[dict[str, Any]]:
    out = []
    for b in blocks:
        data = block_to_dict(b)
        if data["kind"] == "quiz" and not reveal_answers:
            data["questions"] = [
                {k: v for k, v in q.items() if k != "correct_answer"} for q in data["questions"]
            ]
        out.append(data)
    return out


class ContentOut(BaseModel):
    week_id: str
    is_published: bool
    updated_at: int
    blocks: list[dict[str, Any]]

    @classmethod
    def of(cls, content: WeekContent, *, reveal_answers: bool) -> ContentOut:
        return cls(
            week_id=str(content.week_id),
            is_published=content.is_published,
            updated_at=content.updated_at,
            blocks=blocks_out(content.blocks, reveal_answers=reveal_answers),
        )


# ---------------------------------------------------------------------------
# Course structure
# ---------------------------------------------------------------------------


class PhaseOut(BaseModel):
    id: str
    number: int
    title: str
    description: str
    start_week: int
    end_week: int

    @classmethod
    def of(cls, p: Phase) -> PhaseOut:
        return cls(
            id=str(p.id),
            number=p.number,
            title=p.title,
            description=p.description,
            start_week=p.start_week,
            end_week=p.end_week,
        )


class WeekOut(BaseModel):
    id: str
    phase_id: str
    week_number: int
    title: str
    description: str
    video_points: int
    assignment_points: int
    max_points: int

    @classmethod
    def of(cls, w: Week) -> WeekOut:
        return cls(
            id=str(w.id),
            phase_id=str(w.phase_id),
            week_number=w.week_number,
            title=w.title,
            description=w.description,
            video_points=w.video_points,
            assignment_points=w.assignment_points,
            max_points=w.max_points,
        )


# ---------------------------------------------------------------------------
# Student state
# ---------------------------------------------------------------------------


class ProgressOut(BaseModel):
    student_id: str
    week_id: str
    video_watched: bool
    video_progress: int
    video_points: int
    assignment_submitted: bool
    assignment_points: int
    points: int
    completed: bool
    video_watched_at: int | None = None
    completed_at: int | None = None

    @classmethod
    def of(cls, r: ProgressRecord) -> ProgressOut:
        return cls(
            student_id=str(r.student_id),
            week_id=str(r.week_id),
            video_watched=r.video_watched,
            video_progress=r.video_progress,
            video_points=r.video_points,
            assignment_submitted=r.assignment_submitted,
            assignment_points=r.assignment_points,
            points=r.points,
            completed=r.completed,
            video_watched_at=r.video_watched_at,
            completed_at=r.completed_at,
        )


class SubmissionOut(BaseModel):
    id: str
    week_id: str
    student_id: str
    type: str
    status: str
    submitted_at: int
    score: int | None = None
    feedback: str | None = None
    answers: list[int] = []
    total_questions: int | None = None
    github_url: str | None = None
    file_name: str | None = None
    description: str | None = None
    is_on_time: bool = True
    reviewed_at: int | None = None

    @classmethod
    def of(cls, s: Submission) -> SubmissionOut:
        return cls(
            id=str(s.id),
            week_id=str(s.week_id),
            student_id=str(s.student_id),
            type=s.type,
            status=s.status,
            submitted_at=s.submitted_at,
            score=s.score,
            feedback=s.feedback,
            answers=list(s.answers),
            total_questions=s.total_questions,
            github_url=s.github_url,
            file_name=s.file_name,
            description=s.description,
            is_on_time=s.is_on_time,
            reviewed_at=s.reviewed_at,
        )


class CertificateOut(BaseModel):
    id: str
    student_id: str
    certificate_code: str
    issued_at: int

    @classmethod
    def of(cls, c: Certificate) -> CertificateOut:
        return cls(
            id=str(c.id),
            student_id=str(c.student_id),
            certificate_code=c.certificate_code,
            issued_at=c.issued_at,
        )


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


class WeekProgressOut(BaseModel):
    week: WeekOut
    points: int
    percent: int
    completed: bool
    is_locked: bool
    progress: ProgressOut | None = None

    @classmethod
    def of(cls, wp: WeekProgress, *, unlocked: bool) -> WeekProgressOut:
        return cls(
            week=WeekOut.of(wp.week),
            points=wp.earned_points,
            percent=display_percent(wp.percent),
            completed=wp.completed,
            is_locked=not unlocked,
            progress=ProgressOut.of(wp.record) if wp.record is not None else None,
        )


class PhaseProgressOut(BaseModel):
    phase: PhaseOut
    total_weeks: int
    completed_weeks: int
    earned_points: int
    possible_points: int
    percent: int
    is_completed: bool
    is_unlocked: bool
    weeks: list[WeekProgressOut] = []

    @classmethod
    def of(
        cls, pp: PhaseProgress, *, current_phase: int, with_weeks: bool = True
    ) -> PhaseProgressOut:
        unlocked = is_phase_unlocked(pp.phase.number, current_phase)
        return cls(
            phase=PhaseOut.of(pp.phase),
            total_weeks=len(pp.weeks),
            completed_weeks=pp.completed_weeks,
            earned_points=pp.earned_points,
            possible_points=pp.possible_points,
            percent=display_percent(pp.percent),
            is_completed=pp.is_completed,
            is_unlocked=unlocked,
            weeks=[WeekProgressOut.of(w, unlocked=unlocked) for w in pp.weeks]
            if with_weeks
            else [],
        )


class CourseProgressOut(BaseModel):
    current_phase: int
    awaiting_approval_phase: int | None = None
    earned_points: int
    possible_points: int
    overall_percent: int
    phases: list[PhaseProgressOut]

    @classmethod
    def of(
        cls,
        course: CourseProgress,
        *,
        current_phase: int,
        awaiting_approval_phase: int | None,
        with_weeks: bool = True,
    ) -> CourseProgressOut:
        return cls(
            current_phase=current_phase,
            awaiting_approval_phase=awaiting_approval_phase,
            earned_points=course.earned_points,
            possible_points=course.possible_points,
            overall_percent=display_percent(course.percent),
            phases=[
                PhaseProgressOut.of(p, current_phase=current_phase, with_weeks=with_weeks)
                for p in course.phases
            ],
        )


class StudentOut(BaseModel):
    user: UserOut
    is_active: bool
    earned_points: int
    overall_percent: int

    @classmethod
    def of(cls, user: User, course: CourseProgress) -> StudentOut:
        return cls(
            user=UserOut.of(user),
            is_active=user.is_active,
            earned_points=course.earned_points,
            overall_percent=display_percent(course.percent),
        )

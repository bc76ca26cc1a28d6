from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from uuid import UUID, uuid4

SubmissionType = Literal["quiz", "assignment"]
SubmissionStatus = Literal["submitted", "reviewed", "approved", "rejected"]

REVIEW_STATUSES: frozenset[str] = frozenset({"reviewed", "approved", "rejected"})
# review outcomes that award assignment points
ACCEPTED_STATUSES: frozenset[str] = frozenset({"reviewed", "approved"})


@dataclass(frozen=True, slots=True)
class Submission:
    id: UUID
    week_id: UUID
    student_id: UUID
    type: SubmissionType
    submitted_at: int
    status: SubmissionStatus = "submitted"
    score: int | None = None
    feedback: str | None = None
    # quiz
    answers: tuple[int, ...] = ()
    total_questions: int | None = None
    # assignment
    github_url: str | None = None
    file_name: str | None = None
    description: str | None = None
    is_on_time: bool = True
    # review
    reviewed_at: int | None = None
    reviewed_by: UUID | None = None

    @staticmethod
    def new_quiz(
        *,
        week_id: UUID,
        student_id: UUID,
        answers: tuple[int, ...],
        score: int,
        total_questions: int,
        submitted_at: int,
    ) -> Submission:
        return Submission(
            id=uuid4(),
            week_id=week_id,
            student_id=student_id,
            type="quiz",
            submitted_at=submitted_at,
            answers=answers,
            score=score,
            total_questions=total_questions,
        )

    @staticmethod
    def new_assignment(
        *,
        week_id: UUID,
        student_id: UUID,
        submitted_at: int,
        github_url: str | None = None,
        file_name: str | None = None,
        description: str | None = None,
        is_on_time: bool = True,
    ) -> Submission:
        return Submission(
            id=uuid4(),
            week_id=week_id,
            student_id=student_id,
            type="assignment",
            submitted_at=submitted_at,
            github_url=github_url,
            file_name=file_name,
            description=description,
            is_on_time=is_on_time,
        )

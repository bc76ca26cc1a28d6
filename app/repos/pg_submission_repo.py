"""PostgreSQL implementation of SubmissionRepo."""

from __future__ import annotations

from collections.abc import Callable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.engine import insert_unique
from app.db.tables import SubmissionRow
from app.models.submission import Submission


class PgSubmissionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, submission: Submission) -> None:
        row = SubmissionRow(id=submission.id)
        _apply(row, submission)
        # uq_submissions_one_quiz only covers type = 'quiz'.
        await insert_unique(self._session, row, "quiz already submitted")

    async def get(self, submission_id: UUID) -> Submission | None:
        row = await self._session.get(SubmissionRow, submission_id)
        return _row_to_submission(row) if row is not None else None

    async def list(
        self,
        *,
        student_id: UUID | None = None,
        week_id: UUID | None = None,
        type: str | None = None,
        status: str | None = None,
    ) -> list[Submission]:
        stmt = select(SubmissionRow).order_by(SubmissionRow.submitted_at.desc())
        if student_id is not None:
            stmt = stmt.where(SubmissionRow.student_id == student_id)
        if week_id is not None:
            stmt = stmt.where(SubmissionRow.week_id == week_id)
        if type is not None:
            stmt = stmt.where(SubmissionRow.type == type)
        if status is not None:
            stmt = stmt.where(SubmissionRow.status == status)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_submission(r) for r in rows]

    async def update(
        self, submission_id: UUID, mutate: Callable[[Submission], Submission]
    ) -> Submission | None:
        row = await self._locked(submission_id)
        if row is None:
            return None
        updated = mutate(_row_to_submission(row))
        _apply(row, updated)
        await self._session.flush()
        return updated

    async def delete(
        self, submission_id: UUID, guard: Callable[[Submission], None]
    ) -> Submission | None:
        row = await self._locked(submission_id)
        if row is None:
            return None
        current = _row_to_submission(row)
        guard(current)
        await self._session.delete(row)
        await self._session.flush()
        return current

    async def _locked(self, submission_id: UUID) -> SubmissionRow | None:
        stmt = (
            select(SubmissionRow)
            .where(SubmissionRow.id == submission_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()


def _apply(row: SubmissionRow, s: Submission) -> None:
    row.week_id = s.week_id
    row.student_id = s.student_id
    row.type = s.type
    row.status = s.status
    row.submitted_at = s.submitted_at
    row.score = s.score
    row.feedback = s.feedback
    row.answers = list(s.answers)
    row.total_questions = s.total_questions
    row.github_url = s.github_url
    row.file_name = s.file_name
    row.description = s.description
    row.is_on_time = s.is_on_time
    row.reviewed_at = s.reviewed_at
    row.reviewed_by = s.reviewed_by


def _row_to_submission(row: SubmissionRow) -> Submission:
    return Submission(
        id=row.id,
        week_id=row.week_id,
        student_id=row.student_id,
        type=row.type,  # type: ignore[arg-type]
        submitted_at=row.submitted_at,
        status=row.status,  # type: ignore[arg-type]
        score=row.score,
        feedback=row.feedback,
        answers=tuple(row.answers or ()),
        total_questions=row.total_questions,
        github_url=row.github_url,
        file_name=row.file_name,
        description=row.description,
        is_on_time=row.is_on_time,
        reviewed_at=row.reviewed_at,
        reviewed_by=row.reviewed_by,
    )

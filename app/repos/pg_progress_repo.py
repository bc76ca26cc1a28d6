"""PostgreSQL implementation of ProgressRepo.

``update`` is the only write path.  It makes sure the row exists
(``INSERT ... ON CONFLICT DO NOTHING``), then re-reads it ``FOR UPDATE`` so
concurrent writers of the same student-week queue behind each other until
the request transaction commits.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.tables import ProgressRecordRow
from app.models.progress import ProgressRecord
from app.repos.progress_repo import ProgressMutation


class PgProgressRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, student_id: UUID, week_id: UUID) -> ProgressRecord | None:
        row = await self._session.get(ProgressRecordRow, (student_id, week_id))
        return _row_to_record(row) if row is not None else None

    async def list_for_student(self, student_id: UUID) -> list[ProgressRecord]:
        stmt = select(ProgressRecordRow).where(
            ProgressRecordRow.student_id == student_id
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_record(r) for r in rows]

    async def list_for_week(self, week_id: UUID) -> list[ProgressRecord]:
        stmt = select(ProgressRecordRow).where(ProgressRecordRow.week_id == week_id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_record(r) for r in rows]

    async def update(
        self, student_id: UUID, week_id: UUID, mutate: ProgressMutation
    ) -> ProgressRecord:
        await self._session.execute(
            pg_insert(ProgressRecordRow)
            .values(student_id=student_id, week_id=week_id)
            .on_conflict_do_nothing(index_elements=["student_id", "week_id"])
        )
        stmt = (
            select(ProgressRecordRow)
            .where(
                ProgressRecordRow.student_id == student_id,
                ProgressRecordRow.week_id == week_id,
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        row = (await self._session.execute(stmt)).scalar_one()
        updated = mutate(_row_to_record(row))

        row.video_watched = updated.video_watched
        row.video_progress = updated.video_progress
        row.video_points = updated.video_points
        row.assignment_submitted = updated.assignment_submitted
        row.assignment_points = updated.assignment_points
        row.points = updated.points
        row.completed = updated.completed
        row.is_locked = updated.is_locked
        row.video_watched_at = updated.video_watched_at
        row.completed_at = updated.completed_at
        await self._session.flush()
        return updated


def _row_to_record(row: ProgressRecordRow) -> ProgressRecord:
    return ProgressRecord(
        student_id=row.student_id,
        week_id=row.week_id,
        video_watched=row.video_watched,
        video_progress=row.video_progress,
        video_points=row.video_points,
        assignment_submitted=row.assignment_submitted,
        assignment_points=row.assignment_points,
        points=row.points,
        completed=row.completed,
        is_locked=row.is_locked,
        video_watched_at=row.video_watched_at,
        completed_at=row.completed_at,
    )

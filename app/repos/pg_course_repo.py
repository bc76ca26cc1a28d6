"""PostgreSQL implementation of CourseRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.engine import insert_unique
from app.db.tables import PhaseRow, WeekContentRow, WeekRow
from app.models.content import WeekContent, block_from_dict, block_to_dict
from app.models.course import Phase, Week

WEEK_NUMBER_TAKEN = "week number already exists in this phase"


class PgCourseRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # --- phases ---

    async def list_phases(self) -> list[Phase]:
        rows = (
            (await self._session.execute(select(PhaseRow).order_by(PhaseRow.number)))
            .scalars()
            .all()
        )
        return [_row_to_phase(r) for r in rows]

    async def get_phase(self, phase_id: UUID) -> Phase | None:
        row = await self._session.get(PhaseRow, phase_id)
        return _row_to_phase(row) if row is not None else None

    async def get_phase_by_number(self, number: int) -> Phase | None:
        stmt = select(PhaseRow).where(PhaseRow.number == number)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_phase(row) if row is not None else None

    async def add_phase(self, phase: Phase) -> None:
        row = PhaseRow(
            id=phase.id,
            number=phase.number,
            title=phase.title,
            description=phase.description,
            start_week=phase.start_week,
            end_week=phase.end_week,
        )
        await insert_unique(self._session, row, "phase number already exists")

    async def update_phase(self, phase: Phase) -> None:
        row = await self._session.get(PhaseRow, phase.id)
        if row is None:
            raise KeyError("phase not found")
        row.title = phase.title
        row.description = phase.description
        row.start_week = phase.start_week
        row.end_week = phase.end_week
        await self._session.flush()

    # --- weeks ---

    async def list_weeks(self, phase_id: UUID | None = None) -> list[Week]:
        stmt = select(WeekRow).order_by(WeekRow.week_number)
        if phase_id is not None:
            stmt = stmt.where(WeekRow.phase_id == phase_id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_week(r) for r in rows]

    async def get_week(self, week_id: UUID) -> Week | None:
        row = await self._session.get(WeekRow, week_id)
        return _row_to_week(row) if row is not None else None

    async def add_week(self, week: Week) -> None:
        row = WeekRow(id=week.id)
        _apply_week(row, week)
        await insert_unique(self._session, row, WEEK_NUMBER_TAKEN)

    async def update_week(self, week: Week) -> None:
        row = await self._session.get(WeekRow, week.id)
        if row is None:
            raise KeyError("week not found")
        await self._check_number_free(week)
        _apply_week(row, week)
        await self._session.flush()

    async def delete_week(self, week_id: UUID) -> bool:
        await self._session.execute(
            delete(WeekContentRow).where(WeekContentRow.week_id == week_id)
        )
        result = await self._session.execute(
            delete(WeekRow).where(WeekRow.id == week_id)
        )
        return result.rowcount > 0

    async def _check_number_free(self, week: Week) -> None:
        stmt = select(WeekRow.id).where(
            WeekRow.phase_id == week.phase_id,
            WeekRow.week_number == week.week_number,
            WeekRow.id != week.id,
        )
        if (await self._session.execute(stmt)).first() is not None:
            raise ValueError(WEEK_NUMBER_TAKEN)

    # --- content ---

    async def get_content(self, week_id: UUID) -> WeekContent | None:
        row = await self._session.get(WeekContentRow, week_id)
        if row is None:
            return None
        return WeekContent(
            week_id=row.week_id,
            blocks=tuple(block_from_dict(b) for b in row.blocks),
            is_published=row.is_published,
            updated_at=row.updated_at,
        )

    async def put_content(self, content: WeekContent) -> None:
        if await self._session.get(WeekRow, content.week_id) is None:
            raise KeyError("week not found")
        row = await self._session.get(WeekContentRow, content.week_id)
        if row is None:
            row = WeekContentRow(week_id=content.week_id)
            self._session.add(row)
        row.blocks = [block_to_dict(b) for b in content.blocks]
        row.is_published = content.is_published
        row.updated_at = content.updated_at
        await self._session.flush()

    async def delete_content(self, week_id: UUID) -> bool:
        result = await self._session.execute(
            delete(WeekContentRow).where(WeekContentRow.week_id == week_id)
        )
        return result.rowcount > 0


def _apply_week(row: WeekRow, week: Week) -> None:
    row.phase_id = week.phase_id
    row.week_number = week.week_number
    row.title = week.title
    row.description = week.description
    row.video_points = week.video_points
    row.assignment_points = week.assignment_points


def _row_to_phase(row: PhaseRow) -> Phase:
    return Phase(
        id=row.id,
        number=row.number,
        title=row.title,
        start_week=row.start_week,
        end_week=row.end_week,
        description=row.description or "",
    )


def _row_to_week(row: WeekRow) -> Week:
    return Week(
        id=row.id,
        phase_id=row.phase_id,
        week_number=row.week_number,
        title=row.title,
        description=row.description or "",
        video_points=row.video_points,
        assignment_points=row.assignment_points,
    )

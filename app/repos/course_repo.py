from __future__ import annotations

from typing import Protocol
from uuid import UUID

from app.models.content import WeekContent
from app.models.course import Phase, Week


class CourseRepo(Protocol):
    async def list_phases(self) -> list[Phase]: ...
    async def get_phase(self, phase_id: UUID) -> Phase | None: ...
    async def get_phase_by_number(self, number: int) -> Phase | None: ...
    async def add_phase(self, phase: Phase) -> None: ...
    async def update_phase(self, phase: Phase) -> None: ...
    async def list_weeks(self, phase_id: UUID | None = None) -> list[Week]: ...
    async def get_week(self, week_id: UUID) -> Week | None: ...
    async def add_week(self, week: Week) -> None: ...
    async def update_week(self, week: Week) -> None: ...
    async def delete_week(self, week_id: UUID) -> bool: ...
    async def get_content(self, week_id: UUID) -> WeekContent | None: ...
    async def put_content(self, content: WeekContent) -> None: ...
    async def delete_content(self, week_id: UUID) -> bool: ...


class InMemoryCourseRepo:
    def __init__(self) -> None:
        self._phases: dict[UUID, Phase] = {}
        self._weeks: dict[UUID, Week] = {}
        self._contents: dict[UUID, WeekContent] = {}

    # --- phases ---

    async def list_phases(self) -> list[Phase]:
        return sorted(self._phases.values(), key=lambda p: p.number)

    async def get_phase(self, phase_id: UUID) -> Phase | None:
        return self._phases.get(phase_id)

    async def get_phase_by_number(self, number: int) -> Phase | None:
        for p in self._phases.values():
            if p.number == number:
                return p
        return None

    async def add_phase(self, phase: Phase) -> None:
        if await self.get_phase_by_number(phase.number) is not None:
            raise ValueError("phase number already exists")
        self._phases[phase.id] = phase

    async def update_phase(self, phase: Phase) -> None:
        if phase.id not in self._phases:
            raise KeyError("phase not found")
        self._phases[phase.id] = phase

    # --- weeks ---

    async def list_weeks(self, phase_id: UUID | None = None) -> list[Week]:
        weeks = [
            w for w in self._weeks.values() if phase_id is None or w.phase_id == phase_id
        ]
        return sorted(weeks, key=lambda w: w.week_number)

    async def get_week(self, week_id: UUID) -> Week | None:
        return self._weeks.get(week_id)

    async def add_week(self, week: Week) -> None:
        self._check_number_free(week)
        self._weeks[week.id] = week

    async def update_week(self, week: Week) -> None:
        if week.id not in self._weeks:
            raise KeyError("week not found")
        self._check_number_free(week)
        self._weeks[week.id] = week

    async def delete_week(self, week_id: UUID) -> bool:
        self._contents.pop(week_id, None)
        return self._weeks.pop(week_id, None) is not None

    def _check_number_free(self, week: Week) -> None:
        for w in self._weeks.values():
            if (
                w.id != week.id
                and w.phase_id == week.phase_id
                and w.week_number == week.week_number
            ):
                raise ValueError("week number already exists in this phase")

    # --- content ---

    async def get_content(self, week_id: UUID) -> WeekContent | None:
        return self._contents.get(week_id)

    async def put_content(self, content: WeekContent) -> None:
        if content.week_id not in self._weeks:
            raise KeyError("week not found")
        self._contents[content.week_id] = content

    async def delete_content(self, week_id: UUID) -> bool:
        return self._contents.pop(week_id, None) is not None

    def clear(self) -> None:
        self._phases.clear()
        self._weeks.clear()
        self._contents.clear()

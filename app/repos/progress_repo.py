from __future__ import annotations

from collections.abc import Callable
from typing import Protocol
from uuid import UUID

from app.models.progress import ProgressRecord
from app.repos.locks import KeyedLocks

ProgressMutation = Callable[[ProgressRecord], ProgressRecord]


class ProgressRepo(Protocol):
    async def get(self, student_id: UUID, week_id: UUID) -> ProgressRecord | None: ...
    async def list_for_student(self, student_id: UUID) -> list[ProgressRecord]: ...
    async def list_for_week(self, week_id: UUID) -> list[ProgressRecord]: ...
    async def update(
        self, student_id: UUID, week_id: UUID, mutate: ProgressMutation
    ) -> ProgressRecord: ...


class InMemoryProgressRepo:
    def __init__(self) -> None:
        self._records: dict[tuple[UUID, UUID], ProgressRecord] = {}
        self._locks = KeyedLocks()

    async def get(self, student_id: UUID, week_id: UUID) -> ProgressRecord | None:
        return self._records.get((student_id, week_id))

    async def list_for_student(self, student_id: UUID) -> list[ProgressRecord]:
        return [r for (sid, _), r in self._records.items() if sid == student_id]

    async def list_for_week(self, week_id: UUID) -> list[ProgressRecord]:
        return [r for (_, wid), r in self._records.items() if wid == week_id]

    async def update(
        self, student_id: UUID, week_id: UUID, mutate: ProgressMutation
    ) -> ProgressRecord:
        """Atomically read-modify-write one student-week record.

        The record is created empty on first touch.  *mutate* always sees the
        latest stored state; if it raises, nothing is written.
        """
        key = (student_id, week_id)
        with self._locks.hold(key):
            current = self._records.get(key) or ProgressRecord.new(
                student_id=student_id, week_id=week_id
            )
            updated = mutate(current)
            self._records[key] = updated
            return updated

    def clear(self) -> None:
        self._records.clear()

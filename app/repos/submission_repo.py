from __future__ import annotations

from collections.abc import Callable
from typing import Protocol
from uuid import UUID

from app.models.submission import Submission
from app.repos.locks import KeyedLocks


class SubmissionRepo(Protocol):
    async def add(self, submission: Submission) -> None: ...
    async def get(self, submission_id: UUID) -> Submission | None: ...
    async def list(
        self,
        *,
        student_id: UUID | None = None,
        week_id: UUID | None = None,
        type: str | None = None,
        status: str | None = None,
    ) -> list[Submission]: ...
    async def update(
        self, submission_id: UUID, mutate: Callable[[Submission], Submission]
    ) -> Submission | None: ...
    async def delete(
        self, submission_id: UUID, guard: Callable[[Submission], None]
    ) -> Submission | None: ...


class InMemorySubmissionRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Submission] = {}
        self._locks = KeyedLocks()

    async def add(self, submission: Submission) -> None:
        if submission.type == "quiz":
            # one quiz attempt per student-week
            for s in self._by_id.values():
                if (
                    s.type == "quiz"
                    and s.student_id == submission.student_id
                    and s.week_id == submission.week_id
                ):
                    raise ValueError("quiz already submitted")
        self._by_id[submission.id] = submission

    async def get(self, submission_id: UUID) -> Submission | None:
        return self._by_id.get(submission_id)

    async def list(
        self,
        *,
        student_id: UUID | None = None,
        week_id: UUID | None = None,
        type: str | None = None,
        status: str | None = None,
    ) -> list[Submission]:
        out = [
            s
            for s in self._by_id.values()
            if (student_id is None or s.student_id == student_id)
            and (week_id is None or s.week_id == week_id)
            and (type is None or s.type == type)
            and (status is None or s.status == status)
        ]
        return sorted(out, key=lambda s: s.submitted_at, reverse=True)

    async def update(
        self, submission_id: UUID, mutate: Callable[[Submission], Submission]
    ) -> Submission | None:
        with self._locks.hold(submission_id):
            current = self._by_id.get(submission_id)
            if current is None:
                return None
            updated = mutate(current)
            self._by_id[submission_id] = updated
            return updated

    async def delete(
        self, submission_id: UUID, guard: Callable[[Submission], None]
    ) -> Submission | None:
        """Remove a submission if *guard* accepts its latest state.

        *guard* raises to refuse; returns the removed submission, or None if
        it did not exist.
        """
        with self._locks.hold(submission_id):
            current = self._by_id.get(submission_id)
            if current is None:
                return None
            guard(current)
            del self._by_id[submission_id]
            return current

    def clear(self) -> None:
        self._by_id.clear()

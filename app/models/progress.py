from __future__ import annotations

from dataclasses import dataclass, replace
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ProgressRecord:
    """Per student-week completion and points state.

    Created lazily on the first interaction with a week and never deleted
    while the student is enrolled.  Mutated only through
    ProgressRepo.update(), which hands the latest committed record to a pure
    function and stores what it returns.
    """

    student_id: UUID
    week_id: UUID
    video_watched: bool = False
    video_progress: int = 0  # highest watched percentage seen, 0..100
    video_points: int = 0
    assignment_submitted: bool = False
    assignment_points: int = 0
    points: int = 0
    completed: bool = False
    is_locked: bool = False
    video_watched_at: int | None = None
    completed_at: int | None = None

    @staticmethod
    def new(*, student_id: UUID, week_id: UUID, is_locked: bool = False) -> ProgressRecord:
        return ProgressRecord(student_id=student_id, week_id=week_id, is_locked=is_locked)

    def with_points(self, *, max_points: int, now: int) -> ProgressRecord:
        """Recompute ``points`` and ``completed`` from the two components.

        points is capped at max_points; completion is sticky once reached.
        """
        points = min(self.video_points + self.assignment_points, max_points)
        completed = self.completed or points >= max_points
        return replace(
            self,
            points=points,
            completed=completed,
            completed_at=self.completed_at
            if self.completed_at is not None or not completed
            else now,
        )

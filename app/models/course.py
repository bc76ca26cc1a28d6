from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Phase:
    """A contiguous, ordered block of weeks (Foundation, Intermediate, ...)."""

    id: UUID
    number: int  # 1..N
    title: str
    start_week: int
    end_week: int
    description: str = ""

    @staticmethod
    def new(
        *,
        number: int,
        title: str,
        start_week: int,
        end_week: int,
        description: str = "",
    ) -> Phase:
        return Phase(
            id=uuid4(),
            number=number,
            title=title,
            start_week=start_week,
            end_week=end_week,
            description=description,
        )

    def covers(self, week_number: int) -> bool:
        return self.start_week <= week_number <= self.end_week


@dataclass(frozen=True, slots=True)
class Week:
    id: UUID
    phase_id: UUID
    week_number: int  # unique within the phase
    title: str
    description: str = ""
    video_points: int = 40
    assignment_points: int = 60

    @property
    def max_points(self) -> int:
        return self.video_points + self.assignment_points

    @staticmethod
    def new(
        *,
        phase_id: UUID,
        week_number: int,
        title: str,
        description: str = "",
        video_points: int = 40,
        assignment_points: int = 60,
    ) -> Week:
        return Week(
            id=uuid4(),
            phase_id=phase_id,
            week_number=week_number,
            title=title,
            description=description,
            video_points=video_points,
            assignment_points=assignment_points,
        )

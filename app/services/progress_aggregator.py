"""Progress Aggregator: derived percentages over ProgressRecords.

Everything here is a pure function of (phases, weeks, records).  Nothing is
persisted, so a percentage can never drift from the records it came from;
every dashboard, summary and unlock decision recomputes on read.

Missing records count as zero progress.  A phase with no weeks is 0%.

Threshold checks compare exact integers (``100 * earned >= 80 * possible``)
so a phase at exactly the threshold is never lost to float rounding.  The
float percentages are for display; ``display_percent`` rounds half up.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from uuid import UUID

from app.models.course import Phase, Week
from app.models.progress import ProgressRecord

# phase completion / next-phase eligibility; shared with the unlock evaluator
UNLOCK_THRESHOLD_PERCENT = 80


def earned_points(week: Week, record: ProgressRecord | None) -> int:
    if record is None:
        return 0
    return max(0, min(record.points, week.max_points))


def _percent(earned: int, possible: int) -> float:
    if possible <= 0:
        return 0.0
    return 100 * earned / possible


def meets_threshold(earned: int, possible: int) -> bool:
    if possible <= 0:
        return False
    return 100 * earned >= UNLOCK_THRESHOLD_PERCENT * possible


def display_percent(value: float) -> int:
    return math.floor(value + 0.5)


def week_progress_percent(week: Week, record: ProgressRecord | None) -> float:
    return _percent(earned_points(week, record), week.max_points)


def phase_progress_percent(
    weeks: Iterable[Week], records: Mapping[UUID, ProgressRecord]
) -> float:
    """Percent of a phase's points earned; *weeks* are that phase's weeks."""
    weeks = list(weeks)
    earned = sum(earned_points(w, records.get(w.id)) for w in weeks)
    possible = sum(w.max_points for w in weeks)
    return _percent(earned, possible)


def overall_progress_percent(
    weeks: Iterable[Week], records: Mapping[UUID, ProgressRecord]
) -> float:
    return phase_progress_percent(weeks, records)


# ---------------------------------------------------------------------------
# Structured rollup (what dashboards and the unlock evaluator consume)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class WeekProgress:
    week: Week
    record: ProgressRecord | None

    @property
    def earned_points(self) -> int:
        return earned_points(self.week, self.record)

    @property
    def percent(self) -> float:
        return week_progress_percent(self.week, self.record)

    @property
    def completed(self) -> bool:
        return self.record is not None and self.record.completed


@dataclass(frozen=True, slots=True)
class PhaseProgress:
    phase: Phase
    weeks: tuple[WeekProgress, ...]

    @property
    def earned_points(self) -> int:
        return sum(w.earned_points for w in self.weeks)

    @property
    def possible_points(self) -> int:
        return sum(w.week.max_points for w in self.weeks)

    @property
    def completed_weeks(self) -> int:
        return sum(1 for w in self.weeks if w.completed)

    @property
    def percent(self) -> float:
        return _percent(self.earned_points, self.possible_points)

    @property
    def is_completed(self) -> bool:
        return meets_threshold(self.earned_points, self.possible_points)

    @property
    def is_full(self) -> bool:
        """Every available point in the phase has been earned."""
        possible = self.possible_points
        return possible > 0 and self.earned_points >= possible


@dataclass(frozen=True, slots=True)
class CourseProgress:
    phases: tuple[PhaseProgress, ...]

    @property
    def earned_points(self) -> int:
        return sum(p.earned_points for p in self.phases)

    @property
    def possible_points(self) -> int:
        return sum(p.possible_points for p in self.phases)

    @property
    def percent(self) -> float:
        return _percent(self.earned_points, self.possible_points)

    @property
    def last_phase_number(self) -> int:
        return self.phases[-1].phase.number if self.phases else 0

    def phase(self, number: int) -> PhaseProgress | None:
        for p in self.phases:
            if p.phase.number == number:
                return p
        return None


def aggregate(
    phases: Iterable[Phase],
    weeks: Iterable[Week],
    records: Iterable[ProgressRecord],
) -> CourseProgress:
    by_week = {r.week_id: r for r in records}
    weeks_by_phase: dict[UUID, list[Week]] = {}
    for w in weeks:
        weeks_by_phase.setdefault(w.phase_id, []).append(w)

    out = []
    for phase in sorted(phases, key=lambda p: p.number):
        phase_weeks = sorted(weeks_by_phase.get(phase.id, []), key=lambda w: w.week_number)
        out.append(
            PhaseProgress(
                phase=phase,
                weeks=tuple(WeekProgress(week=w, record=by_week.get(w.id)) for w in phase_weeks),
            )
        )
    return CourseProgress(phases=tuple(out))

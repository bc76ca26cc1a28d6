from __future__ import annotations

from uuid import uuid4

import pytest

from app.models.course import Phase, Week
from app.models.progress import ProgressRecord
from app.services.progress_aggregator import (
    UNLOCK_THRESHOLD_PERCENT,
    aggregate,
    display_percent,
    earned_points,
    meets_threshold,
    overall_progress_percent,
    phase_progress_percent,
    week_progress_percent,
)

STUDENT = uuid4()


def _week(phase: Phase, n: int, video: int = 40, assignment: int = 60) -> Week:
    return Week.new(
        phase_id=phase.id,
        week_number=n,
        title=f"w{n}",
        video_points=video,
        assignment_points=assignment,
    )


def _record(week: Week, points: int) -> ProgressRecord:
    return ProgressRecord(
        student_id=STUDENT,
        week_id=week.id,
        assignment_points=points,
        points=points,
        completed=points >= week.max_points,
    )


PHASE = Phase.new(number=1, title="Foundation", start_week=1, end_week=3)


def test_phase_percent_matches_worked_example() -> None:
    w1, w2 = _week(PHASE, 1), _week(PHASE, 2)
    w3 = _week(PHASE, 3, video=20, assignment=30)
    records = {r.week_id: r for r in (_record(w1, 100), _record(w2, 50), _record(w3, 50))}

    assert phase_progress_percent([w1, w2, w3], records) == 80
    assert meets_threshold(200, 250)


def test_missing_records_count_as_zero() -> None:
    w1, w2 = _week(PHASE, 1), _week(PHASE, 2)
    records = {w1.id: _record(w1, 100)}

    assert week_progress_percent(w2, None) == 0
    assert phase_progress_percent([w1, w2], records) == 50


def test_zero_week_phase_is_zero_percent() -> None:
    assert phase_progress_percent([], {}) == 0.0
    course = aggregate([PHASE], [], [])
    assert course.phases[0].percent == 0.0
    assert course.phases[0].is_completed is False
    assert course.phases[0].is_full is False


def test_earned_points_are_capped_at_max_points() -> None:
    w = _week(PHASE, 1)
    over = ProgressRecord(student_id=STUDENT, week_id=w.id, points=150)
    assert earned_points(w, over) == 100


@pytest.mark.parametrize(
    "earned,possible,expected",
    [
        (80, 100, True),
        (79, 100, False),
        (200, 250, True),
        (199, 250, False),
        (0, 0, False),
    ],
    ids=["exactly-80", "79", "80-of-250", "just-under", "empty-phase"],
)
def test_threshold_uses_exact_integer_comparison(earned: int, possible: int, expected: bool) -> None:
    assert meets_threshold(earned, possible) is expected


def test_threshold_constant_is_eighty() -> None:
    assert UNLOCK_THRESHOLD_PERCENT == 80


@pytest.mark.parametrize(
    "value,expected",
    [(0.0, 0), (79.5, 80), (79.49, 79), (66.666, 67), (100.0, 100)],
)
def test_display_percent_rounds_half_up(value: float, expected: int) -> None:
    assert display_percent(value) == expected


def test_aggregate_orders_phases_and_weeks() -> None:
    p2 = Phase.new(number=2, title="Advanced", start_week=4, end_week=5)
    weeks = [_week(p2, 5), _week(PHASE, 2), _week(p2, 4), _week(PHASE, 1)]

    course = aggregate([p2, PHASE], weeks, [])

    assert [p.phase.number for p in course.phases] == [1, 2]
    assert [w.week.week_number for w in course.phases[0].weeks] == [1, 2]
    assert [w.week.week_number for w in course.phases[1].weeks] == [4, 5]
    assert course.last_phase_number == 2
    assert course.phase(3) is None


def test_overall_percent_spans_all_weeks() -> None:
    p2 = Phase.new(number=2, title="Advanced", start_week=4, end_week=4)
    w1, w4 = _week(PHASE, 1), _week(p2, 4)
    records = [_record(w1, 100)]

    course = aggregate([PHASE, p2], [w1, w4], records)

    assert course.earned_points == 100
    assert course.possible_points == 200
    assert course.percent == 50
    assert overall_progress_percent([w1, w4], {r.week_id: r for r in records}) == 50


def test_phase_percent_never_decreases_as_points_accrue() -> None:
    w1, w2 = _week(PHASE, 1), _week(PHASE, 2)
    seen = []
    for points in (0, 40, 60, 100):
        records = {w1.id: _record(w1, points), w2.id: _record(w2, 40)}
        seen.append(phase_progress_percent([w1, w2], records))
    assert seen == sorted(seen)


def test_phase_rollup_counts_completed_weeks() -> None:
    w1, w2 = _week(PHASE, 1), _week(PHASE, 2)
    course = aggregate([PHASE], [w1, w2], [_record(w1, 100), _record(w2, 60)])
    phase = course.phases[0]

    assert phase.completed_weeks == 1
    assert phase.earned_points == 160
    assert phase.is_completed is True
    assert phase.is_full is False

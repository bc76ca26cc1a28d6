"""Course structure administration and the student week view."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from uuid import UUID

from app.core.errors import FailedPrecondition, NotFound, ValidationError
from app.models.content import ContentBlock, WeekContent, validate_blocks
from app.models.course import Phase, Week
from app.models.principal import Principal
from app.models.progress import ProgressRecord
from app.models.submission import Submission
from app.repos.store import Store
from app.services.access import require_admin, require_student
from app.services.progress_service import load_student
from app.services.unlock_evaluator import require_week_unlocked

logger = logging.getLogger(__name__)


def _check_points(video_points: int, assignment_points: int, max_points: int | None) -> None:
    if video_points < 0 or assignment_points < 0:
        raise ValidationError("points must be >= 0")
    if video_points + assignment_points <= 0:
        raise ValidationError("a week must be worth at least one point")
    if max_points is not None and video_points + assignment_points != max_points:
        raise ValidationError("video_points + assignment_points must equal max_points")


async def _phase_or_404(store: Store, phase_id: UUID) -> Phase:
    phase = await store.courses.get_phase(phase_id)
    if phase is None:
        raise NotFound("phase not found")
    return phase


async def _week_or_404(store: Store, week_id: UUID) -> Week:
    week = await store.courses.get_week(week_id)
    if week is None:
        raise NotFound("week not found")
    return week


# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------


async def update_phase(
    store: Store,
    principal: Principal,
    phase_id: UUID,
    *,
    title: str | None = None,
    description: str | None = None,
) -> Phase:
    require_admin(principal)
    phase = await _phase_or_404(store, phase_id)
    if title is not None and not title.strip():
        raise ValidationError("title must be non-empty")
    updated = replace(
        phase,
        title=title.strip() if title is not None else phase.title,
        description=description if description is not None else phase.description,
    )
    await store.courses.update_phase(updated)
    logger.info("Phase updated", extra={"phase_number": phase.number})
    return updated


# ---------------------------------------------------------------------------
# Weeks
# ---------------------------------------------------------------------------


async def create_week(
    store: Store,
    principal: Principal,
    *,
    phase_id: UUID,
    week_number: int,
    title: str,
    description: str = "",
    video_points: int = 40,
    assignment_points: int = 60,
    max_points: int | None = None,
) -> Week:
    require_admin(principal)
    if not title.strip():
        raise ValidationError("title must be non-empty")
    _check_points(video_points, assignment_points, max_points)
    phase = await _phase_or_404(store, phase_id)
    if not phase.covers(week_number):
        raise ValidationError(
            f"week {week_number} is outside phase {phase.number} "
            f"({phase.start_week}-{phase.end_week})"
        )

    week = Week.new(
        phase_id=phase.id,
        week_number=week_number,
        title=title.strip(),
        description=description,
        video_points=video_points,
        assignment_points=assignment_points,
    )
    try:
        await store.courses.add_week(week)
    except ValueError as exc:
        raise FailedPrecondition(str(exc)) from None
    logger.info(
        "Week %d created",
        week.week_number,
        extra={"week_id": str(week.id), "phase_number": phase.number},
    )
    return week


async def update_week(
    store: Store,
    principal: Principal,
    week_id: UUID,
    *,
    title: str | None = None,
    description: str | None = None,
    week_number: int | None = None,
    video_points: int | None = None,
    assignment_points: int | None = None,
    max_points: int | None = None,
) -> Week:
    require_admin(principal)
    week = await _week_or_404(store, week_id)
    if title is not None and not title.strip():
        raise ValidationError("title must be non-empty")
    updated = replace(
        week,
        title=title.strip() if title is not None else week.title,
        description=description if description is not None else week.description,
        week_number=week_number if week_number is not None else week.week_number,
        video_points=video_points if video_points is not None else week.video_points,
        assignment_points=(
            assignment_points if assignment_points is not None else week.assignment_points
        ),
    )
    _check_points(updated.video_points, updated.assignment_points, max_points)
    points_changed = (updated.video_points, updated.assignment_points) != (
        week.video_points,
        week.assignment_points,
    )
    if points_changed and await store.progress.list_for_week(week.id):
        raise FailedPrecondition("week has student progress and its points cannot be changed")
    phase = await _phase_or_404(store, updated.phase_id)
    if not phase.covers(updated.week_number):
        raise ValidationError(
            f"week {updated.week_number} is outside phase {phase.number} "
            f"({phase.start_week}-{phase.end_week})"
        )
    try:
        await store.courses.update_week(updated)
    except ValueError as exc:
        raise FailedPrecondition(str(exc)) from None
    logger.info("Week %d updated", updated.week_number, extra={"week_id": str(week.id)})
    return updated


async def delete_week(store: Store, principal: Principal, week_id: UUID) -> None:
    require_admin(principal)
    week = await _week_or_404(store, week_id)
    if await store.progress.list_for_week(week.id):
        raise FailedPrecondition("week has student progress and cannot be deleted")
    if await store.submissions.list(week_id=week.id):
        raise FailedPrecondition("week has submissions and cannot be deleted")
    await store.courses.delete_week(week.id)
    logger.info("Week %d deleted", week.week_number, extra={"week_id": str(week.id)})


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------


async def get_content(store: Store, principal: Principal, week_id: UUID) -> WeekContent:
    require_admin(principal)
    await _week_or_404(store, week_id)
    content = await store.courses.get_content(week_id)
    if content is None:
        raise NotFound("week has no content")
    return content


async def put_content(
    store: Store,
    principal: Principal,
    week_id: UUID,
    *,
    blocks: tuple[ContentBlock, ...],
    is_published: bool,
    now: int | None = None,
) -> WeekContent:
    require_admin(principal)
    validate_blocks(blocks)
    week = await _week_or_404(store, week_id)
    content = WeekContent(
        week_id=week.id,
        blocks=blocks,
        is_published=is_published,
        updated_at=now if now is not None else int(time.time()),
    )
    await store.courses.put_content(content)
    logger.info(
        "Week content saved blocks=%s published=%s",
        ",".join(b.kind for b in blocks),
        is_published,
        extra={"week_id": str(week.id)},
    )
    return content


async def delete_content(store: Store, principal: Principal, week_id: UUID) -> None:
    require_admin(principal)
    await _week_or_404(store, week_id)
    if not await store.courses.delete_content(week_id):
        raise NotFound("week has no content")
    logger.info("Week content deleted", extra={"week_id": str(week_id)})


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PhaseOutline:
    phase: Phase
    weeks: tuple[tuple[Week, WeekContent | None], ...]


async def course_structure(store: Store, principal: Principal) -> list[PhaseOutline]:
    require_admin(principal)
    outline = []
    for phase in await store.courses.list_phases():
        weeks = []
        for week in await store.courses.list_weeks(phase.id):
            weeks.append((week, await store.courses.get_content(week.id)))
        outline.append(PhaseOutline(phase=phase, weeks=tuple(weeks)))
    return outline


@dataclass(frozen=True, slots=True)
class WeekDetail:
    week: Week
    phase: Phase
    content: WeekContent | None  # published content only
    record: ProgressRecord | None
    submissions: tuple[Submission, ...]


async def week_detail(store: Store, principal: Principal, week_id: UUID) -> WeekDetail:
    require_student(principal)
    student = await load_student(store, principal.id)
    week, phase = await require_week_unlocked(store, student, week_id)
    content = await store.courses.get_content(week.id)
    if content is not None and not content.is_published:
        content = None
    return WeekDetail(
        week=week,
        phase=phase,
        content=content,
        record=await store.progress.get(student.id, week.id),
        submissions=tuple(
            await store.submissions.list(student_id=student.id, week_id=week.id)
        ),
    )

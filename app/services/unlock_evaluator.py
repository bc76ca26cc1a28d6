"""Unlock Evaluator: which phases a student may work in, and when that moves.

A student's ``current_phase`` is the single source of truth for access:
phase 1 is always open, phase k > 1 is open iff ``current_phase >= k``.
Percentages never unlock anything on their own; they only decide whether
``current_phase`` may be moved, which happens in exactly two places:

check_unlock (student)
    Looks at the current phase.  Below the threshold nothing happens.  At
    or above the threshold but under 100% the student is flagged as
    awaiting approval (``awaiting_approval_phase``) and nothing else moves.
    At 100% the student advances on their own, and the check repeats for
    the new phase, so one call settles every phase that is already full.
    Completing the last phase issues the certificate.  Repeated calls with
    no new progress change nothing.

approve_phase (admin)
    Advances a student whose current phase has reached the threshold.

Both write through ``UserRepo.update`` so the decision is made against the
latest stored user, and two concurrent checks cannot advance twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Literal
from uuid import UUID

from app.core.errors import FailedPrecondition, NotFound
from app.core.metrics import PHASE_ADVANCES, UNLOCK_CHECKS
from app.models.certificate import Certificate
from app.models.course import Phase, Week
from app.models.principal import Principal
from app.models.user import User
from app.repos.store import Store
from app.services import certificate_service
from app.services.access import require_admin, require_student
from app.services.progress_aggregator import CourseProgress
from app.services.progress_service import load_course_progress, load_student

logger = logging.getLogger(__name__)

Outcome = Literal["not_eligible", "awaiting_approval", "advanced", "course_complete"]


def is_phase_unlocked(phase_number: int, current_phase: int) -> bool:
    return phase_number == 1 or current_phase >= phase_number


async def require_week_unlocked(
    store: Store, student: User, week_id: UUID
) -> tuple[Week, Phase]:
    """Load a week the student is about to act on; locked weeks are refused."""
    week = await store.courses.get_week(week_id)
    if week is None:
        raise NotFound("week not found")
    phase = await store.courses.get_phase(week.phase_id)
    if phase is None:
        raise NotFound("phase not found")
    if not is_phase_unlocked(phase.number, student.current_phase):
        raise FailedPrecondition(f"week {week.week_number} is locked")
    return week, phase


@dataclass(frozen=True, slots=True)
class UnlockDecision:
    outcome: Outcome
    current_phase: int
    awaiting_approval_phase: int | None
    advanced_to: tuple[int, ...] = ()

    @property
    def needs_approval(self) -> bool:
        return self.awaiting_approval_phase is not None


def evaluate(current_phase: int, course: CourseProgress) -> UnlockDecision:
    """Decide the unlock state for a student; pure."""
    current = current_phase
    advanced: list[int] = []
    while True:
        summary = course.phase(current)
        if summary is None or not summary.is_completed:
            return UnlockDecision(
                "advanced" if advanced else "not_eligible",
                current,
                None,
                tuple(advanced),
            )
        if not summary.is_full:
            return UnlockDecision(
                "advanced" if advanced else "awaiting_approval",
                current,
                current,
                tuple(advanced),
            )
        if current >= course.last_phase_number:
            return UnlockDecision("course_complete", current, None, tuple(advanced))
        current += 1
        advanced.append(current)


@dataclass(frozen=True, slots=True)
class UnlockResult:
    decision: UnlockDecision
    student: User
    course: CourseProgress
    certificate: Certificate | None = None


async def check_unlock(
    store: Store, principal: Principal, *, now: int | None = None
) -> UnlockResult:
    require_student(principal)
    student = await load_student(store, principal.id)
    course = await load_course_progress(store, student.id)

    decision: UnlockDecision | None = None
    before: User | None = None

    def apply(u: User) -> User:
        nonlocal decision, before
        before = u
        decision = evaluate(u.current_phase, course)
        return replace(
            u,
            current_phase=decision.current_phase,
            awaiting_approval_phase=decision.awaiting_approval_phase,
        )

    updated = await store.users.update(student.id, apply)
    if updated is None or decision is None or before is None:
        raise NotFound("student not found")

    log_extra = {"student_id": str(student.id), "phase_number": updated.current_phase}
    for number in decision.advanced_to:
        PHASE_ADVANCES.labels(trigger="auto").inc()
        logger.info("Phase auto-advanced to %d", number, extra=log_extra)
    if (
        decision.awaiting_approval_phase is not None
        and before.awaiting_approval_phase != decision.awaiting_approval_phase
    ):
        logger.info(
            "Phase %d awaiting admin approval",
            decision.awaiting_approval_phase,
            extra=log_extra,
        )
    UNLOCK_CHECKS.labels(outcome=decision.outcome).inc()

    certificate = None
    if decision.outcome == "course_complete":
        certificate = await certificate_service.issue_once(store, student.id, now=now)
    return UnlockResult(
        decision=decision, student=updated, course=course, certificate=certificate
    )


async def approve_phase(
    store: Store,
    principal: Principal,
    student_id: UUID,
    phase_id: UUID,
    *,
    now: int | None = None,
) -> tuple[User, Certificate | None]:
    """Admin action: move a student past a phase that reached the threshold."""
    require_admin(principal)
    student = await load_student(store, student_id)
    phase = await store.courses.get_phase(phase_id)
    if phase is None:
        raise NotFound("phase not found")
    course = await load_course_progress(store, student.id)
    summary = course.phase(phase.number)
    is_last = phase.number >= course.last_phase_number

    if is_last and await store.certificates.get_for_student(student.id) is not None:
        raise FailedPrecondition("course already completed")

    def apply(u: User) -> User:
        if u.current_phase != phase.number:
            raise FailedPrecondition(
                f"phase {phase.number} is not the student's current phase "
                f"({u.current_phase})"
            )
        if summary is None or not summary.is_completed:
            raise FailedPrecondition("phase progress is below the unlock threshold")
        if is_last:
            return replace(u, awaiting_approval_phase=None)
        return replace(u, current_phase=phase.number + 1, awaiting_approval_phase=None)

    updated = await store.users.update(student.id, apply)
    if updated is None:
        raise NotFound("student not found")

    log_extra = {"student_id": str(student.id), "phase_number": phase.number}
    if is_last:
        logger.info("Final phase approved by admin=%s", principal.user_id, extra=log_extra)
        cert = await certificate_service.issue_once(store, student.id, now=now)
        return updated, cert

    PHASE_ADVANCES.labels(trigger="approval").inc()
    logger.info(
        "Phase approved by admin=%s, advanced to %d",
        principal.user_id,
        updated.current_phase,
        extra=log_extra,
    )
    return updated, None

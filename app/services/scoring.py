"""Scoring Engine: turns learning events into points on ProgressRecords.

Events and what they award:

  video watch        full ``week.video_points`` once the student has played
                     at least 90% of the week's video; nothing below that
  quiz submission    a score (number of correct answers) stored on the
                     Submission only; quizzes do not move points
  assignment review  ``round(score / 100 * week.assignment_points)`` when
                     the review accepts the work (reviewed or approved)

Every operation validates its whole input before the first write, so a
rejected call leaves no trace.  Points only ever grow: video credit is
awarded once, and a re-review keeps the higher assignment award.  Writes to
a ProgressRecord go through ``ProgressRepo.update`` and writes to a
Submission through ``SubmissionRepo.update``/``delete``, which serialize
writers of the same record.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import replace
from uuid import UUID

from app.core.errors import FailedPrecondition, Forbidden, NotFound, ValidationError
from app.core.metrics import SUBMISSION_REVIEWS, SUBMISSIONS_CREATED, VIDEO_CREDIT_AWARDS
from app.models.principal import Principal
from app.models.progress import ProgressRecord
from app.models.submission import ACCEPTED_STATUSES, REVIEW_STATUSES, Submission
from app.repos.store import Store
from app.services.access import require_admin, require_student
from app.services.progress_service import load_student
from app.services.unlock_evaluator import require_week_unlocked

logger = logging.getLogger(__name__)

VIDEO_WATCH_THRESHOLD = 0.90


def _now(now: int | None) -> int:
    return now if now is not None else int(time.time())


def assignment_award(score: int, assignment_points: int) -> int:
    """score/100 of the week's assignment points, rounded half up."""
    return (score * assignment_points + 50) // 100


# ---------------------------------------------------------------------------
# Video
# ---------------------------------------------------------------------------


async def record_video_watch(
    store: Store,
    principal: Principal,
    week_id: UUID,
    played_fraction: float,
    *,
    now: int | None = None,
) -> ProgressRecord:
    require_student(principal)
    if not 0.0 <= played_fraction <= 1.0:
        raise ValidationError("played_fraction must be between 0 and 1")
    student = await load_student(store, principal.id)
    week, _ = await require_week_unlocked(store, student, week_id)
    ts = _now(now)
    awarded = False

    def apply(r: ProgressRecord) -> ProgressRecord:
        nonlocal awarded
        r = replace(r, video_progress=max(r.video_progress, round(played_fraction * 100)))
        if played_fraction >= VIDEO_WATCH_THRESHOLD and not r.video_watched:
            awarded = True
            r = replace(
                r,
                video_watched=True,
                video_points=week.video_points,
                video_watched_at=ts,
            )
        return r.with_points(max_points=week.max_points, now=ts)

    record = await store.progress.update(student.id, week.id, apply)
    if awarded:
        VIDEO_CREDIT_AWARDS.inc()
        logger.info(
            "Video credit awarded points=%d",
            week.video_points,
            extra={"student_id": str(student.id), "week_id": str(week.id)},
        )
    return record


# ---------------------------------------------------------------------------
# Quiz
# ---------------------------------------------------------------------------


async def submit_quiz(
    store: Store,
    principal: Principal,
    week_id: UUID,
    answers: Sequence[int],
    *,
    now: int | None = None,
) -> Submission:
    require_student(principal)
    student = await load_student(store, principal.id)
    week, _ = await require_week_unlocked(store, student, week_id)

    content = await store.courses.get_content(week.id)
    questions = content.quiz_questions if content is not None and content.is_published else ()
    if not questions:
        raise FailedPrecondition("this week has no quiz")
    if len(answers) != len(questions):
        raise ValidationError(
            f"expected {len(questions)} answers, got {len(answers)}"
        )
    for i, (answer, question) in enumerate(zip(answers, questions)):
        if not 0 <= answer < len(question.options):
            raise ValidationError(f"answer {i} is not a valid option")
    if await store.submissions.list(student_id=student.id, week_id=week.id, type="quiz"):
        raise FailedPrecondition("quiz already submitted")

    score = sum(1 for a, q in zip(answers, questions) if a == q.correct_answer)
    submission = Submission.new_quiz(
        week_id=week.id,
        student_id=student.id,
        answers=tuple(answers),
        score=score,
        total_questions=len(questions),
        submitted_at=_now(now),
    )
    try:
        await store.submissions.add(submission)
    except ValueError:
        raise FailedPrecondition("quiz already submitted") from None

    SUBMISSIONS_CREATED.labels(type="quiz").inc()
    logger.info(
        "Quiz submitted score=%d/%d",
        score,
        len(questions),
        extra={
            "student_id": str(student.id),
            "week_id": str(week.id),
            "submission_id": str(submission.id),
        },
    )
    return submission


async def get_quiz_submission(
    store: Store, principal: Principal, week_id: UUID
) -> Submission:
    require_student(principal)
    found = await store.submissions.list(
        student_id=principal.id, week_id=week_id, type="quiz"
    )
    if not found:
        raise NotFound("no quiz submission for this week")
    return found[0]


# ---------------------------------------------------------------------------
# Assignment
# ---------------------------------------------------------------------------


async def submit_assignment(
    store: Store,
    principal: Principal,
    week_id: UUID,
    *,
    github_url: str | None = None,
    file_name: str | None = None,
    description: str | None = None,
    now: int | None = None,
) -> Submission:
    require_student(principal)
    github_url = (github_url or "").strip() or None
    file_name = (file_name or "").strip() or None
    if github_url is None and file_name is None:
        raise ValidationError("github_url or file_name is required")
    if github_url is not None and not github_url.startswith(("http://", "https://")):
        raise ValidationError("github_url must be an http(s) URL")

    student = await load_student(store, principal.id)
    week, _ = await require_week_unlocked(store, student, week_id)
    content = await store.courses.get_content(week.id)
    deadline = content.assignment_deadline if content is not None else None
    ts = _now(now)

    submission = Submission.new_assignment(
        week_id=week.id,
        student_id=student.id,
        submitted_at=ts,
        github_url=github_url,
        file_name=file_name,
        description=description,
        is_on_time=deadline is None or ts <= int(deadline.timestamp()),
    )
    await store.submissions.add(submission)

    SUBMISSIONS_CREATED.labels(type="assignment").inc()
    logger.info(
        "Assignment submitted on_time=%s",
        submission.is_on_time,
        extra={
            "student_id": str(student.id),
            "week_id": str(week.id),
            "submission_id": str(submission.id),
        },
    )
    return submission


# ---------------------------------------------------------------------------
# Review and deletion
# ---------------------------------------------------------------------------


async def review_submission(
    store: Store,
    principal: Principal,
    submission_id: UUID,
    *,
    score: int,
    status: str,
    feedback: str | None = None,
    now: int | None = None,
) -> Submission:
    """Record an admin review.

    Assignment scores are 0..100, quiz scores 0..total_questions.  An
    accepting review of an assignment awards points on the student's
    ProgressRecord; a quiz review only annotates the submission.
    'approved' is final: an approved submission cannot be reviewed again.
    """
    require_admin(principal)
    if status not in REVIEW_STATUSES:
        raise ValidationError(f"status must be one of {sorted(REVIEW_STATUSES)}")

    current = await store.submissions.get(submission_id)
    if current is None:
        raise NotFound("submission not found")
    upper = 100 if current.type == "assignment" else (current.total_questions or 0)
    if not 0 <= score <= upper:
        raise ValidationError(f"score must be between 0 and {upper}")
    week = await store.courses.get_week(current.week_id)
    if week is None:
        raise NotFound("week not found")
    ts = _now(now)

    def apply(s: Submission) -> Submission:
        if s.status == "approved":
            raise FailedPrecondition("submission is already approved")
        return replace(
            s,
            score=score,
            status=status,  # type: ignore[arg-type]
            feedback=feedback,
            reviewed_at=ts,
            reviewed_by=principal.id,
        )

    reviewed = await store.submissions.update(submission_id, apply)
    if reviewed is None:
        raise NotFound("submission not found")

    log_extra = {
        "student_id": str(reviewed.student_id),
        "week_id": str(week.id),
        "submission_id": str(reviewed.id),
    }
    if reviewed.type == "assignment" and status in ACCEPTED_STATUSES:
        award = assignment_award(score, week.assignment_points)

        def credit(r: ProgressRecord) -> ProgressRecord:
            r = replace(
                r,
                assignment_submitted=True,
                assignment_points=max(r.assignment_points, award),
            )
            return r.with_points(max_points=week.max_points, now=ts)

        record = await store.progress.update(reviewed.student_id, week.id, credit)
        logger.info(
            "Assignment %s score=%d week_points=%d",
            status,
            score,
            record.points,
            extra=log_extra,
        )
    else:
        logger.info("Submission %s score=%d", status, score, extra=log_extra)

    SUBMISSION_REVIEWS.labels(type=reviewed.type, status=status).inc()
    return reviewed


async def delete_submission(
    store: Store, principal: Principal, submission_id: UUID
) -> Submission:
    """Delete a submission.

    Students may withdraw their own assignment while it is still awaiting
    review.  Admins may delete anything that is not approved.  Points
    already awarded are kept.
    """
    if not (principal.is_admin() or principal.is_student()):
        raise Forbidden("student or admin role required")

    def guard(s: Submission) -> None:
        if principal.is_admin():
            if s.status == "approved":
                raise FailedPrecondition("approved submissions cannot be deleted")
            return
        if s.student_id != principal.id:
            raise Forbidden("you can only delete your own submissions")
        if s.type == "quiz":
            raise FailedPrecondition("quiz submissions cannot be withdrawn")
        if s.status != "submitted":
            raise FailedPrecondition("submission has already been reviewed")

    removed = await store.submissions.delete(submission_id, guard)
    if removed is None:
        raise NotFound("submission not found")
    logger.info(
        "Submission deleted by user=%s",
        principal.user_id,
        extra={
            "student_id": str(removed.student_id),
            "week_id": str(removed.week_id),
            "submission_id": str(removed.id),
        },
    )
    return removed

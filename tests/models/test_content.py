from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from app.core.errors import ValidationError
from app.models.content import (
    Assignment,
    Notes,
    Quiz,
    QuizQuestion,
    Resource,
    Resources,
    Video,
    VideoList,
    WeekContent,
    block_from_dict,
    block_to_dict,
    validate_blocks,
)
from app.models.progress import ProgressRecord


def test_any_number_of_videos_in_order() -> None:
    videos = VideoList(
        videos=tuple(Video(title=f"v{i}", url=f"https://v.test/{i}", duration_seconds=60) for i in range(5))
    )
    validate_blocks((videos,))
    assert [v["title"] for v in block_to_dict(videos)["videos"]] == ["v0", "v1", "v2", "v3", "v4"]


@pytest.mark.parametrize(
    "blocks,message",
    [
        ((Notes(text="a"), Notes(text="b")), "duplicate"),
        ((VideoList(videos=(Video(title="x", url="", duration_seconds=1),)),), "url"),
        ((VideoList(videos=(Video(title="x", url="u", duration_seconds=-1),)),), "duration"),
        ((Quiz(questions=()),), "at least one question"),
        ((Quiz(questions=(QuizQuestion(prompt="?", options=("a",), correct_answer=0),)),), "two options"),
        ((Quiz(questions=(QuizQuestion(prompt="?", options=("a", "b"), correct_answer=-1),)),), "correct_answer"),
    ],
    ids=["duplicate-kind", "empty-url", "negative-duration", "empty-quiz", "one-option", "bad-answer"],
)
def test_validate_blocks_rejects(blocks, message: str) -> None:
    with pytest.raises(ValidationError, match=message):
        validate_blocks(blocks)


def test_assignment_deadline_survives_json() -> None:
    deadline = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    block = Assignment(description="Build it", deadline=deadline, grading_criteria="tests pass")

    assert block_from_dict(block_to_dict(block)) == block


def test_deadline_without_offset_is_utc() -> None:
    block = block_from_dict(
        {"kind": "assignment", "description": "Build it", "deadline": "2026-03-01T12:00:00"}
    )

    assert block.deadline == datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    assert int(block.deadline.timestamp()) == 1_772_366_400


def test_deadline_offset_is_kept() -> None:
    block = block_from_dict(
        {"kind": "assignment", "description": "Build it", "deadline": "2026-03-01T12:00:00+02:00"}
    )

    assert block.deadline.utcoffset().total_seconds() == 7200
    assert int(block.deadline.timestamp()) == 1_772_366_400 - 7200


def test_unknown_kind_is_rejected() -> None:
    with pytest.raises(ValidationError, match="unknown"):
        block_from_dict({"kind": "poll"})


def test_week_content_accessors() -> None:
    quiz = Quiz(questions=(QuizQuestion(prompt="?", options=("a", "b"), correct_answer=1),))
    content = WeekContent(
        week_id=uuid4(),
        blocks=(quiz, Resources(resources=(Resource(title="docs", url="https://d"),))),
        is_published=True,
        updated_at=0,
    )
    assert content.block(Quiz) is quiz
    assert content.block(Notes) is None
    assert content.quiz_questions == quiz.questions
    assert content.assignment_deadline is None


def test_progress_points_are_capped_and_completion_sticks() -> None:
    r = ProgressRecord(
        student_id=uuid4(), week_id=uuid4(), video_points=40, assignment_points=70
    ).with_points(max_points=100, now=5)

    assert r.points == 100
    assert r.completed is True
    assert r.completed_at == 5
    assert r.with_points(max_points=100, now=9).completed_at == 5

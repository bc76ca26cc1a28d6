"""Week content as a tagged union of independently optional blocks.

A week carries at most one block of each kind.  Blocks are validated once,
when they enter the system (``validate_blocks``); everything downstream can
rely on their shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import ClassVar, TypeVar
from uuid import UUID

from app.core.errors import ValidationError


@dataclass(frozen=True, slots=True)
class Instructions:
    kind: ClassVar[str] = "instructions"
    text: str


@dataclass(frozen=True, slots=True)
class Notes:
    kind: ClassVar[str] = "notes"
    text: str


@dataclass(frozen=True, slots=True)
class Video:
    title: str
    url: str
    duration_seconds: int


@dataclass(frozen=True, slots=True)
class VideoList:
    kind: ClassVar[str] = "videos"
    videos: tuple[Video, ...]


@dataclass(frozen=True, slots=True)
class QuizQuestion:
    prompt: str
    options: tuple[str, ...]
    correct_answer: int  # index into options


@dataclass(frozen=True, slots=True)
class Quiz:
    kind: ClassVar[str] = "quiz"
    questions: tuple[QuizQuestion, ...]


@dataclass(frozen=True, slots=True)
class Assignment:
    kind: ClassVar[str] = "assignment"
    description: str
    deadline: datetime | None = None
    grading_criteria: str = ""


@dataclass(frozen=True, slots=True)
class Resource:
    title: str
    url: str


@dataclass(frozen=True, slots=True)
class Resources:
    kind: ClassVar[str] = "resources"
    resources: tuple[Resource, ...]


ContentBlock = Instructions | Notes | VideoList | Quiz | Assignment | Resources

B = TypeVar("B")


@dataclass(frozen=True, slots=True)
class WeekContent:
    week_id: UUID
    blocks: tuple[ContentBlock, ...] = ()
    is_published: bool = False
    updated_at: int = 0

    def block(self, block_type: type[B]) -> B | None:
        for b in self.blocks:
            if isinstance(b, block_type):
                return b
        return None

    @property
    def quiz_questions(self) -> tuple[QuizQuestion, ...]:
        quiz = self.block(Quiz)
        return quiz.questions if quiz is not None else ()

    @property
    def assignment_deadline(self) -> datetime | None:
        assignment = self.block(Assignment)
        return assignment.deadline if assignment is not None else None


def validate_blocks(blocks: tuple[ContentBlock, ...]) -> None:
    """Reject content that is well-typed but semantically wrong."""
    seen: set[str] = set()
    for b in blocks:
        if b.kind in seen:
            raise ValidationError(f"duplicate content block: {b.kind}")
        seen.add(b.kind)

        if isinstance(b, VideoList):
            for v in b.videos:
                if not v.url:
                    raise ValidationError("video url must be non-empty")
                if v.duration_seconds < 0:
                    raise ValidationError("video duration must be >= 0")
        elif isinstance(b, Quiz):
            if not b.questions:
                raise ValidationError("quiz must have at least one question")
            for i, q in enumerate(b.questions):
                if len(q.options) < 2:
                    raise ValidationError(f"question {i} needs at least two options")
                if not 0 <= q.correct_answer < len(q.options):
                    raise ValidationError(
                        f"question {i} correct_answer out of range "
                        f"(0..{len(q.options) - 1})"
                    )


# ---------------------------------------------------------------------------
# JSON round-trip (week_contents.blocks column)
# ---------------------------------------------------------------------------


def block_to_dict(block: ContentBlock) -> dict:
    if isinstance(block, (Instructions, Notes)):
        return {"kind": block.kind, "text": block.text}
    if isinstance(block, VideoList):
        return {
            "kind": block.kind,
            "videos": [
                {"title": v.title, "url": v.url, "duration_seconds": v.duration_seconds}
                for v in block.videos
            ],
        }
    if isinstance(block, Quiz):
        return {
            "kind": block.kind,
            "questions": [
                {
                    "prompt": q.prompt,
                    "options": list(q.options),
                    "correct_answer": q.correct_answer,
                }
                for q in block.questions
            ],
        }
    if isinstance(block, Assignment):
        return {
            "kind": block.kind,
            "description": block.description,
            "deadline": block.deadline.isoformat() if block.deadline else None,
            "grading_criteria": block.grading_criteria,
        }
    return {
        "kind": block.kind,
        "resources": [{"title": r.title, "url": r.url} for r in block.resources],
    }


def _as_utc(moment: datetime) -> datetime:
    # a deadline without an offset means UTC, not the server's local zone
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def block_from_dict(data: dict) -> ContentBlock:
    kind = data.get("kind")
    if kind == Instructions.kind:
        return Instructions(text=data["text"])
    if kind == Notes.kind:
        return Notes(text=data["text"])
    if kind == VideoList.kind:
        return VideoList(videos=tuple(Video(**v) for v in data["videos"]))
    if kind == Quiz.kind:
        return Quiz(
            questions=tuple(
                QuizQuestion(
                    prompt=q["prompt"],
                    options=tuple(q["options"]),
                    correct_answer=q["correct_answer"],
                )
                for q in data["questions"]
            )
        )
    if kind == Assignment.kind:
        deadline = data.get("deadline")
        return Assignment(
            description=data["description"],
            deadline=_as_utc(datetime.fromisoformat(deadline)) if deadline else None,
            grading_criteria=data.get("grading_criteria", ""),
        )
    if kind == Resources.kind:
        return Resources(resources=tuple(Resource(**r) for r in data["resources"]))
    raise ValidationError(f"unknown content block kind: {kind!r}")

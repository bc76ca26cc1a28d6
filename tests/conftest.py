from __future__ import annotations

import asyncio
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.content import (
    Assignment,
    Instructions,
    Quiz,
    QuizQuestion,
    Video,
    VideoList,
    WeekContent,
)
from app.models.course import Phase, Week
from app.models.principal import Principal
from app.models.user import User
from app.repos.store import Store, memory_store, reset
from app.services import token_service

# Ensure repo root is on sys.path so `import app` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def reset_store() -> None:
    """Empty the in-memory repositories between tests."""
    reset(memory_store)


@pytest.fixture
def store() -> Store:
    return memory_store


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(sub: str, roles: list[str]) -> str:
    """Create a valid ES256 access token for testing."""
    return token_service.create_access_token(sub=sub, roles=roles)


def auth(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {mint_token(str(user.id), [user.role])}"}


def principal_of(user: User) -> Principal:
    return Principal(user_id=str(user.id), roles=frozenset({user.role}))


def make_user(
    role: str = "student",
    *,
    email: str | None = None,
    name: str = "",
    current_phase: int = 1,
    store: Store = memory_store,
) -> User:
    """Persist a user directly in the store (no password hashing)."""
    user = User.new(
        email=email or f"{role}-{uuid4().hex[:8]}@test.com",
        password_hash="x",
        name=name,
        role=role,  # type: ignore[arg-type]
    )
    if current_phase != 1:
        user = replace(user, current_phase=current_phase)
    asyncio.run(store.users.add(user))
    return user


# ---------------------------------------------------------------------------
# A small course: two phases of two weeks, 40 video + 60 assignment points
# per week.  Week 1 has a published two-question quiz and a video.
# ---------------------------------------------------------------------------


@dataclass
class SmallCourse:
    phases: list[Phase]
    weeks: list[Week]  # ordered by week_number

    def week(self, number: int) -> Week:
        return self.weeks[number - 1]


QUIZ = Quiz(
    questions=(
        QuizQuestion(prompt="2 + 2?", options=("3", "4", "5"), correct_answer=1),
        QuizQuestion(prompt="Dart is typed?", options=("yes", "no"), correct_answer=0),
    )
)


async def build_small_course(store: Store) -> SmallCourse:
    phases = [
        Phase.new(number=1, title="Foundation", start_week=1, end_week=2),
        Phase.new(number=2, title="Advanced", start_week=3, end_week=4),
    ]
    weeks = []
    for phase in phases:
        await store.courses.add_phase(phase)
        for n in range(phase.start_week, phase.end_week + 1):
            week = Week.new(phase_id=phase.id, week_number=n, title=f"Week {n}")
            await store.courses.add_week(week)
            weeks.append(week)
    await store.courses.put_content(
        WeekContent(
            week_id=weeks[0].id,
            blocks=(
                Instructions(text="Read this first"),
                VideoList(videos=(Video(title="Intro", url="https://v.test/1", duration_seconds=600),)),
                QUIZ,
                Assignment(description="Build a counter app"),
            ),
            is_published=True,
            updated_at=0,
        )
    )
    return SmallCourse(phases=phases, weeks=weeks)


@pytest.fixture
def course(store: Store) -> SmallCourse:
    return asyncio.run(build_small_course(store))

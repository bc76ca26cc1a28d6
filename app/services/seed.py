"""Default course: three phases over 26 weeks, plus an optional admin.

Runs at startup when SEED_DEMO_DATA is on.  Each step checks for existing
data first, so restarting against a populated store is a no-op.
"""

from __future__ import annotations

import logging
import time

from app.models.content import Assignment, Instructions, Resource, Resources, WeekContent
from app.models.course import Phase, Week
from app.repos.store import Store
from app.services.auth_service import register_user

logger = logging.getLogger(__name__)

PHASES: list[tuple[int, str, str, int, int]] = [
    (1, "Foundation", "Learn Dart basics and Flutter fundamentals", 1, 8),
    (2, "Intermediate", "Master state management, APIs, and databases", 9, 16),
    (
        3,
        "Advanced & Portfolio",
        "Advanced topics, testing, deployment, and capstone projects",
        17,
        26,
    ),
]

WEEKS: list[tuple[int, str, str]] = [
    (1, "Flutter setup + Dart basics", "Variables, control flow"),
    (2, "Dart functions, null safety + first Flutter widgets", "Functions and basic widgets"),
    (3, "Layout widgets", "Row, Column, Stack, ListView"),
    (4, "Forms & interactivity", "TextField, Buttons, Checkbox, Themes"),
    (5, "Stateful widgets + simple state management", "Navigation basics"),
    (6, "Packages & persistence", "shared_preferences, intl, loading indicators"),
    (7, "Consolidation", "Review & polish todo app, deploy to web"),
    (8, "Mini-project", "Daily Journal app, edit/delete entries, sort by date"),
    (9, "State Management intro", "Riverpod, Provider, Notifier, ConsumerWidget"),
    (10, "Riverpod deep dive", "flutter_bloc overview, undo/redo functionality"),
    (11, "Navigation", "go_router, routes, path/query params, tabs"),
    (12, "APIs & Networking", "http, dio, JSON parsing, FutureBuilder"),
    (13, "Advanced APIs", "POST/PUT/DELETE, auth, caching"),
    (14, "Local DB & Cloud", "hive, drift/sqflite, Firebase, Firestore"),
    (15, "Cloud integration", "StreamBuilder, Riverpod + Firebase, offline support"),
    (16, "Intermediate consolidation", "Build a News Reader app"),
    (17, "Animations", "AnimatedContainer, Hero, AnimationController"),
    (18, "UI polish & responsive", "MediaQuery, LayoutBuilder, themes, accessibility"),
    (19, "Testing", "Unit, widget and integration tests"),
    (20, "Performance & optimization", "DevTools, const constructors, list optimization"),
    (21, "Deployment", "Android/iOS/web builds and store releases"),
    (22, "Capstone Project 1 Start", "E-commerce clone"),
    (23, "Capstone Project 1 Finish", "Animations, tests, polish, deploy"),
    (24, "Capstone Project 2", "Chat/News/Social app skeleton"),
    (25, "Capstone Project 3 + Portfolio", "Your own idea, polished and deployed"),
    (26, "Final review & next steps", "Fix bugs, update GitHub, explore advanced topics"),
]

_RESOURCES = Resources(
    resources=(
        Resource(title="Flutter Documentation", url="https://docs.flutter.dev"),
        Resource(title="Dart Language Tour", url="https://dart.dev/language"),
    )
)


async def seed_course(store: Store) -> bool:
    """Create the default phases and weeks if no phase exists yet."""
    if await store.courses.list_phases():
        return False

    now = int(time.time())
    for number, title, description, start, end in PHASES:
        phase = Phase.new(
            number=number,
            title=title,
            description=description,
            start_week=start,
            end_week=end,
        )
        await store.courses.add_phase(phase)
        for week_number, week_title, week_description in WEEKS[start - 1 : end]:
            week = Week.new(
                phase_id=phase.id,
                week_number=week_number,
                title=week_title,
                description=week_description,
            )
            await store.courses.add_week(week)
            await store.courses.put_content(
                WeekContent(
                    week_id=week.id,
                    blocks=(
                        Instructions(
                            text=f"Week {week_number}: {week_title}\n\n{week_description}"
                        ),
                        Assignment(
                            description=(
                                f"Complete the week {week_number} assignment: "
                                f"{week_description}. Submit a GitHub link or a file."
                            )
                        ),
                        _RESOURCES,
                    ),
                    is_published=True,
                    updated_at=now,
                )
            )
    logger.info("Seeded course phases=%d weeks=%d", len(PHASES), len(WEEKS))
    return True


async def seed_admin(store: Store, *, email: str, password: str) -> bool:
    if await store.users.get_by_email(email) is not None:
        return False
    await register_user(
        store.users,
        email=email,
        password=password,
        name="Course Administrator",
        role="admin",
    )
    return True

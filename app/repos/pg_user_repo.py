"""PostgreSQL implementation of UserRepo."""

from __future__ import annotations

from collections.abc import Callable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.engine import insert_unique
from app.db.tables import UserRow
from app.models.user import User


class PgUserRepo:
    """Satisfies the UserRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: UUID) -> User | None:
        stmt = select(UserRow).where(UserRow.id == user_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_user(row) if row is not None else None

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(UserRow).where(UserRow.email == email.strip().lower())
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_user(row) if row is not None else None

    async def add(self, user: User) -> None:
        row = UserRow(id=user.id)
        _apply(row, user)
        await insert_unique(self._session, row, "email already exists")

    async def update(
        self, user_id: UUID, mutate: Callable[[User], User]
    ) -> User | None:
        # row lock held until the request transaction ends
        stmt = (
            select(UserRow)
            .where(UserRow.id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        updated = mutate(_row_to_user(row))
        _apply(row, updated)
        await self._session.flush()
        return updated

    async def list_students(self) -> list[User]:
        stmt = (
            select(UserRow)
            .where(UserRow.role == "student")
            .order_by(UserRow.created_at, UserRow.email)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_user(r) for r in rows]


def _apply(row: UserRow, user: User) -> None:
    row.email = user.email
    row.password_hash = user.password_hash
    row.name = user.name
    row.role = user.role
    row.is_active = user.is_active
    row.current_phase = user.current_phase
    row.awaiting_approval_phase = user.awaiting_approval_phase
    row.created_at = user.created_at
    row.last_login_at = user.last_login_at


def _row_to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        name=row.name or "",
        role=row.role,  # type: ignore[arg-type]
        is_active=row.is_active,
        current_phase=row.current_phase,
        awaiting_approval_phase=row.awaiting_approval_phase,
        created_at=row.created_at,
        last_login_at=row.last_login_at,
    )

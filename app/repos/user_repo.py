from __future__ import annotations

from collections.abc import Callable
from typing import Protocol
from uuid import UUID

from app.models.user import User
from app.repos.locks import KeyedLocks


class UserRepo(Protocol):
    async def get_by_id(self, user_id: UUID) -> User | None: ...
    async def get_by_email(self, email: str) -> User | None: ...
    async def add(self, user: User) -> None: ...
    async def update(
        self, user_id: UUID, mutate: Callable[[User], User]
    ) -> User | None: ...
    async def list_students(self) -> list[User]: ...


class InMemoryUserRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, User] = {}
        self._locks = KeyedLocks()

    async def get_by_id(self, user_id: UUID) -> User | None:
        return self._by_id.get(user_id)

    async def get_by_email(self, email: str) -> User | None:
        email = email.strip().lower()
        for u in self._by_id.values():
            if u.email == email:
                return u
        return None

    async def add(self, user: User) -> None:
        if await self.get_by_email(user.email) is not None:
            raise ValueError("email already exists")
        self._by_id[user.id] = user

    async def update(
        self, user_id: UUID, mutate: Callable[[User], User]
    ) -> User | None:
        """Apply *mutate* to the latest stored user under that user's lock.

        Returns None when the user does not exist.  If *mutate* raises,
        nothing is stored.
        """
        with self._locks.hold(user_id):
            current = self._by_id.get(user_id)
            if current is None:
                return None
            updated = mutate(current)
            self._by_id[user_id] = updated
            return updated

    async def list_students(self) -> list[User]:
        students = [u for u in self._by_id.values() if u.role == "student"]
        return sorted(students, key=lambda u: (u.created_at, u.email))

    def clear(self) -> None:
        self._by_id.clear()

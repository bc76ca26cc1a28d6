from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from uuid import UUID, uuid4

Role = Literal["student", "admin"]


@dataclass(frozen=True, slots=True)
class User:
    id: UUID
    email: str
    password_hash: str
    name: str = ""
    role: Role = "student"
    is_active: bool = True
    # unlock state; only the unlock evaluator and admin approval move these
    current_phase: int = 1
    awaiting_approval_phase: int | None = None
    created_at: int = 0
    last_login_at: int | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @staticmethod
    def new(
        *,
        email: str,
        password_hash: str,
        name: str = "",
        role: Role = "student",
        created_at: int = 0,
    ) -> User:
        return User(
            id=uuid4(),
            email=email.strip().lower(),
            password_hash=password_hash,
            name=name,
            role=role,
            created_at=created_at,
        )

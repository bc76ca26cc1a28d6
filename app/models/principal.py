from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity extracted from a validated access token.

    Every mutating service call takes one, so each change is attributable to
    a student or an admin.
    """

    user_id: str
    roles: frozenset[str]

    @property
    def id(self) -> UUID:
        return UUID(self.user_id)

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def is_admin(self) -> bool:
        return "admin" in self.roles

    def is_student(self) -> bool:
        return "student" in self.roles
